"""index news by date and by full-text search document

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-17
"""
from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

SEARCH_DOCUMENT = (
    "(setweight(to_tsvector('english'::regconfig, title), 'A')"
    " || setweight(to_tsvector('english'::regconfig, body), 'B'))"
)


def _is_postgresql() -> bool:
    return op.get_bind().dialect.name == "postgresql"


def upgrade() -> None:
    op.create_index("ix_news_date", "news", ["date"])
    if _is_postgresql():
        op.execute(f"CREATE INDEX ix_news_search ON news USING gin ({SEARCH_DOCUMENT})")


def downgrade() -> None:
    if _is_postgresql():
        op.drop_index("ix_news_search", table_name="news")
    op.drop_index("ix_news_date", table_name="news")
