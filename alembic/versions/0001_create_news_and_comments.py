"""create news and comments tables

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "news",
        sa.Column("id", sa.String(length=24), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "comments",
        sa.Column("id", sa.String(length=24), primary_key=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("news_id", sa.String(length=24), sa.ForeignKey("news.id"), nullable=False),
    )
    op.create_index("ix_comments_news_id", "comments", ["news_id"])


def downgrade() -> None:
    op.drop_index("ix_comments_news_id", table_name="comments")
    op.drop_table("comments")
    op.drop_table("news")
