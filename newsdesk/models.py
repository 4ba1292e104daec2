from __future__ import annotations

import itertools
import os
import time
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, func, literal_column
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk.database import Base

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

_PROCESS_TOKEN = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))


def generate_id() -> str:
    """
    Return a new 24-hex-character identifier.

    Layout: 4-byte big-endian epoch seconds, 5 random bytes fixed per
    process, 3-byte rolling counter.  Ids from one process sort in creation
    order until the counter wraps; ids from different processes in the same
    second sort by process token.  Stores therefore order by ``date`` first
    and use the id only to break ties.
    """
    seconds = int(time.time()).to_bytes(4, "big")
    count = (next(_counter) % 0x1000000).to_bytes(3, "big")
    return (seconds + _PROCESS_TOKEN + count).hex()


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------
class News(Base):
    __tablename__ = "news"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    # Relevance score; not a column, set on search results only.
    score = None


# Text search configuration; a constant, so the GIN index below can serve
# queries built from the same expression.
SEARCH_CONFIG = literal_column("'english'::regconfig")


def search_document():
    """Weighted ``tsvector`` of a news row: title words rank above body words."""
    title = func.setweight(func.to_tsvector(SEARCH_CONFIG, News.title), literal_column("'A'"))
    body = func.setweight(func.to_tsvector(SEARCH_CONFIG, News.body), literal_column("'B'"))
    return title.op("||")(body)


Index("ix_news_search", search_document(), postgresql_using="gin").ddl_if(dialect="postgresql")


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # No ON DELETE CASCADE: the service removes comments before their news.
    news_id: Mapped[str] = mapped_column(
        String(24), ForeignKey("news.id"), nullable=False, index=True
    )
