"""
SQLAlchemy implementation of the News store.

Pages are ordered by ``date`` then ``id``: insertion order across
processes, with the per-process id counter breaking ties between rows
created in the same instant.  Writes are flushed, never committed; the
request's ``get_db`` dependency owns the transaction.

Search ranks with PostgreSQL full-text search (``ts_rank`` over the
weighted document served by the ``ix_news_search`` GIN index).  Other
dialects, SQLite in the test suite among them, fall back to a portable
substring score.
"""
from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models import SEARCH_CONFIG, News, generate_id, search_document
from newsdesk.repositories.base import NewsStore

# Relevance weight of a term word found in each column (portable fallback).
TITLE_WEIGHT = 2
BODY_WEIGHT = 1


def _score_expression(term: str):
    """
    Sum, over every whitespace-separated word of *term*, of the weights of
    the columns that contain it (case-insensitive).
    """
    score = None
    for word in term.split():
        part = (
            case((News.title.icontains(word, autoescape=True), TITLE_WEIGHT), else_=0)
            + case((News.body.icontains(word, autoescape=True), BODY_WEIGHT), else_=0)
        )
        score = part if score is None else score + part
    return score


def _ts_query(term: str):
    """``tsquery`` matching any word of *term*, stemmed the way the index is."""
    query = None
    for word in term.split():
        part = func.plainto_tsquery(SEARCH_CONFIG, word)
        query = part if query is None else query.op("||")(part)
    return query


def build_search_query(term: str, page: int, limit: int, dialect_name: str):
    """
    Select ``(News, score)`` rows matching *term* for one page, best match
    first.  Returns None when *term* has no words.
    """
    if not term.split():
        return None
    if dialect_name == "postgresql":
        document, query = search_document(), _ts_query(term)
        score = func.ts_rank(document, query)
        matches = document.bool_op("@@")(query)
    else:
        score = _score_expression(term)
        matches = score > 0
    return (
        select(News, score.label("score"))
        .where(matches)
        .order_by(score.desc(), News.date, News.id)
        .offset(page * limit)
        .limit(limit)
    )


class SqlNewsStore(NewsStore):

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_id(self, news_id: str) -> News | None:
        result = await self._db.execute(select(News).where(News.id == news_id))
        return result.scalar_one_or_none()

    async def find_page(self, page: int, limit: int) -> list[News]:
        q = select(News).order_by(News.date, News.id).offset(page * limit).limit(limit)
        result = await self._db.execute(q)
        return list(result.scalars().all())

    async def search_by_term(self, term: str, page: int, limit: int) -> list[News]:
        q = build_search_query(term, page, limit, self._db.get_bind().dialect.name)
        if q is None:
            return []
        result = await self._db.execute(q)
        found: list[News] = []
        for news, value in result.all():
            news.score = float(value)
            found.append(news)
        return found

    async def save(self, news: News) -> News:
        if news.id is None:
            news.id = generate_id()
            self._db.add(news)
        else:
            news = await self._db.merge(news)
        await self._db.flush()
        return news

    async def delete_by_id(self, news_id: str) -> None:
        await self._db.execute(delete(News).where(News.id == news_id))

    async def count(self) -> int:
        result = await self._db.execute(select(func.count()).select_from(News))
        return result.scalar_one()
