"""SQLAlchemy implementation of the Comment store."""
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.models import Comment, generate_id
from newsdesk.repositories.base import CommentStore


class SqlCommentStore(CommentStore):

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find_by_id(self, comment_id: str) -> Comment | None:
        result = await self._db.execute(select(Comment).where(Comment.id == comment_id))
        return result.scalar_one_or_none()

    async def find_page_by_news_id(self, news_id: str, page: int, limit: int) -> list[Comment]:
        q = (
            select(Comment)
            .where(Comment.news_id == news_id)
            .order_by(Comment.date, Comment.id)
            .offset(page * limit)
            .limit(limit)
        )
        result = await self._db.execute(q)
        return list(result.scalars().all())

    async def find_all_by_news_id(self, news_id: str) -> list[Comment]:
        q = select(Comment).where(Comment.news_id == news_id).order_by(Comment.date, Comment.id)
        result = await self._db.execute(q)
        return list(result.scalars().all())

    async def save_all(self, comments: list[Comment]) -> list[Comment]:
        # Comments of one create share a date; ids assigned here in list order
        # keep them in input order.
        for comment in comments:
            if comment.id is None:
                comment.id = generate_id()
        self._db.add_all(comments)
        await self._db.flush()
        return comments

    async def delete_by_id(self, comment_id: str) -> None:
        await self._db.execute(delete(Comment).where(Comment.id == comment_id))

    async def delete_all_by_news_id(self, news_id: str) -> None:
        await self._db.execute(delete(Comment).where(Comment.news_id == news_id))

    async def count(self) -> int:
        result = await self._db.execute(select(func.count()).select_from(Comment))
        return result.scalar_one()
