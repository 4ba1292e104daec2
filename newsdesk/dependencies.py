from functools import partial

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.database import get_db, run_after_commit
from newsdesk.repositories import SqlCommentStore, SqlNewsStore
from newsdesk.services.comment_service import CommentService
from newsdesk.services.news_service import NewsService


class PaginationParams:
    """
    Reusable FastAPI dependency that parses and validates pagination
    query parameters.

    Attributes
    ----------
    page:
        0-based page number.
    limit:
        Number of items per page, clamped to ``settings.MAX_PAGE_SIZE``
        regardless of the value supplied by the caller.
    """

    def __init__(
        self,
        page: int = Query(
            settings.DEFAULT_PAGE,
            ge=0,
            description="Page number (0-based).",
        ),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=100,
            description="Number of items returned per page (max 100).",
        ),
    ) -> None:
        self.page = page
        self.limit = min(limit, settings.MAX_PAGE_SIZE)


def get_news_service(db: AsyncSession = Depends(get_db)) -> NewsService:
    return NewsService(
        SqlNewsStore(db),
        SqlCommentStore(db),
        after_commit=partial(run_after_commit, db),
    )


def get_comment_service(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(SqlCommentStore(db), after_commit=partial(run_after_commit, db))
