"""
Comment service: direct access to individual comments.

Comments are created together with their news item (see
``NewsService.create``); this service only reads and removes them.
Removing a comment purges the parent's cached detail pages (after the
commit when an ``after_commit`` hook is given) so the next
read reflects the deletion.
"""
import logging
from functools import partial

from newsdesk.cache import CacheManager, cache
from newsdesk.exceptions import InvalidArgumentError, NotFoundError
from newsdesk.repositories import CommentStore
from newsdesk.schemas import CommentDto
from newsdesk.services.news_service import comment_to_dto
from newsdesk.validators import validate_id

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = "Comment not found"


class CommentService:

    def __init__(
        self,
        comment_store: CommentStore,
        cache_manager: CacheManager | None = None,
        after_commit=None,
    ) -> None:
        self.comment_store = comment_store
        self.cache = cache if cache_manager is None else cache_manager
        self.after_commit = after_commit

    async def read_by_id(self, comment_id: str) -> CommentDto:
        errors = validate_id(comment_id)
        if errors:
            raise InvalidArgumentError(errors)

        comment = await self.comment_store.find_by_id(comment_id)
        if comment is None:
            raise NotFoundError(COMMENT_NOT_FOUND)
        return comment_to_dto(comment)

    async def read_all_by_news_id(self, news_id: str) -> list[CommentDto]:
        """Every comment of *news_id* in store order; uncached and unpaged."""
        errors = validate_id(news_id, "news_id")
        if errors:
            raise InvalidArgumentError(errors)

        return [comment_to_dto(c) for c in await self.comment_store.find_all_by_news_id(news_id)]

    async def delete(self, comment_id: str) -> None:
        comment = await self.read_by_id(comment_id)

        await self.comment_store.delete_by_id(comment_id)

        purge = partial(self.cache.invalidate_news, comment.news_id)
        if self.after_commit is None:
            await purge()
        else:
            self.after_commit(purge)
        logger.info("Deleted comment id=%s of news id=%s", comment_id, comment.news_id)
