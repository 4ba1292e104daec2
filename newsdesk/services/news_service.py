"""
News service: business logic for the News + Comments aggregate.

Design notes
------------
- Reads go through the cache-aside pattern (cache → fallback to the
  stores).  Keys are derived with ``make_key`` from every argument that
  shapes the result, so two reads share an entry only when they would
  return the same document.  List, search and detail entries live in
  separate namespaces.
- A news item and its comments are stored separately and assembled into
  a ``NewsWithComments`` on read.  The detail entry embeds one specific
  comment page, so each (id, page, limit) is its own cache entry.
- Writes touch the news store first, then the comment store.  There is
  no compensation if the second step fails: a create can leave a news
  item without comments, a delete can leave a news item whose comments
  are already gone.
- Every successful write purges the list and search namespaces (and the
  detail entries of the news item it touched).  Given an ``after_commit``
  hook the purge is queued until the transaction commits, so a reader
  racing the write cannot put the old row back into the cache.
- ``update`` loads its base state from the stores, never from the cache.
- Validation collects every violation before raising ``ValidationError``.
"""
import logging
from datetime import datetime, timezone
from functools import partial

from newsdesk.cache import CacheManager, cache, make_key
from newsdesk.config import settings
from newsdesk.exceptions import (
    EmptyResultError,
    InvalidArgumentError,
    NotFoundError,
    ValidationError,
)
from newsdesk.models import Comment, News
from newsdesk.repositories import CommentStore, NewsStore
from newsdesk.schemas import CommentDto, NewsDto, NewsWithComments
from newsdesk.services.renovator import renovate
from newsdesk.validators import (
    validate_create_payload,
    validate_id,
    validate_paging,
    validate_search_term,
    validate_update_payload,
)

logger = logging.getLogger(__name__)

NEWS_EMPTY_LIST = "No news found for the requested page"
NEWS_NOT_FOUND = "News not found"


# ---------------------------------------------------------------------------
# Entity <-> DTO mapping
# ---------------------------------------------------------------------------

def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def news_to_dto(news: News) -> NewsDto:
    return NewsDto(
        id=news.id,
        title=news.title,
        body=news.body,
        date=_as_utc(news.date),
        score=news.score,
    )


def comment_to_dto(comment: Comment) -> CommentDto:
    return CommentDto(
        id=comment.id,
        news_id=comment.news_id,
        text=comment.text,
        date=_as_utc(comment.date),
    )


def _news_to_entity(dto: NewsDto) -> News:
    return News(id=dto.id, title=dto.title, body=dto.body, date=dto.date)


def _raise_if_invalid(errors: list[str], exc_class=InvalidArgumentError) -> None:
    if errors:
        raise exc_class(errors)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class NewsService:

    def __init__(
        self,
        news_store: NewsStore,
        comment_store: CommentStore,
        cache_manager: CacheManager | None = None,
        after_commit=None,
    ) -> None:
        self.news_store = news_store
        self.comment_store = comment_store
        self.cache = cache if cache_manager is None else cache_manager
        self.after_commit = after_commit

    async def _invalidate(self, news_id: str | None = None) -> None:
        if self.after_commit is None:
            await self.cache.invalidate_news(news_id)
        else:
            self.after_commit(partial(self.cache.invalidate_news, news_id))

    async def create(self, view: NewsWithComments) -> NewsWithComments:
        """
        Persist a news item together with its initial comments.

        Caller-supplied ids and dates are discarded: the news item and
        every comment get one shared creation timestamp, and the comments
        get the new news id as their foreign key.
        """
        create_date = datetime.now(timezone.utc)
        news = view.news.model_copy(update={"id": None, "date": create_date, "score": None})
        comments = [
            c.model_copy(update={"id": None, "news_id": None, "date": create_date})
            for c in view.comments
        ]
        _raise_if_invalid(
            validate_create_payload(NewsWithComments(news=news, comments=comments)),
            ValidationError,
        )

        created = await self.news_store.save(_news_to_entity(news))
        comment_entities = [
            Comment(text=c.text, date=c.date, news_id=created.id) for c in comments
        ]
        await self.comment_store.save_all(comment_entities)

        await self._invalidate()
        logger.info("Created news id=%s with %d comment(s)", created.id, len(comment_entities))
        return NewsWithComments(
            news=news_to_dto(created),
            comments=[comment_to_dto(c) for c in comment_entities],
        )

    async def read_all(self, page: int, limit: int) -> list[NewsDto]:
        """Return one page of news in insertion order, without comments."""
        _raise_if_invalid(validate_paging(page, limit))

        namespace, key = self.cache.list_namespace, make_key(page, limit)
        cached = await self.cache.get_collection(namespace, key)
        if cached is not None:
            logger.debug("Cache hit %s:%s", namespace, key)
            return [NewsDto.model_validate(item) for item in cached]

        items = [news_to_dto(n) for n in await self.news_store.find_page(page, limit)]
        if not items:
            raise EmptyResultError(NEWS_EMPTY_LIST)

        await self.cache.put_collection(namespace, key, [n.model_dump(mode="json") for n in items])
        return items

    async def search(self, term: str, page: int, limit: int) -> list[NewsDto]:
        """Return one page of news matching *term*, most relevant first."""
        _raise_if_invalid(validate_search_term(term) + validate_paging(page, limit))

        namespace, key = self.cache.search_namespace, make_key(term, page, limit)
        cached = await self.cache.get_collection(namespace, key)
        if cached is not None:
            logger.debug("Cache hit %s:%s", namespace, key)
            return [NewsDto.model_validate(item) for item in cached]

        items = [news_to_dto(n) for n in await self.news_store.search_by_term(term, page, limit)]
        if not items:
            raise EmptyResultError(NEWS_EMPTY_LIST)

        await self.cache.put_collection(namespace, key, [n.model_dump(mode="json") for n in items])
        return items

    async def read_by_id(
        self,
        news_id: str,
        page: int | None = None,
        limit: int | None = None,
    ) -> NewsWithComments:
        """
        Return the news item *news_id* with one page of its comments.

        A page past the last comment yields an empty comment list, not an
        error.
        """
        page = settings.DEFAULT_PAGE if page is None else page
        limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
        _raise_if_invalid(validate_id(news_id) + validate_paging(page, limit))

        namespace, key = self.cache.detail_namespace, make_key(news_id, page, limit)
        cached = await self.cache.get_single(namespace, key)
        if cached is not None:
            logger.debug("Cache hit %s:%s", namespace, key)
            return NewsWithComments.model_validate(cached)

        view = await self._load(news_id, page, limit)
        await self.cache.put_single(namespace, key, view.model_dump(mode="json"))
        return view

    async def _load(self, news_id: str, page: int, limit: int) -> NewsWithComments:
        news = await self.news_store.find_by_id(news_id)
        if news is None:
            raise NotFoundError(NEWS_NOT_FOUND)
        comments = await self.comment_store.find_page_by_news_id(news_id, page, limit)
        return NewsWithComments(
            news=news_to_dto(news),
            comments=[comment_to_dto(c) for c in comments],
        )

    async def update(self, view: NewsWithComments) -> NewsWithComments:
        """
        Patch the news item identified by ``view.id``.

        Only non-empty title/body values are applied; everything else keeps
        its stored value.  Comments are returned as read but never written.
        The base state is read from the stores: a cached copy may predate a
        write that has committed but not yet been purged.
        """
        _raise_if_invalid(validate_id(view.id))
        existing = await self._load(view.id, settings.DEFAULT_PAGE, settings.DEFAULT_PAGE_SIZE)
        merged = renovate(view, existing)
        _raise_if_invalid(validate_update_payload(merged), ValidationError)

        saved = await self.news_store.save(_news_to_entity(merged.news))

        await self._invalidate(saved.id)
        logger.info("Updated news id=%s", saved.id)
        return NewsWithComments(news=news_to_dto(saved), comments=merged.comments)

    async def delete(self, news_id: str) -> None:
        """Delete a news item and all of its comments (comments first)."""
        _raise_if_invalid(validate_id(news_id))
        if await self.news_store.find_by_id(news_id) is None:
            raise NotFoundError(NEWS_NOT_FOUND)

        await self.comment_store.delete_all_by_news_id(news_id)
        await self.news_store.delete_by_id(news_id)

        await self._invalidate(news_id)
        logger.info("Deleted news id=%s", news_id)
