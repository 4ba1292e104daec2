"""
Direct service-layer tests for the News + Comments aggregate.

Stores are the call-counting subclasses from conftest, so each test can
assert whether a read hit the cache or went to the store.
"""
import pytest

from newsdesk.config import settings
from newsdesk.exceptions import (
    EmptyResultError,
    InvalidArgumentError,
    NotFoundError,
    ValidationError,
)
from newsdesk.schemas import CommentDto, NewsDto, NewsWithComments

MISSING_ID = "0" * 24


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _payload(title="A", body="B", comments=()) -> NewsWithComments:
    return NewsWithComments(
        news=NewsDto(title=title, body=body),
        comments=[CommentDto(text=text) for text in comments],
    )


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_news_with_comments(news_service):
    result = await news_service.create(_payload("A", "B", ["c1", "c2"]))

    assert result.id is not None
    assert result.news.title == "A"
    assert result.news.body == "B"
    assert len(result.comments) == 2
    assert [c.text for c in result.comments] == ["c1", "c2"]
    for comment in result.comments:
        assert comment.id is not None
        assert comment.news_id == result.id
    assert result.news.date == result.comments[0].date == result.comments[1].date


@pytest.mark.asyncio
async def test_create_without_comments(news_service):
    result = await news_service.create(_payload())
    assert result.comments == []
    assert result.news.date is not None


@pytest.mark.asyncio
async def test_create_discards_caller_ids_and_dates(news_service):
    existing = await news_service.create(_payload("Existing", "Body"))
    spoofed = NewsWithComments(
        news=NewsDto(id=existing.id, title="New", body="Body"),
        comments=[CommentDto(id="f" * 24, news_id=existing.id, text="spoof")],
    )

    result = await news_service.create(spoofed)

    assert result.id != existing.id
    assert result.comments[0].id != "f" * 24
    assert result.comments[0].news_id == result.id
    # The original record is untouched.
    assert (await news_service.read_by_id(existing.id)).news.title == "Existing"


@pytest.mark.asyncio
async def test_create_reports_every_violation(news_service, news_store, comment_store):
    payload = NewsWithComments(
        news=NewsDto(title="   ", body=None),
        comments=[CommentDto(text="ok"), CommentDto(text="")],
    )

    with pytest.raises(ValidationError) as exc_info:
        await news_service.create(payload)

    messages = exc_info.value.messages
    assert "news.title must not be blank" in messages
    assert "news.body must not be blank" in messages
    assert "comments[1].text must not be blank" in messages
    assert len(messages) == 3
    assert news_store.calls["save"] == 0
    assert comment_store.calls["save_all"] == 0


@pytest.mark.asyncio
async def test_create_rejects_oversized_title(news_service):
    with pytest.raises(ValidationError) as exc_info:
        await news_service.create(_payload(title="x" * (settings.TITLE_MAX_LENGTH + 1)))
    assert exc_info.value.messages == [
        f"news.title must be at most {settings.TITLE_MAX_LENGTH} characters"
    ]


# ---------------------------------------------------------------------------
# read_all
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_read_all_empty_store_then_one(news_service):
    with pytest.raises(EmptyResultError):
        await news_service.read_all(0, 10)

    await news_service.create(_payload())

    result = await news_service.read_all(0, 10)
    assert len(result) == 1


@pytest.mark.asyncio
async def test_read_all_served_from_cache(news_service, news_store):
    await news_service.create(_payload("First", "Body"))

    first = await news_service.read_all(0, 10)
    second = await news_service.read_all(0, 10)

    assert first == second
    assert news_store.calls["find_page"] == 1


@pytest.mark.asyncio
async def test_read_all_paginates_in_insertion_order(news_service):
    for title in ("one", "two", "three"):
        await news_service.create(_payload(title, "Body"))

    page0 = await news_service.read_all(0, 2)
    page1 = await news_service.read_all(1, 2)

    assert [n.title for n in page0] == ["one", "two"]
    assert [n.title for n in page1] == ["three"]


@pytest.mark.asyncio
async def test_read_all_out_of_range_page(news_service):
    await news_service.create(_payload())
    with pytest.raises(EmptyResultError):
        await news_service.read_all(5, 10)


@pytest.mark.asyncio
async def test_read_all_rejects_bad_paging(news_service, news_store):
    with pytest.raises(InvalidArgumentError):
        await news_service.read_all(-1, 10)
    with pytest.raises(InvalidArgumentError):
        await news_service.read_all(0, 0)
    assert news_store.calls["find_page"] == 0


@pytest.mark.asyncio
async def test_create_invalidates_list_cache(news_service, news_store):
    await news_service.create(_payload("one", "Body"))
    assert len(await news_service.read_all(0, 10)) == 1

    await news_service.create(_payload("two", "Body"))

    assert len(await news_service.read_all(0, 10)) == 2
    assert news_store.calls["find_page"] == 2


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_search_ranks_title_matches_first(news_service):
    await news_service.create(_payload("Weather today", "Python in the body only"))
    await news_service.create(_payload("Python release", "Notes about Python"))
    await news_service.create(_payload("Sports", "Nothing relevant"))

    result = await news_service.search("python", 0, 10)

    assert [n.title for n in result] == ["Python release", "Weather today"]
    assert result[0].score > result[1].score


@pytest.mark.asyncio
async def test_search_ties_keep_store_order(news_service):
    await news_service.create(_payload("Redis one", "Body"))
    await news_service.create(_payload("Redis two", "Body"))

    result = await news_service.search("redis", 0, 10)

    assert [n.title for n in result] == ["Redis one", "Redis two"]


@pytest.mark.asyncio
async def test_search_no_match(news_service):
    await news_service.create(_payload("Sports", "Football"))
    with pytest.raises(EmptyResultError):
        await news_service.search("elections", 0, 10)


@pytest.mark.asyncio
@pytest.mark.parametrize("term", ["", "   ", None, "x" * 101])
async def test_search_rejects_bad_term_before_store(news_service, news_store, term):
    with pytest.raises(InvalidArgumentError):
        await news_service.search(term, 0, 10)
    assert news_store.calls["search_by_term"] == 0


@pytest.mark.asyncio
async def test_search_served_from_cache(news_service, news_store):
    await news_service.create(_payload("Python", "Body"))

    first = await news_service.search("python", 0, 10)
    second = await news_service.search("python", 0, 10)

    assert first == second
    assert news_store.calls["search_by_term"] == 1


@pytest.mark.asyncio
async def test_search_and_list_entries_do_not_collide(news_service, news_store):
    await news_service.create(_payload("Python", "Body"))
    await news_service.create(_payload("Other", "Body"))

    searched = await news_service.search("python", 0, 10)
    listed = await news_service.read_all(0, 10)

    assert len(searched) == 1
    assert len(listed) == 2
    assert news_store.calls["find_page"] == 1


# ---------------------------------------------------------------------------
# read_by_id
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_read_by_id_defaults(news_service):
    created = await news_service.create(_payload("A", "B", [f"c{i}" for i in range(12)]))

    result = await news_service.read_by_id(created.id)

    assert result.news.title == "A"
    assert len(result.comments) == settings.DEFAULT_PAGE_SIZE


@pytest.mark.asyncio
async def test_read_by_id_comment_pages(news_service):
    created = await news_service.create(_payload("A", "B", [f"c{i}" for i in range(5)]))

    page0 = await news_service.read_by_id(created.id, 0, 2)
    page2 = await news_service.read_by_id(created.id, 2, 2)
    past_end = await news_service.read_by_id(created.id, 5, 2)

    assert [c.text for c in page0.comments] == ["c0", "c1"]
    assert [c.text for c in page2.comments] == ["c4"]
    assert past_end.comments == []


@pytest.mark.asyncio
async def test_read_by_id_cache_key_includes_comment_page(news_service, news_store):
    created = await news_service.create(_payload("A", "B", ["c1", "c2", "c3"]))

    await news_service.read_by_id(created.id, 0, 2)
    await news_service.read_by_id(created.id, 0, 2)
    assert news_store.calls["find_by_id"] == 1

    await news_service.read_by_id(created.id, 1, 2)
    assert news_store.calls["find_by_id"] == 2


@pytest.mark.asyncio
async def test_read_by_id_cached_value_is_equal(news_service):
    created = await news_service.create(_payload("A", "B", ["c1"]))

    first = await news_service.read_by_id(created.id)
    second = await news_service.read_by_id(created.id)

    assert first == second


@pytest.mark.asyncio
async def test_read_by_id_not_found(news_service):
    with pytest.raises(NotFoundError):
        await news_service.read_by_id(MISSING_ID)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["", "not-an-id", "ABCDEF" * 4, "0" * 23])
async def test_read_by_id_malformed(news_service, news_store, bad_id):
    with pytest.raises(InvalidArgumentError):
        await news_service.read_by_id(bad_id)
    assert news_store.calls["find_by_id"] == 0


def test_not_found_and_empty_result_are_distinct():
    assert not issubclass(NotFoundError, EmptyResultError)
    assert not issubclass(EmptyResultError, NotFoundError)


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_title_only_keeps_other_fields(news_service):
    created = await news_service.create(_payload("Before", "Body", ["c1", "c2"]))
    before = await news_service.read_by_id(created.id)

    updated = await news_service.update(
        NewsWithComments(news=NewsDto(id=created.id, title="After"))
    )
    after = await news_service.read_by_id(created.id)

    assert updated.news.title == "After"
    assert after.news.title == "After"
    assert after.news.body == before.news.body
    assert after.news.date == before.news.date
    assert after.comments == before.comments


@pytest.mark.asyncio
async def test_update_ignores_blank_fields(news_service):
    created = await news_service.create(_payload("Title", "Body"))

    updated = await news_service.update(
        NewsWithComments(news=NewsDto(id=created.id, title="", body="New body"))
    )

    assert updated.news.title == "Title"
    assert updated.news.body == "New body"


@pytest.mark.asyncio
async def test_update_does_not_touch_comments(news_service, comment_store):
    created = await news_service.create(_payload("Title", "Body", ["keep me"]))

    await news_service.update(
        NewsWithComments(
            news=NewsDto(id=created.id, title="Changed"),
            comments=[CommentDto(text="replacement")],
        )
    )

    after = await news_service.read_by_id(created.id)
    assert [c.text for c in after.comments] == ["keep me"]
    assert comment_store.calls["save_all"] == 1  # the create only


@pytest.mark.asyncio
async def test_update_validates_merged_state(news_service, news_store):
    created = await news_service.create(_payload("Title", "Body"))

    with pytest.raises(ValidationError) as exc_info:
        await news_service.update(
            NewsWithComments(
                news=NewsDto(
                    id=created.id,
                    title="t" * (settings.TITLE_MAX_LENGTH + 1),
                    body="b" * (settings.BODY_MAX_LENGTH + 1),
                )
            )
        )

    assert len(exc_info.value.messages) == 2
    assert news_store.calls["save"] == 1  # the create only


@pytest.mark.asyncio
async def test_update_missing_news(news_service):
    with pytest.raises(NotFoundError):
        await news_service.update(NewsWithComments(news=NewsDto(id=MISSING_ID, title="Ghost")))


@pytest.mark.asyncio
async def test_update_without_id(news_service, news_store):
    with pytest.raises(InvalidArgumentError):
        await news_service.update(NewsWithComments(news=NewsDto(title="No id")))
    assert news_store.calls["find_by_id"] == 0


@pytest.mark.asyncio
async def test_update_invalidates_cached_reads(news_service, news_store):
    created = await news_service.create(_payload("Old", "Body"))
    assert (await news_service.read_all(0, 10))[0].title == "Old"
    assert (await news_service.read_by_id(created.id, 0, 5)).news.title == "Old"

    await news_service.update(NewsWithComments(news=NewsDto(id=created.id, title="New")))

    assert (await news_service.read_all(0, 10))[0].title == "New"
    assert (await news_service.read_by_id(created.id, 0, 5)).news.title == "New"


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_removes_news_and_comments(news_service, comment_store):
    created = await news_service.create(_payload("Doomed", "Body", ["c1", "c2"]))
    await news_service.read_by_id(created.id)  # populate the cache

    await news_service.delete(created.id)

    with pytest.raises(NotFoundError):
        await news_service.read_by_id(created.id)
    assert await comment_store.find_all_by_news_id(created.id) == []


@pytest.mark.asyncio
async def test_delete_removes_comments_before_news(news_service, news_store, comment_store):
    created = await news_service.create(_payload())
    await news_service.delete(created.id)
    assert comment_store.calls["delete_all_by_news_id"] == 1
    assert news_store.calls["delete_by_id"] == 1


@pytest.mark.asyncio
async def test_delete_missing_news(news_service, comment_store):
    with pytest.raises(NotFoundError):
        await news_service.delete(MISSING_ID)
    assert comment_store.calls["delete_all_by_news_id"] == 0


@pytest.mark.asyncio
async def test_delete_leaves_other_news(news_service):
    keep = await news_service.create(_payload("Keep", "Body", ["mine"]))
    drop = await news_service.create(_payload("Drop", "Body", ["theirs"]))

    await news_service.delete(drop.id)

    remaining = await news_service.read_all(0, 10)
    assert [n.title for n in remaining] == ["Keep"]
    assert [c.text for c in (await news_service.read_by_id(keep.id)).comments] == ["mine"]
