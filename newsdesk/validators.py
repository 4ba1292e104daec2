"""
Payload and argument validators.

Each public function inspects a candidate and returns the list of every
violation it finds (empty when the candidate is valid).  Checks never
stop at the first failure, so callers can report everything at once.
"""
import re

from newsdesk.config import settings
from newsdesk.schemas import CommentDto, NewsDto, NewsWithComments

_ID_RE = re.compile(r"^[0-9a-f]{24}$")


# ---------------------------------------------------------------------------
# Field checks
# ---------------------------------------------------------------------------

def _check_text(value: str | None, field: str, max_length: int) -> list[str]:
    if value is None or not value.strip():
        return [f"{field} must not be blank"]
    if len(value) > max_length:
        return [f"{field} must be at most {max_length} characters"]
    return []


def _check_news_fields(news: NewsDto) -> list[str]:
    errors = _check_text(news.title, "news.title", settings.TITLE_MAX_LENGTH)
    errors += _check_text(news.body, "news.body", settings.BODY_MAX_LENGTH)
    if news.date is None:
        errors.append("news.date must be set")
    return errors


def _check_new_comment(comment: CommentDto, index: int) -> list[str]:
    field = f"comments[{index}]"
    errors = _check_text(comment.text, f"{field}.text", settings.COMMENT_MAX_LENGTH)
    if comment.date is None:
        errors.append(f"{field}.date must be set")
    return errors


# ---------------------------------------------------------------------------
# Public validators
# ---------------------------------------------------------------------------

def validate_id(value: str | None, field: str = "id") -> list[str]:
    if value is None or not value.strip():
        return [f"{field} must not be blank"]
    if not _ID_RE.match(value):
        return [f"{field} must be a 24 character hexadecimal string"]
    return []


def validate_paging(page: int, limit: int) -> list[str]:
    errors = []
    if page < 0:
        errors.append("page must be zero or greater")
    if limit < 1:
        errors.append("limit must be at least 1")
    elif limit > settings.MAX_PAGE_SIZE:
        errors.append(f"limit must be at most {settings.MAX_PAGE_SIZE}")
    return errors


def validate_search_term(term: str | None) -> list[str]:
    return _check_text(term, "term", settings.TERM_MAX_LENGTH)


def validate_create_payload(view: NewsWithComments) -> list[str]:
    """
    Rules for a brand new news item and the comments created with it.

    Ids are not checked: ``NewsService.create`` discards caller ids before
    validating, so an id in the payload is ignored rather than rejected.
    """
    errors = _check_news_fields(view.news)
    for index, comment in enumerate(view.comments):
        errors += _check_new_comment(comment, index)
    return errors


def validate_update_payload(view: NewsWithComments) -> list[str]:
    """Rules for a merged news item about to overwrite its stored version."""
    errors = validate_id(view.news.id, "news.id")
    errors += _check_news_fields(view.news)
    return errors
