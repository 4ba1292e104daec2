"""
Patch-style merge of a caller's partial news payload onto stored state.
"""
from newsdesk.schemas import NewsWithComments

# Fields a caller may change.  id, date and score are owned by the server.
RENOVATABLE_FIELDS: tuple[str, ...] = ("title", "body")


def _is_supplied(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def renovate(update: NewsWithComments, existing: NewsWithComments) -> NewsWithComments:
    """
    Return a copy of *existing* with every supplied field of *update*
    copied over.  Null or blank fields in *update* keep their stored value.
    Comments always come from *existing*.
    """
    changes = {
        field: value
        for field, value in update.news.model_dump(include=set(RENOVATABLE_FIELDS)).items()
        if _is_supplied(value)
    }
    news = existing.news.model_copy(update=changes)
    return NewsWithComments(
        news=news,
        comments=[c.model_copy() for c in existing.comments],
    )
