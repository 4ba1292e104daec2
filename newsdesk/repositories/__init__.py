from newsdesk.repositories.base import CommentStore, NewsStore
from newsdesk.repositories.comment import SqlCommentStore
from newsdesk.repositories.news import SqlNewsStore

__all__ = [
    "CommentStore",
    "NewsStore",
    "SqlCommentStore",
    "SqlNewsStore",
]
