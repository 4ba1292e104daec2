"""Store interfaces consumed by the services; implemented in this package over SQLAlchemy."""

from abc import ABC, abstractmethod

from newsdesk.models import Comment, News


class NewsStore(ABC):
    """Persistence port for News records."""

    @abstractmethod
    async def find_by_id(self, news_id: str) -> News | None:
        """Return the news with *news_id*, or None."""
        ...

    @abstractmethod
    async def find_page(self, page: int, limit: int) -> list[News]:
        """Return one zero-based page of news in insertion order."""
        ...

    @abstractmethod
    async def search_by_term(self, term: str, page: int, limit: int) -> list[News]:
        """Return one page of matching news, best score first."""
        ...

    @abstractmethod
    async def save(self, news: News) -> News:
        """Insert (assigning an id) or overwrite *news* and return it."""
        ...

    @abstractmethod
    async def delete_by_id(self, news_id: str) -> None:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...


class CommentStore(ABC):
    """Persistence port for Comment records."""

    @abstractmethod
    async def find_by_id(self, comment_id: str) -> Comment | None:
        ...

    @abstractmethod
    async def find_page_by_news_id(self, news_id: str, page: int, limit: int) -> list[Comment]:
        """Return one zero-based page of the comments of *news_id*."""
        ...

    @abstractmethod
    async def find_all_by_news_id(self, news_id: str) -> list[Comment]:
        ...

    @abstractmethod
    async def save_all(self, comments: list[Comment]) -> list[Comment]:
        """Insert *comments* in order, assigning ids, and return them."""
        ...

    @abstractmethod
    async def delete_by_id(self, comment_id: str) -> None:
        ...

    @abstractmethod
    async def delete_all_by_news_id(self, news_id: str) -> None:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
