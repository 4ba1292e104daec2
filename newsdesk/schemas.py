from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


# --- Comment ---

class CommentDto(BaseModel):
    id: str | None = None
    news_id: str | None = None
    text: str | None = None
    date: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


# --- News ---

class NewsDto(BaseModel):
    id: str | None = None
    title: str | None = None
    body: str | None = None
    date: datetime | None = None
    score: float | None = None
    model_config = ConfigDict(from_attributes=True)


# --- News with a page of its comments ---

class NewsWithComments(BaseModel):
    """
    Read/write view of one news item plus a page of its comments.

    The two halves are stored separately; this model only exists for the
    duration of a request (and as a cached document).
    """
    news: NewsDto = Field(default_factory=NewsDto)
    comments: list[CommentDto] = []

    @property
    def id(self) -> str | None:
        return self.news.id


# --- Errors ---

class ErrorResponse(BaseModel):
    error: str
    messages: list[str] = []


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_news: int
    total_comments: int
    avg_comments_per_news: float
    cache_info: dict = {}
