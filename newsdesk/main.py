import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from newsdesk.cache import cache
from newsdesk.config import settings
from newsdesk.exceptions import (
    EmptyResultError,
    InvalidArgumentError,
    NewsdeskError,
    NotFoundError,
    ValidationError,
)
from newsdesk.middleware import TimingMiddleware
from newsdesk.routers import comments, metrics, news

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await cache.connect()  # a failed ping only disables caching
    yield
    # Shutdown
    await cache.disconnect()

app = FastAPI(
    title="Newsdesk API",
    description="News and comments with read-through caching and full-text search",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error mapping
_STATUS_CODES: dict[type[NewsdeskError], int] = {
    ValidationError: 422,
    InvalidArgumentError: 400,
    NotFoundError: 404,
    EmptyResultError: 404,
}

@app.exception_handler(NewsdeskError)
async def newsdesk_error_handler(request: Request, exc: NewsdeskError):
    status_code = _STATUS_CODES.get(type(exc), 400)
    logger.info("%s %s failed: %s %s", request.method, request.url.path, exc.kind, exc.messages)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "messages": exc.messages},
    )

# Routers
app.include_router(news.router)
app.include_router(comments.router)
app.include_router(metrics.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
