from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from newsdesk.database import get_db
from newsdesk.repositories import SqlCommentStore, SqlNewsStore
from newsdesk.schemas import MetricsResponse
from newsdesk.cache import cache

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])

@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):

    total_news = await SqlNewsStore(db).count()

    total_comments = await SqlCommentStore(db).count()

    avg_comments = total_comments / total_news if total_news > 0 else 0

    return MetricsResponse(
        total_news=total_news,
        total_comments=total_comments,
        avg_comments_per_news=round(avg_comments, 2),
        cache_info=cache.stats,
    )
