from fastapi import APIRouter, Depends, Query
from newsdesk.dependencies import PaginationParams, get_comment_service, get_news_service
from newsdesk.schemas import CommentDto, NewsDto, NewsWithComments
from newsdesk.services.comment_service import CommentService
from newsdesk.services.news_service import NewsService

router = APIRouter(prefix="/api/v1/news", tags=["news"])

@router.get("", response_model=list[NewsDto])
async def list_news(
    term: str | None = Query(None, description="Full-text search term."),
    pagination: PaginationParams = Depends(),
    service: NewsService = Depends(get_news_service),
):
    if term is not None:
        return await service.search(term, pagination.page, pagination.limit)
    return await service.read_all(pagination.page, pagination.limit)

@router.get("/{news_id}", response_model=NewsWithComments)
async def get_news(
    news_id: str,
    pagination: PaginationParams = Depends(),
    service: NewsService = Depends(get_news_service),
):
    return await service.read_by_id(news_id, pagination.page, pagination.limit)

@router.post("", status_code=201, response_model=NewsWithComments)
async def create_news(data: NewsWithComments, service: NewsService = Depends(get_news_service)):
    return await service.create(data)

@router.put("/{news_id}", response_model=NewsWithComments)
async def update_news(
    news_id: str,
    data: NewsWithComments,
    service: NewsService = Depends(get_news_service),
):
    # The path id wins over any id in the body.
    data = data.model_copy(update={"news": data.news.model_copy(update={"id": news_id})})
    return await service.update(data)

@router.delete("/{news_id}", status_code=204)
async def delete_news(news_id: str, service: NewsService = Depends(get_news_service)):
    await service.delete(news_id)

@router.get("/{news_id}/comments", response_model=list[CommentDto])
async def list_news_comments(news_id: str, service: CommentService = Depends(get_comment_service)):
    return await service.read_all_by_news_id(news_id)
