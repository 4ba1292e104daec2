from fastapi import APIRouter, Depends
from newsdesk.dependencies import get_comment_service
from newsdesk.schemas import CommentDto
from newsdesk.services.comment_service import CommentService

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])

@router.get("/{comment_id}", response_model=CommentDto)
async def get_comment(comment_id: str, service: CommentService = Depends(get_comment_service)):
    return await service.read_by_id(comment_id)

@router.delete("/{comment_id}", status_code=204)
async def delete_comment(comment_id: str, service: CommentService = Depends(get_comment_service)):
    await service.delete(comment_id)
