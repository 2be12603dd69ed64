# src/forum_stage/api/v1/endpoints/users.py
"""User-scoped listing endpoints."""

from fastapi import APIRouter, Query

from forum_stage.schemas.reply import ReplyPageResponse, ReplyResponse
from forum_stage.services.replies import ReplyStore

from ..dependencies import SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/replies", response_model=ReplyPageResponse)
async def list_user_replies(
    user_id: int,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
) -> ReplyPageResponse:
    """List a user's active replies, newest first."""
    result = ReplyStore(db).list_user_replies(user_id, page=page, limit=limit)
    return ReplyPageResponse(
        replies=[ReplyResponse.model_validate(reply) for reply in result.replies],
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_replies=result.total_replies,
    )
