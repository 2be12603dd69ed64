# src/forum_stage/api/v1/endpoints/replies.py
"""Reply-related endpoints for the Forum API."""

from fastapi import APIRouter

from forum_stage.schemas.post import AcceptanceResponse, PostResponse
from forum_stage.schemas.reply import MessageResponse, ReplyResponse, ReplyUpdate
from forum_stage.schemas.vote import VoteResult
from forum_stage.services.acceptance import AcceptanceCoordinator
from forum_stage.services.replies import ReplyStore
from forum_stage.services.voting import VoteDirection, reply_votes

from ..dependencies import ActorDep, SessionDep
from .posts import _vote_result

router = APIRouter(prefix="/replies", tags=["replies"])


@router.put("/{reply_id}", response_model=ReplyResponse)
async def update_reply(
    reply_id: int,
    payload: ReplyUpdate,
    actor: ActorDep,
    db: SessionDep,
) -> ReplyResponse:
    """Edit a reply. Only its author may edit."""
    reply = ReplyStore(db).edit(reply_id, actor, payload.content)
    db.commit()
    return ReplyResponse.model_validate(reply)


@router.delete("/{reply_id}", response_model=MessageResponse)
async def delete_reply(reply_id: int, actor: ActorDep, db: SessionDep) -> MessageResponse:
    """Soft delete a reply; nested replies stay in place."""
    ReplyStore(db).soft_delete(reply_id, actor)
    db.commit()
    return MessageResponse(message="Reply deleted successfully")


@router.post("/{reply_id}/upvote", response_model=VoteResult)
async def upvote_reply(reply_id: int, actor: ActorDep, db: SessionDep) -> VoteResult:
    """Toggle an upvote on a reply."""
    tally = reply_votes.apply(db, reply_id, actor.user_id, VoteDirection.UP)
    db.commit()
    return _vote_result(tally, "Reply", VoteDirection.UP)


@router.post("/{reply_id}/downvote", response_model=VoteResult)
async def downvote_reply(reply_id: int, actor: ActorDep, db: SessionDep) -> VoteResult:
    """Toggle a downvote on a reply."""
    tally = reply_votes.apply(db, reply_id, actor.user_id, VoteDirection.DOWN)
    db.commit()
    return _vote_result(tally, "Reply", VoteDirection.DOWN)


@router.post("/{reply_id}/accept", response_model=AcceptanceResponse)
async def accept_reply(reply_id: int, actor: ActorDep, db: SessionDep) -> AcceptanceResponse:
    """Mark a reply as the accepted answer of its post (instructors only)."""
    result = AcceptanceCoordinator(db).accept_reply_by_id(reply_id, actor)
    db.commit()
    return AcceptanceResponse(
        message="Reply marked as accepted answer",
        post=PostResponse.model_validate(result.post),
        reply=ReplyResponse.model_validate(result.reply),
    )
