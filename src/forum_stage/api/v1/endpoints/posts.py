# src/forum_stage/api/v1/endpoints/posts.py
"""Post-related endpoints for the Forum API."""

import base64
import binascii

from fastapi import APIRouter, HTTPException, Query, status

from forum_stage.schemas.post import (
    AcceptanceResponse,
    MarkAnsweredRequest,
    PostCreate,
    PostDetailResponse,
    PostPageResponse,
    PostResponse,
    PostUpdate,
)
from forum_stage.schemas.reply import (
    MessageResponse,
    ReplyCreate,
    ReplyNodeResponse,
    ReplyResponse,
)
from forum_stage.schemas.vote import VoteResult
from forum_stage.services.acceptance import AcceptanceCoordinator
from forum_stage.services.posts import MediaUpload, PostAggregate
from forum_stage.services.replies import ReplyStore
from forum_stage.services.tree import TreeMaterializer
from forum_stage.services.voting import VoteDirection, post_votes

from ..dependencies import ActorDep, MediaStoreDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


def _decode_media(payload: PostCreate) -> MediaUpload | None:
    if not payload.media_base64:
        return None
    try:
        blob = base64.b64decode(payload.media_base64, validate=True)
    except (binascii.Error, ValueError) as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Attachment is not valid base64",
        ) from err
    return MediaUpload(blob=blob, filename=payload.media_filename or "")


def _vote_result(tally, kind: str, direction: VoteDirection) -> VoteResult:
    if tally.retracted:
        message = f"{direction.value.capitalize()}vote removed"
    else:
        message = f"{kind} {direction.value}voted"
    return VoteResult(
        message=message,
        upvotes=tally.upvotes,
        downvotes=tally.downvotes,
        vote_score=tally.vote_score,
        my_vote=tally.my_vote,
    )


@router.get("/", response_model=PostPageResponse)
async def list_posts(
    db: SessionDep,
    sort_by: str = Query("latest", description="latest, votes, activity or unanswered"),
    category: str | None = Query(None, description="Category filter; 'all' disables it"),
    search: str | None = Query(None, description="Case-insensitive title/content/tag search"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
) -> PostPageResponse:
    """List posts with sorting, filtering and pagination."""
    result = PostAggregate(db).list_posts(
        sort_by=sort_by, category=category, search=search, page=page, limit=limit
    )
    return PostPageResponse(
        posts=[PostResponse.model_validate(post) for post in result.posts],
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_posts=result.total_posts,
        has_next=result.has_next,
        has_prev=result.has_prev,
    )


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    actor: ActorDep,
    db: SessionDep,
    media_store: MediaStoreDep,
) -> PostResponse:
    """Create a post, attaching media when the upload succeeds."""
    post = PostAggregate(db, media_store).create(
        actor,
        title=payload.title,
        content=payload.content,
        category=payload.category,
        tags=payload.tags,
        media=_decode_media(payload),
    )
    db.commit()
    return PostResponse.model_validate(post)


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post(post_id: int, db: SessionDep) -> PostDetailResponse:
    """Get a post with its reply tree. Every read counts as a view."""
    post = PostAggregate(db).view(post_id)
    db.commit()
    tree = TreeMaterializer(db).materialize(post_id)
    return PostDetailResponse(
        **PostResponse.model_validate(post).model_dump(),
        replies=[ReplyNodeResponse.from_node(node) for node in tree.roots],
    )


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    payload: PostUpdate,
    actor: ActorDep,
    db: SessionDep,
) -> PostResponse:
    """Edit a post. Only the author may edit."""
    post = PostAggregate(db).update(post_id, actor, **payload.model_dump(exclude_unset=True))
    db.commit()
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    actor: ActorDep,
    db: SessionDep,
    media_store: MediaStoreDep,
) -> MessageResponse:
    """Delete a post with all of its replies."""
    aggregate = PostAggregate(db, media_store)
    removal = aggregate.delete(post_id, actor)
    db.commit()
    aggregate.discard_media(removal.media_id)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/upvote", response_model=VoteResult)
async def upvote_post(post_id: int, actor: ActorDep, db: SessionDep) -> VoteResult:
    """Toggle an upvote on a post."""
    tally = post_votes.apply(db, post_id, actor.user_id, VoteDirection.UP)
    db.commit()
    return _vote_result(tally, "Post", VoteDirection.UP)


@router.post("/{post_id}/downvote", response_model=VoteResult)
async def downvote_post(post_id: int, actor: ActorDep, db: SessionDep) -> VoteResult:
    """Toggle a downvote on a post."""
    tally = post_votes.apply(db, post_id, actor.user_id, VoteDirection.DOWN)
    db.commit()
    return _vote_result(tally, "Post", VoteDirection.DOWN)


@router.post("/{post_id}/answer", response_model=AcceptanceResponse)
async def mark_post_answered(
    post_id: int,
    actor: ActorDep,
    db: SessionDep,
    payload: MarkAnsweredRequest | None = None,
) -> AcceptanceResponse:
    """Mark a post answered, optionally accepting one of its replies."""
    reply_id = payload.reply_id if payload else None
    result = AcceptanceCoordinator(db).mark_post_answered(post_id, actor, reply_id=reply_id)
    db.commit()
    return AcceptanceResponse(
        message="Post marked as answered",
        post=PostResponse.model_validate(result.post),
        reply=ReplyResponse.model_validate(result.reply) if result.reply else None,
    )


@router.get("/{post_id}/tree", response_model=list[ReplyNodeResponse])
async def get_reply_tree(post_id: int, db: SessionDep) -> list[ReplyNodeResponse]:
    """Return the nested reply tree without counting a view."""
    tree = TreeMaterializer(db).materialize(post_id)
    return [ReplyNodeResponse.from_node(node) for node in tree.roots]


@router.get("/{post_id}/replies", response_model=list[ReplyResponse])
async def list_replies(
    post_id: int,
    db: SessionDep,
    parent_reply_id: int | None = Query(None, description="List children of this reply"),
) -> list[ReplyResponse]:
    """List active top-level replies, or the children of ``parent_reply_id``."""
    store = ReplyStore(db)
    if parent_reply_id is None:
        replies = store.list_top_level(post_id)
    else:
        replies = [r for r in store.list_children(parent_reply_id) if r.post_id == post_id]
    return [ReplyResponse.model_validate(reply) for reply in replies]


@router.post(
    "/{post_id}/replies",
    response_model=ReplyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reply(
    post_id: int,
    payload: ReplyCreate,
    actor: ActorDep,
    db: SessionDep,
) -> ReplyResponse:
    """Reply to a post or, with ``parent_reply_id``, to another reply."""
    reply = ReplyStore(db).create(
        post_id, actor, payload.content, parent_reply_id=payload.parent_reply_id
    )
    db.commit()
    return ReplyResponse.model_validate(reply)
