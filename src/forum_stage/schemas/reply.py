"""Reply-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .user import AuthorInfo


class ReplyCreate(BaseModel):
    """Schema for creating a new reply."""

    content: str = Field(..., description="Reply body; must not be blank")
    parent_reply_id: int | None = Field(None, description="Parent reply for nested replies")


class ReplyUpdate(BaseModel):
    """Schema for editing a reply."""

    content: str


class ReplyResponse(BaseModel):
    """Schema for a single reply returned by the API."""

    id: int
    post_id: int
    parent_reply_id: int | None
    content: str
    depth: int
    author: AuthorInfo
    upvotes: int
    downvotes: int
    vote_score: int
    is_accepted_answer: bool
    is_instructor_reply: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReplyNodeResponse(BaseModel):
    """A node of the materialized reply tree; tombstones have no content or author."""

    id: int
    post_id: int
    parent_reply_id: int | None
    depth: int
    content: str | None
    author: AuthorInfo | None
    upvotes: int
    downvotes: int
    vote_score: int
    upvoter_ids: list[int]
    downvoter_ids: list[int]
    is_accepted_answer: bool
    is_instructor_reply: bool
    is_deleted: bool
    created_at: datetime
    updated_at: datetime
    replies: list[ReplyNodeResponse] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node) -> ReplyNodeResponse:
        return cls(
            id=node.id,
            post_id=node.post_id,
            parent_reply_id=node.parent_reply_id,
            depth=node.depth,
            content=node.content,
            author=AuthorInfo.model_validate(node.author) if node.author is not None else None,
            upvotes=node.upvotes,
            downvotes=node.downvotes,
            vote_score=node.vote_score,
            upvoter_ids=node.upvoter_ids,
            downvoter_ids=node.downvoter_ids,
            is_accepted_answer=node.is_accepted_answer,
            is_instructor_reply=node.is_instructor_reply,
            is_deleted=node.is_deleted,
            created_at=node.created_at,
            updated_at=node.updated_at,
            replies=[cls.from_node(child) for child in node.children],
        )


class ReplyPageResponse(BaseModel):
    """A page of replies written by one user."""

    replies: list[ReplyResponse]
    current_page: int
    total_pages: int
    total_replies: int


class MessageResponse(BaseModel):
    message: str


ReplyNodeResponse.model_rebuild()
