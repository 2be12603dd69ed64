"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .reply import ReplyNodeResponse, ReplyResponse
from .user import AuthorInfo


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    title: str = Field(..., description="Question title")
    content: str = Field(..., description="Question body")
    category: str | None = Field(None, description="Category label; defaults to general")
    tags: list[str] | str | None = Field(
        None, description="Tag list or comma-separated string, at most 10 kept"
    )
    media_base64: str | None = Field(None, description="Optional base64-encoded attachment")
    media_filename: str | None = Field(None, description="Original attachment filename")


class PostUpdate(BaseModel):
    """Schema for editing a post; omitted fields stay unchanged."""

    title: str | None = None
    content: str | None = None
    category: str | None = None
    tags: list[str] | str | None = None


class MarkAnsweredRequest(BaseModel):
    reply_id: int | None = Field(None, description="Reply to accept while marking the post answered")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    category: str
    tags: list[str]
    media_url: str | None
    author: AuthorInfo
    upvotes: int
    downvotes: int
    vote_score: int
    views: int
    reply_count: int
    is_answered: bool
    answered_by: int | None
    answered_at: datetime | None
    created_at: datetime
    updated_at: datetime
    last_activity: datetime

    model_config = ConfigDict(from_attributes=True)


class PostDetailResponse(PostResponse):
    """A post with its materialized reply tree."""

    replies: list[ReplyNodeResponse] = Field(default_factory=list)


class PostPageResponse(BaseModel):
    posts: list[PostResponse]
    current_page: int
    total_pages: int
    total_posts: int
    has_next: bool
    has_prev: bool


class AcceptanceResponse(BaseModel):
    """Answer state after an acceptance transition."""

    message: str
    post: PostResponse
    reply: ReplyResponse | None = None
