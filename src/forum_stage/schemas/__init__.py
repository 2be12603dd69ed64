"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import (
    AcceptanceResponse,
    MarkAnsweredRequest,
    PostCreate,
    PostDetailResponse,
    PostPageResponse,
    PostResponse,
    PostUpdate,
)
from .reply import (
    MessageResponse,
    ReplyCreate,
    ReplyNodeResponse,
    ReplyPageResponse,
    ReplyResponse,
    ReplyUpdate,
)
from .user import AuthorInfo
from .vote import VoteResult

__all__ = [
    "AcceptanceResponse", "MarkAnsweredRequest", "PostCreate", "PostDetailResponse",
    "PostPageResponse", "PostResponse", "PostUpdate",
    "MessageResponse", "ReplyCreate", "ReplyNodeResponse", "ReplyPageResponse",
    "ReplyResponse", "ReplyUpdate",
    "AuthorInfo",
    "VoteResult",
]
