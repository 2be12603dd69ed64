"""Data access helpers for discussion entities."""

from .post_repo import PostRepository
from .reply_repo import ReplyRepository

__all__ = ["PostRepository", "ReplyRepository"]
