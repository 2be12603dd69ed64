# src/forum_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import posts_router, replies_router, users_router

__all__ = [
    "posts_router",
    "replies_router",
    "users_router",
]
