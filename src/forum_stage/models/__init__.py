"""SQLAlchemy models for the Forum Stage application."""

from .post import Post
from .reply import Reply
from .user import ROLE_INSTRUCTOR, ROLE_MODERATOR, ROLE_STUDENT, USER_ROLES, User
from .vote import VOTE_DOWN, VOTE_UP, PostVote, ReplyVote, VotableMixin

__all__ = [
    "Post",
    "Reply",
    "User", "ROLE_STUDENT", "ROLE_INSTRUCTOR", "ROLE_MODERATOR", "USER_ROLES",
    "PostVote", "ReplyVote", "VotableMixin", "VOTE_UP", "VOTE_DOWN",
]
