"""Business logic services for the Forum Stage application."""

from .acceptance import AcceptanceCoordinator, AcceptanceResult
from .actor import Actor
from .errors import (
    ConflictError,
    DepthExceededError,
    ForumError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .posts import MediaUpload, PostAggregate, PostPage, PostRemoval
from .replies import ReplyPage, ReplyStore
from .tree import ReplyNode, ReplyTree, TreeMaterializer
from .voting import VoteDirection, VoteLedger, VoteTally, apply_vote, post_votes, reply_votes

__all__ = [
    "AcceptanceCoordinator", "AcceptanceResult",
    "Actor",
    "ConflictError", "DepthExceededError", "ForumError", "NotFoundError",
    "PermissionDeniedError", "ValidationError",
    "MediaUpload", "PostAggregate", "PostPage", "PostRemoval",
    "ReplyPage", "ReplyStore",
    "ReplyNode", "ReplyTree", "TreeMaterializer",
    "VoteDirection", "VoteLedger", "VoteTally", "apply_vote", "post_votes", "reply_votes",
]
