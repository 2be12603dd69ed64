"""Resolved caller identity consumed by the services."""

from __future__ import annotations

from dataclasses import dataclass

from forum_stage.models.user import ROLE_INSTRUCTOR, ROLE_MODERATOR, User


@dataclass(frozen=True)
class Actor:
    """Already-authenticated caller: a user id and its role."""

    user_id: int
    role: str

    @classmethod
    def from_user(cls, user: User) -> Actor:
        return cls(user_id=user.id, role=user.role)

    @property
    def is_instructor(self) -> bool:
        return self.role == ROLE_INSTRUCTOR

    @property
    def is_moderator(self) -> bool:
        return self.role == ROLE_MODERATOR

    @property
    def can_moderate(self) -> bool:
        """Instructors and moderators may remove other users' replies."""
        return self.is_instructor or self.is_moderator
