# src/forum_stage/models/user.py
"""SQLAlchemy model for forum participants."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_stage.db.session import Base
from forum_stage.db.time import utcnow

ROLE_STUDENT = "student"
ROLE_INSTRUCTOR = "instructor"
ROLE_MODERATOR = "moderator"
USER_ROLES = (ROLE_STUDENT, ROLE_INSTRUCTOR, ROLE_MODERATOR)


class User(Base):
    """Identity and role as resolved by the external authentication service."""

    __tablename__ = "forum_user"
    __table_args__ = (
        CheckConstraint(
            "role IN ('student', 'instructor', 'moderator')",
            name="ck_forum_user_role",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_STUDENT)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def is_instructor(self) -> bool:
        """Return True when the user holds the instructor role."""
        return self.role == ROLE_INSTRUCTOR

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role}>"
