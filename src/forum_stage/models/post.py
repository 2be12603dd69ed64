# src/forum_stage/models/post.py
"""SQLAlchemy models for discussion posts."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forum_stage.db.session import Base
from forum_stage.db.time import utcnow
from forum_stage.models.vote import VotableMixin

if TYPE_CHECKING:
    from forum_stage.models.reply import Reply
    from forum_stage.models.user import User


class Post(VotableMixin, Base):
    """A question or discussion thread opened by a user.

    Holds its own vote ledger counters, engagement counters and the
    answered state maintained by the acceptance coordinator.
    """

    __tablename__ = "post"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forum_user.id"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="general", index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Optional attachment kept by the external media store.
    media_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_answered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    answered_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("forum_user.id"),
        nullable=True,
    )
    answered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    # Optimistic version counter; a stale write raises StaleDataError on flush.
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    author: Mapped[User] = relationship("User", foreign_keys=[author_id], lazy="joined")
    answered_by_user: Mapped[User | None] = relationship("User", foreign_keys=[answered_by])
    replies: Mapped[list[Reply]] = relationship(
        "Reply",
        back_populates="post",
        passive_deletes="all",
        order_by="Reply.created_at",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Post id={self.id} score={self.vote_score} answered={self.is_answered}>"
