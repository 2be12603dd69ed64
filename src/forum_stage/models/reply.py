# src/forum_stage/models/reply.py
"""SQLAlchemy model for threaded replies."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forum_stage.db.session import Base
from forum_stage.db.time import utcnow
from forum_stage.models.vote import VotableMixin

if TYPE_CHECKING:
    from forum_stage.models.post import Post
    from forum_stage.models.user import User


class Reply(VotableMixin, Base):
    """A reply to a post, optionally nested under another reply of the same post.

    Depth is assigned once at creation from an already persisted parent, so the
    parent chain strictly increases in depth and cannot form cycles.
    """

    __tablename__ = "reply"
    __table_args__ = (
        CheckConstraint("depth >= 0", name="ck_reply_depth_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forum_user.id"),
        nullable=False,
        index=True,
    )
    # Back-reference only; top-level replies have parent_reply_id = NULL.
    parent_reply_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("reply.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_accepted_answer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Snapshot of the author's role at creation time.
    is_instructor_reply: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("forum_user.id"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    post: Mapped[Post] = relationship("Post", back_populates="replies")
    author: Mapped[User] = relationship("User", foreign_keys=[author_id], lazy="joined")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Reply id={self.id} post={self.post_id} depth={self.depth}>"
