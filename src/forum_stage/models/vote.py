# src/forum_stage/models/vote.py
"""Models capturing voting interactions on posts and replies."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, SmallInteger
from sqlalchemy.orm import Mapped, mapped_column

from forum_stage.db.session import Base

VOTE_UP = 1
VOTE_DOWN = -1


class VotableMixin:
    """Denormalized vote counters shared by posts and replies.

    The counters are recounted from the ledger rows on every vote mutation,
    so ``vote_score`` always equals ``upvotes - downvotes``.
    """

    upvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    vote_score: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)

    def apply_tally(self, upvotes: int, downvotes: int) -> None:
        """Store fresh counts and the derived score."""
        self.upvotes = upvotes
        self.downvotes = downvotes
        self.vote_score = upvotes - downvotes


class PostVote(Base):
    """Per-user vote on a post.

    The composite primary key keeps a voter in at most one polarity.
    """

    __tablename__ = "post_vote"
    __table_args__ = (
        CheckConstraint("direction IN (1, -1)", name="ck_post_vote_direction"),
        Index("ix_post_vote_post_id", "post_id"),
    )

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forum_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # 1 = upvote, -1 = downvote.
    direction: Mapped[int] = mapped_column(SmallInteger, nullable=False)


class ReplyVote(Base):
    """Per-user vote on a reply."""

    __tablename__ = "reply_vote"
    __table_args__ = (
        CheckConstraint("direction IN (1, -1)", name="ck_reply_vote_direction"),
        Index("ix_reply_vote_reply_id", "reply_id"),
    )

    reply_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("reply.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forum_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    direction: Mapped[int] = mapped_column(SmallInteger, nullable=False)
