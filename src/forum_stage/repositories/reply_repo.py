"""Data access helpers for working with replies."""
from __future__ import annotations

from sqlalchemy import asc, desc, func, select
from sqlalchemy.orm import Session

from forum_stage.models.reply import Reply
from forum_stage.models.vote import ReplyVote

__all__ = ["ReplyRepository"]


class ReplyRepository:
    """Thin wrapper around database access for reply entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, reply_id: int) -> Reply | None:
        """Return a reply by identifier, deleted or not."""
        return self.session.get(Reply, reply_id)

    def add(self, reply: Reply) -> Reply:
        self.session.add(reply)
        self.session.flush()
        return reply

    def list_top_level(self, post_id: int) -> list[Reply]:
        """Active top-level replies: highest score first, then oldest, then id."""
        result = self.session.scalars(
            select(Reply)
            .where(
                Reply.post_id == post_id,
                Reply.parent_reply_id.is_(None),
                Reply.is_deleted.is_(False),
            )
            .order_by(desc(Reply.vote_score), asc(Reply.created_at), asc(Reply.id))
        )
        return list(result)

    def list_children(self, parent_reply_id: int) -> list[Reply]:
        """Active direct children in chronological order."""
        result = self.session.scalars(
            select(Reply)
            .where(
                Reply.parent_reply_id == parent_reply_id,
                Reply.is_deleted.is_(False),
            )
            .order_by(asc(Reply.created_at), asc(Reply.id))
        )
        return list(result)

    def list_for_post(self, post_id: int) -> list[Reply]:
        """Every reply of a post, tombstones included, in one round-trip."""
        result = self.session.scalars(select(Reply).where(Reply.post_id == post_id))
        return list(result)

    def list_accepted(self, post_id: int) -> list[Reply]:
        """Replies of a post currently flagged as the accepted answer."""
        result = self.session.scalars(
            select(Reply).where(
                Reply.post_id == post_id,
                Reply.is_accepted_answer.is_(True),
            )
        )
        return list(result)

    def list_by_author(self, author_id: int, *, offset: int, limit: int) -> tuple[list[Reply], int]:
        """Active replies written by ``author_id``, newest first."""
        criteria = (Reply.author_id == author_id, Reply.is_deleted.is_(False))
        total = self.session.scalar(select(func.count(Reply.id)).where(*criteria)) or 0
        rows = self.session.scalars(
            select(Reply)
            .where(*criteria)
            .order_by(desc(Reply.created_at), desc(Reply.id))
            .offset(offset)
            .limit(limit)
        )
        return list(rows), int(total)

    def votes_for_post(self, post_id: int) -> list[ReplyVote]:
        """All reply vote rows under a post."""
        result = self.session.scalars(
            select(ReplyVote)
            .join(Reply, Reply.id == ReplyVote.reply_id)
            .where(Reply.post_id == post_id)
        )
        return list(result)
