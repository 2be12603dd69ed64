"""Acceptance coordinator: the single-accepted-answer state machine.

A post is ``Unanswered`` until an instructor accepts one of its replies (or
marks the post answered directly), after which it stays ``Answered``. Accepting
another reply moves the flag; it never leaves zero or two accepted replies.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from forum_stage.db.time import utcnow
from forum_stage.models.post import Post
from forum_stage.models.reply import Reply
from forum_stage.repositories.reply_repo import ReplyRepository
from forum_stage.services.actor import Actor
from forum_stage.services.atomic import run_atomic
from forum_stage.services.errors import NotFoundError, PermissionDeniedError
from forum_stage.services.voting import touch_activity

logger = logging.getLogger(__name__)

STATE_UNANSWERED = "unanswered"
STATE_ANSWERED = "answered"


@dataclass(frozen=True)
class AcceptanceResult:
    post: Post
    reply: Reply | None
    displaced_reply_ids: tuple[int, ...] = ()


def answer_state(post: Post) -> str:
    """Return the state-machine state of ``post``."""
    return STATE_ANSWERED if post.is_answered else STATE_UNANSWERED


class AcceptanceCoordinator:
    """Sole writer of ``Reply.is_accepted_answer`` and the post answer fields."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.replies = ReplyRepository(session)

    @staticmethod
    def _require_instructor(actor: Actor, message: str) -> None:
        if not actor.is_instructor:
            raise PermissionDeniedError(message, entity="post", field="role")

    def _get_post(self, post_id: int) -> Post:
        post = self.session.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found", entity="post")
        return post

    def _get_reply_of(self, post_id: int, reply_id: int) -> Reply:
        reply = self.replies.get_by_id(reply_id)
        if reply is None or reply.is_deleted or reply.post_id != post_id:
            raise NotFoundError("Reply not found", entity="reply", field="reply_id")
        return reply

    def _accept(self, post: Post, reply: Reply, actor: Actor) -> AcceptanceResult:
        displaced = []
        for other in self.replies.list_accepted(post.id):
            if other.id != reply.id:
                other.is_accepted_answer = False
                displaced.append(other.id)
        reply.is_accepted_answer = True
        post.is_answered = True
        post.answered_by = actor.user_id
        post.answered_at = utcnow()
        touch_activity(post)
        return AcceptanceResult(post=post, reply=reply, displaced_reply_ids=tuple(displaced))

    def accept_reply(self, post_id: int, reply_id: int, actor: Actor) -> AcceptanceResult:
        """Make ``reply_id`` the single accepted answer of ``post_id``.

        Clearing the previous acceptance, flagging the new reply and updating the
        post happen in one savepoint; a failure leaves none of them applied.

        Raises:
            PermissionDeniedError: If the actor is not an instructor.
            NotFoundError: If the post or reply is missing, or the reply belongs
                to another post.
            ConflictError: If a concurrent acceptance keeps winning.
        """
        self._require_instructor(actor, "Only instructors can mark replies as accepted")

        def _transition() -> AcceptanceResult:
            post = self._get_post(post_id)
            reply = self._get_reply_of(post_id, reply_id)
            return self._accept(post, reply, actor)

        result = run_atomic(self.session, _transition, entity="post")
        logger.info(
            "Reply %s accepted on post %s by user %s (displaced %s)",
            reply_id,
            post_id,
            actor.user_id,
            list(result.displaced_reply_ids) or "none",
        )
        return result

    def accept_reply_by_id(self, reply_id: int, actor: Actor) -> AcceptanceResult:
        """Accept a reply addressed only by its own id."""
        self._require_instructor(actor, "Only instructors can mark replies as accepted")
        reply = self.replies.get_by_id(reply_id)
        if reply is None or reply.is_deleted:
            raise NotFoundError("Reply not found", entity="reply")
        return self.accept_reply(reply.post_id, reply_id, actor)

    def mark_post_answered(
        self,
        post_id: int,
        actor: Actor,
        reply_id: int | None = None,
    ) -> AcceptanceResult:
        """Mark a post answered, optionally through one of its replies.

        Without ``reply_id`` only the post fields change; no reply is flagged.
        """
        self._require_instructor(actor, "Only instructors can mark posts as answered")
        if reply_id is not None:
            return self.accept_reply(post_id, reply_id, actor)

        def _transition() -> AcceptanceResult:
            post = self._get_post(post_id)
            post.is_answered = True
            post.answered_by = actor.user_id
            post.answered_at = utcnow()
            touch_activity(post)
            return AcceptanceResult(post=post, reply=None)

        result = run_atomic(self.session, _transition, entity="post")
        logger.info("Post %s marked answered by user %s", post_id, actor.user_id)
        return result
