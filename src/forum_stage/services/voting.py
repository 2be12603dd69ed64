"""Vote ledger shared by posts and replies.

A vote is a toggle: repeating a direction retracts it, choosing the other
direction moves the voter across. Counts are recounted from the ledger rows
after each mutation so the stored score is never stale.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from forum_stage.db.time import as_utc, utcnow
from forum_stage.models.post import Post
from forum_stage.models.reply import Reply
from forum_stage.models.vote import VOTE_DOWN, VOTE_UP, PostVote, ReplyVote
from forum_stage.services.atomic import run_atomic
from forum_stage.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"

    @property
    def value_int(self) -> int:
        return VOTE_UP if self is VoteDirection.UP else VOTE_DOWN

    @classmethod
    def parse(cls, raw: str | VoteDirection) -> VoteDirection:
        try:
            return cls(raw)
        except ValueError as err:
            raise ValidationError(
                f"Unknown vote direction: {raw!r}", field="direction"
            ) from err


@dataclass(frozen=True)
class VoteTally:
    """Counts after a vote plus the caller's standing direction (1, -1 or 0)."""

    entity_id: int
    upvotes: int
    downvotes: int
    vote_score: int
    my_vote: int
    retracted: bool


def touch_activity(post: Post) -> None:
    """Advance ``last_activity`` to now without ever moving it backwards."""
    now = utcnow()
    current = as_utc(post.last_activity)
    post.last_activity = now if current is None or now > current else current


class VoteLedger:
    """Toggle votes for one kind of votable entity."""

    def __init__(self, entity_model: type[Post] | type[Reply], vote_model, fk_name: str) -> None:
        self.entity_model = entity_model
        self.vote_model = vote_model
        self.fk_column = getattr(vote_model, fk_name)
        self.fk_name = fk_name
        self.entity_label = entity_model.__tablename__

    def _load_entity(self, db: Session, entity_id: int):
        entity = db.get(self.entity_model, entity_id)
        if entity is None or getattr(entity, "is_deleted", False):
            raise NotFoundError(
                f"{self.entity_label.capitalize()} not found",
                entity=self.entity_label,
            )
        return entity

    def _owning_post(self, db: Session, entity) -> Post | None:
        if isinstance(entity, Post):
            return entity
        return db.get(Post, entity.post_id)

    def count(self, db: Session, entity_id: int) -> tuple[int, int]:
        """Return ``(upvotes, downvotes)`` straight from the ledger rows."""
        rows = db.execute(
            select(self.vote_model.direction, func.count())
            .where(self.fk_column == entity_id)
            .group_by(self.vote_model.direction)
        ).all()
        counts = {direction: total for direction, total in rows}
        return int(counts.get(VOTE_UP, 0)), int(counts.get(VOTE_DOWN, 0))

    def voters(self, db: Session, entity_id: int) -> tuple[set[int], set[int]]:
        """Return the upvoter and downvoter id sets."""
        rows = db.execute(
            select(self.vote_model.voter_id, self.vote_model.direction)
            .where(self.fk_column == entity_id)
        ).all()
        up = {voter for voter, direction in rows if direction == VOTE_UP}
        down = {voter for voter, direction in rows if direction == VOTE_DOWN}
        return up, down

    def direction_for(self, db: Session, entity_id: int, voter_id: int) -> int:
        """Return the voter's current direction, 0 if none."""
        vote = db.get(self.vote_model, {self.fk_name: entity_id, "voter_id": voter_id})
        return vote.direction if vote is not None else 0

    def apply(
        self,
        db: Session,
        entity_id: int,
        voter_id: int,
        direction: VoteDirection | str,
    ) -> VoteTally:
        """Toggle ``voter_id``'s vote on the entity and recompute its score.

        Raises:
            NotFoundError: If the entity does not exist or was deleted.
            ConflictError: If a concurrent update keeps winning the version check.
        """
        parsed = VoteDirection.parse(direction)
        wanted = parsed.value_int

        def _toggle() -> VoteTally:
            entity = self._load_entity(db, entity_id)
            existing = db.get(self.vote_model, {self.fk_name: entity_id, "voter_id": voter_id})

            retracted = False
            if existing is not None and existing.direction == wanted:
                db.delete(existing)
                retracted = True
            elif existing is not None:
                existing.direction = wanted
            else:
                db.add(self.vote_model(**{self.fk_name: entity_id, "voter_id": voter_id, "direction": wanted}))
            db.flush()

            upvotes, downvotes = self.count(db, entity_id)
            entity.apply_tally(upvotes, downvotes)
            post = self._owning_post(db, entity)
            if post is not None:
                touch_activity(post)
            return VoteTally(
                entity_id=entity_id,
                upvotes=upvotes,
                downvotes=downvotes,
                vote_score=upvotes - downvotes,
                my_vote=0 if retracted else wanted,
                retracted=retracted,
            )

        tally = run_atomic(db, _toggle, entity=self.entity_label)
        logger.info(
            "Vote %s on %s %s by user %s -> score %d",
            "retracted" if tally.retracted else parsed.value,
            self.entity_label,
            entity_id,
            voter_id,
            tally.vote_score,
        )
        return tally


post_votes = VoteLedger(Post, PostVote, "post_id")
reply_votes = VoteLedger(Reply, ReplyVote, "reply_id")


def apply_vote(
    db: Session,
    target: str,
    entity_id: int,
    voter_id: int,
    direction: VoteDirection | str,
) -> VoteTally:
    """Apply a vote to a ``"post"`` or ``"reply"`` target."""
    ledgers = {"post": post_votes, "reply": reply_votes}
    ledger = ledgers.get(target)
    if ledger is None:
        raise ValidationError(f"Unknown vote target: {target!r}", field="target")
    return ledger.apply(db, entity_id, voter_id, direction)
