"""Run read-then-write operations as a single atomic unit."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from forum_stage.services.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected
_CONTENTION_SQLSTATES = frozenset({"40001", "40P01"})
_CONTENTION_MESSAGES = ("database is locked", "database table is locked")


def is_lock_contention(exc: OperationalError) -> bool:
    """Return True when ``exc`` reports a competing writer rather than a broken database."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) in _CONTENTION_SQLSTATES:
        return True
    if getattr(orig, "pgcode", None) in _CONTENTION_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(text in message for text in _CONTENTION_MESSAGES)


def run_atomic(
    db: Session,
    operation: Callable[[], T],
    *,
    retries: int = 1,
    entity: str | None = None,
) -> T:
    """Execute ``operation`` inside a SAVEPOINT and flush it.

    Any exception rolls the savepoint back, so no partial state survives. A
    ``StaleDataError`` from the optimistic version check is retried up to
    ``retries`` times against freshly loaded state; after that it is surfaced
    as ``ConflictError``.

    Lock contention reported by the database (another transaction holds the
    write lock) cannot be retried inside the same transaction: the whole
    session transaction is rolled back and ``ConflictError`` is raised so the
    caller can reapply the action.

    Args:
        db: Active session.
        operation: Callable that reads and mutates ORM state.
        retries: Number of re-attempts after a version conflict.
        entity: Entity label used in the conflict error.

    Returns:
        Whatever ``operation`` returns.
    """
    attempt = 0
    while True:
        try:
            with db.begin_nested():
                result = operation()
            return result
        except StaleDataError as exc:
            if attempt >= retries:
                raise ConflictError(
                    "Concurrent update detected, please retry",
                    entity=entity,
                ) from exc
            attempt += 1
            logger.info("Version conflict on %s, retrying (attempt %d)", entity or "entity", attempt)
            db.expire_all()
        except OperationalError as exc:
            if not is_lock_contention(exc):
                raise
            logger.warning("Write lock contention on %s, rolling back", entity or "entity")
            db.rollback()
            raise ConflictError(
                "Another update is in progress, please retry",
                entity=entity,
            ) from exc
