"""Domain errors raised by the discussion services.

Every error names its kind and, where known, the offending entity and field so
the request layer can present a specific message.
"""

from __future__ import annotations


class ForumError(RuntimeError):
    """Base exception for all discussion-engine failures."""

    kind = "forum_error"

    def __init__(
        self,
        detail: str,
        *,
        entity: str | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.entity = entity
        self.field = field

    def as_dict(self) -> dict[str, str | None]:
        """Return a serializable description of the failure."""
        return {
            "detail": self.detail,
            "kind": self.kind,
            "entity": self.entity,
            "field": self.field,
        }


class ValidationError(ForumError):
    """Malformed or missing input; the caller must correct it."""

    kind = "validation_error"


class NotFoundError(ForumError):
    """A referenced post, reply or parent does not exist or was deleted."""

    kind = "not_found"


class PermissionDeniedError(ForumError):
    """The actor lacks the required ownership or role."""

    kind = "permission_denied"


class DepthExceededError(ForumError):
    """Creating the reply would nest deeper than the configured maximum."""

    kind = "depth_exceeded"


class ConflictError(ForumError):
    """A concurrent mutation won the optimistic version check.

    Safe to retry by re-reading and reapplying the intended action.
    """

    kind = "conflict"
