"""JWT helpers for resolving the caller identity.

Credentials are issued by the external authentication service; this module only
decodes bearer tokens into a user id. ``create_access_token`` mirrors the
issuer's token shape for tooling and tests.
"""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from forum_stage.core.settings import settings
from forum_stage.db.time import utcnow


class InvalidTokenError(ValueError):
    """Raised when a bearer token cannot be decoded into a subject."""


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    """Return a signed access token whose subject is ``user_id``."""
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload = {
        "sub": str(user_id),
        "exp": utcnow() + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """Return the user id carried by ``token``.

    Raises:
        InvalidTokenError: If the signature, expiry or subject is invalid.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise InvalidTokenError("Could not validate credentials") from err

    subject = payload.get("sub")
    if subject is None:
        raise InvalidTokenError("Token has no subject")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise InvalidTokenError("Token subject is not a user id") from err
