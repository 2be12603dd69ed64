"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from forum_stage.core.security import InvalidTokenError, decode_access_token
from forum_stage.db.session import get_db
from forum_stage.models import User
from forum_stage.services.actor import Actor
from forum_stage.services.media import MediaStore, get_media_store

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Raises:
        HTTPException: If the token is invalid or the user does not exist.
    """
    try:
        user_id = decode_access_token(credentials.credentials)
    except InvalidTokenError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_actor(user: Annotated[User, Depends(get_current_user)]) -> Actor:
    """Resolve the caller into the ``{user_id, role}`` pair used by services."""
    return Actor.from_user(user)


def get_media_store_dep() -> MediaStore:
    """Return the configured media store."""
    return get_media_store()


CurrentUserDep = Annotated[User, Depends(get_current_user)]
ActorDep = Annotated[Actor, Depends(get_current_actor)]
MediaStoreDep = Annotated[MediaStore, Depends(get_media_store_dep)]
