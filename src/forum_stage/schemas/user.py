"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict


class AuthorInfo(BaseModel):
    """Populated author reference attached to posts and replies."""

    id: int
    full_name: str
    avatar_url: str | None = None
    role: str

    model_config = ConfigDict(from_attributes=True)
