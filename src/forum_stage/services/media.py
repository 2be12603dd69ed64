"""Media store collaborator for post attachments.

The discussion core only needs ``store`` and ``delete``. A store that cannot
persist a blob returns ``None`` and the caller skips the attachment.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from typing import Protocol

from forum_stage.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaOwner:
    """Context describing who uploads a blob and for what."""

    user_id: int
    filename: str = ""
    refer: str = "post"


@dataclass(frozen=True)
class StoredMedia:
    """Identifier and public URL of a stored blob."""

    id: str
    url: str


class MediaStore(Protocol):
    def store(self, blob: bytes, owner: MediaOwner) -> StoredMedia | None: ...

    def delete(self, media_id: str) -> None: ...


class LocalMediaStore:
    """Keeps blobs on the local filesystem under ``root/<refer>/``."""

    def __init__(self, root: str | None = None, base_url: str | None = None) -> None:
        self.root = root or settings.media_root
        self.base_url = (base_url or settings.media_base_url).rstrip("/")

    def _path_for(self, media_id: str) -> str:
        return os.path.join(self.root, *media_id.split("/"))

    def store(self, blob: bytes, owner: MediaOwner) -> StoredMedia | None:
        """Write ``blob`` and return its id and URL, or None on failure."""
        if not blob:
            return None
        _, ext = os.path.splitext(owner.filename or "")
        media_id = f"{owner.refer}/{owner.user_id}-{uuid.uuid4().hex}{ext.lower()}"
        path = self._path_for(media_id)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as handle:
                handle.write(blob)
        except OSError as exc:
            logger.warning("Media upload failed for user %s: %s", owner.user_id, exc)
            return None
        return StoredMedia(id=media_id, url=f"{self.base_url}/{media_id}")

    def delete(self, media_id: str) -> None:
        """Remove a stored blob; missing files and IO failures are only logged."""
        path = self._path_for(media_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.info("Media %s already removed", media_id)
        except OSError as exc:
            logger.warning("Media delete failed for %s: %s", media_id, exc)


def get_media_store() -> MediaStore:
    """Return the configured media store."""
    return LocalMediaStore()
