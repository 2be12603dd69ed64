# tests/services/test_media.py
"""Tests for the local media store."""

import os

from forum_stage.services.media import LocalMediaStore, MediaOwner


def test_store_writes_blob(media_store: LocalMediaStore) -> None:
    stored = media_store.store(b"hello", MediaOwner(user_id=7, filename="Notes.TXT"))

    assert stored is not None
    assert stored.id.startswith("post/7-")
    assert stored.id.endswith(".txt")
    assert stored.url == f"/media/{stored.id}"
    with open(os.path.join(media_store.root, *stored.id.split("/")), "rb") as handle:
        assert handle.read() == b"hello"


def test_store_uses_refer_folder(media_store: LocalMediaStore) -> None:
    stored = media_store.store(b"x", MediaOwner(user_id=1, refer="avatar"))

    assert stored.id.startswith("avatar/1-")


def test_empty_blob_is_skipped(media_store: LocalMediaStore) -> None:
    assert media_store.store(b"", MediaOwner(user_id=1)) is None


def test_unwritable_root_returns_none(tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    store = LocalMediaStore(root=str(blocker), base_url="/media")

    assert store.store(b"data", MediaOwner(user_id=1)) is None


def test_delete_removes_file(media_store: LocalMediaStore) -> None:
    stored = media_store.store(b"bye", MediaOwner(user_id=2))
    path = os.path.join(media_store.root, *stored.id.split("/"))

    media_store.delete(stored.id)

    assert not os.path.exists(path)


def test_delete_missing_file_is_quiet(media_store: LocalMediaStore, caplog) -> None:
    caplog.set_level("INFO", logger="forum_stage.services.media")

    media_store.delete("post/1-missing.png")

    assert "already removed" in caplog.text
