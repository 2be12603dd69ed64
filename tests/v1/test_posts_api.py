# tests/v1/test_posts_api.py
"""HTTP tests for the post endpoints."""

import base64
import os

import pytest
from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

from forum_stage.services.actor import Actor
from forum_stage.services.replies import ReplyStore

POSTS = "/api/v1/posts"


def test_create_post(client, author, auth_headers) -> None:
    response = client.post(
        f"{POSTS}/",
        json={"title": "Closures?", "content": "How do they capture?", "tags": "python, scope"},
        headers=auth_headers(author),
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["title"] == "Closures?"
    assert data["category"] == "general"
    assert data["tags"] == ["python", "scope"]
    assert data["author"]["id"] == author.id
    assert data["author"]["full_name"] == "Alice Author"
    assert data["vote_score"] == 0
    assert data["is_answered"] is False


def test_create_post_with_media(client, author, auth_headers) -> None:
    payload = {
        "title": "Screenshot",
        "content": "Error attached",
        "media_base64": base64.b64encode(b"\x89PNG fake").decode(),
        "media_filename": "error.png",
    }

    response = client.post(f"{POSTS}/", json=payload, headers=auth_headers(author))

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["media_url"].startswith("/media/post/")


def test_create_post_rejects_bad_base64(client, author, auth_headers) -> None:
    payload = {"title": "T", "content": "C", "media_base64": "***not base64***"}

    response = client.post(f"{POSTS}/", json=payload, headers=auth_headers(author))

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_post_blank_title(client, author, auth_headers) -> None:
    response = client.post(
        f"{POSTS}/", json={"title": "  ", "content": "Body"}, headers=auth_headers(author)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["kind"] == "validation_error"
    assert body["entity"] == "post"
    assert body["field"] == "title"


def test_create_post_requires_auth(client) -> None:
    response = client.post(f"{POSTS}/", json={"title": "T", "content": "C"})

    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_get_post_counts_view_and_returns_tree(
    client, db_session, test_post, student, other_student
) -> None:
    store = ReplyStore(db_session)
    top = store.create(test_post.id, Actor.from_user(student), "Top")
    store.create(test_post.id, Actor.from_user(other_student), "Nested", parent_reply_id=top.id)

    first = client.get(f"{POSTS}/{test_post.id}")
    second = client.get(f"{POSTS}/{test_post.id}")

    assert first.status_code == status.HTTP_200_OK
    assert first.json()["views"] == 1
    data = second.json()
    assert data["views"] == 2
    assert data["reply_count"] == 2
    assert [r["content"] for r in data["replies"]] == ["Top"]
    assert [r["content"] for r in data["replies"][0]["replies"]] == ["Nested"]


def test_get_missing_post(client) -> None:
    response = client.get(f"{POSTS}/999")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["kind"] == "not_found"


def test_tree_endpoint_does_not_count_views(client, test_post) -> None:
    response = client.get(f"{POSTS}/{test_post.id}/tree")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []
    assert test_post.views == 0


def test_list_posts(client, test_post) -> None:
    response = client.get(f"{POSTS}/", params={"sort_by": "votes", "search": "generators"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total_posts"] == 1
    assert data["posts"][0]["id"] == test_post.id
    assert data["has_next"] is False


def test_update_post_by_author(client, test_post, author, auth_headers) -> None:
    response = client.put(
        f"{POSTS}/{test_post.id}", json={"title": "Generators explained"}, headers=auth_headers(author)
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == "Generators explained"
    assert response.json()["content"] == "I do not understand yield."


def test_update_post_by_other_user(client, test_post, student, auth_headers) -> None:
    response = client.put(
        f"{POSTS}/{test_post.id}", json={"title": "Mine now"}, headers=auth_headers(student)
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["kind"] == "permission_denied"


def test_delete_post(client, test_post, author, auth_headers) -> None:
    response = client.delete(f"{POSTS}/{test_post.id}", headers=auth_headers(author))

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Post deleted successfully"}
    assert client.get(f"{POSTS}/{test_post.id}").status_code == status.HTTP_404_NOT_FOUND


def _post_with_media(client, author, auth_headers) -> dict:
    payload = {
        "title": "Diagram",
        "content": "See attachment",
        "media_base64": base64.b64encode(b"diagram bytes").decode(),
        "media_filename": "diagram.png",
    }
    return client.post(f"{POSTS}/", json=payload, headers=auth_headers(author)).json()


def _media_path(media_store, media_url: str) -> str:
    media_id = media_url.removeprefix("/media/")
    return os.path.join(media_store.root, *media_id.split("/"))


def test_delete_post_removes_media_after_commit(client, media_store, author, auth_headers) -> None:
    created = _post_with_media(client, author, auth_headers)
    path = _media_path(media_store, created["media_url"])
    assert os.path.exists(path)

    response = client.delete(f"{POSTS}/{created['id']}", headers=auth_headers(author))

    assert response.status_code == status.HTTP_200_OK
    assert not os.path.exists(path)


def test_failed_commit_keeps_media(
    client, db_session, media_store, author, auth_headers, monkeypatch
) -> None:
    """An attachment is only removed once the delete is durable."""
    created = _post_with_media(client, author, auth_headers)
    path = _media_path(media_store, created["media_url"])

    def _failing_commit() -> None:
        raise SQLAlchemyError("commit failed")

    monkeypatch.setattr(db_session, "commit", _failing_commit)

    with pytest.raises(SQLAlchemyError):
        client.delete(f"{POSTS}/{created['id']}", headers=auth_headers(author))

    assert os.path.exists(path)


class TestPostVotes:
    def test_upvote_then_retract(self, client, test_post, student, auth_headers) -> None:
        first = client.post(f"{POSTS}/{test_post.id}/upvote", headers=auth_headers(student))
        second = client.post(f"{POSTS}/{test_post.id}/upvote", headers=auth_headers(student))

        assert first.json() == {
            "message": "Post upvoted",
            "upvotes": 1,
            "downvotes": 0,
            "vote_score": 1,
            "my_vote": 1,
        }
        assert second.json()["message"] == "Upvote removed"
        assert second.json()["vote_score"] == 0
        assert second.json()["my_vote"] == 0

    def test_switch_to_downvote(self, client, test_post, student, auth_headers) -> None:
        client.post(f"{POSTS}/{test_post.id}/upvote", headers=auth_headers(student))
        response = client.post(f"{POSTS}/{test_post.id}/downvote", headers=auth_headers(student))

        assert response.json()["message"] == "Post downvoted"
        assert response.json()["upvotes"] == 0
        assert response.json()["downvotes"] == 1
        assert response.json()["vote_score"] == -1

    def test_vote_on_missing_post(self, client, student, auth_headers) -> None:
        response = client.post(f"{POSTS}/4040/upvote", headers=auth_headers(student))

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestMarkAnswered:
    def test_instructor_marks_post(self, client, test_post, instructor, auth_headers) -> None:
        response = client.post(f"{POSTS}/{test_post.id}/answer", headers=auth_headers(instructor))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["post"]["is_answered"] is True
        assert data["post"]["answered_by"] == instructor.id
        assert data["reply"] is None

    def test_with_reply(self, client, db_session, test_post, student, instructor, auth_headers) -> None:
        reply = ReplyStore(db_session).create(test_post.id, Actor.from_user(student), "Answer")

        response = client.post(
            f"{POSTS}/{test_post.id}/answer",
            json={"reply_id": reply.id},
            headers=auth_headers(instructor),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["reply"]["id"] == reply.id
        assert response.json()["reply"]["is_accepted_answer"] is True

    def test_student_forbidden(self, client, test_post, author, auth_headers) -> None:
        response = client.post(f"{POSTS}/{test_post.id}/answer", headers=auth_headers(author))

        assert response.status_code == status.HTTP_403_FORBIDDEN
