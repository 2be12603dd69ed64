# tests/services/test_replies.py
"""Tests for reply creation, depth limits, edits and soft deletion."""

import pytest
from sqlalchemy import func, select

from forum_stage.models import Reply
from forum_stage.services.actor import Actor
from forum_stage.services.errors import (
    DepthExceededError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from forum_stage.services.replies import ReplyStore
from forum_stage.services.voting import reply_votes


def _reply_rows(db_session) -> int:
    return db_session.scalar(select(func.count()).select_from(Reply))


def test_create_top_level_reply(db_session, test_post, instructor) -> None:
    """Top-level replies sit at depth 0 and bump the post's reply count."""
    reply = ReplyStore(db_session).create(
        test_post.id, Actor.from_user(instructor), "  Generators are lazy iterators.  "
    )

    assert reply.depth == 0
    assert reply.parent_reply_id is None
    assert reply.content == "Generators are lazy iterators."
    assert reply.is_instructor_reply is True
    assert reply.is_accepted_answer is False
    assert reply.vote_score == 0
    assert test_post.reply_count == 1


def test_nested_reply_depth_follows_parent(db_session, test_post, student, other_student) -> None:
    store = ReplyStore(db_session)
    parent = store.create(test_post.id, Actor.from_user(student), "Parent")
    child = store.create(
        test_post.id, Actor.from_user(other_student), "Child", parent_reply_id=parent.id
    )

    assert child.depth == parent.depth + 1
    assert child.parent_reply_id == parent.id
    assert child.is_instructor_reply is False


def test_blank_content_rejected(db_session, test_post, student) -> None:
    with pytest.raises(ValidationError) as exc:
        ReplyStore(db_session).create(test_post.id, Actor.from_user(student), "   ")

    assert exc.value.field == "content"
    assert _reply_rows(db_session) == 0


def test_missing_post_rejected(db_session, student) -> None:
    with pytest.raises(NotFoundError) as exc:
        ReplyStore(db_session).create(12345, Actor.from_user(student), "Hello")

    assert exc.value.entity == "post"


def test_parent_from_other_post_rejected(db_session, posts, test_post, author, student) -> None:
    store = ReplyStore(db_session)
    other = posts.create(Actor.from_user(author), title="Other", content="Another question")
    foreign_parent = store.create(other.id, Actor.from_user(student), "Elsewhere")

    with pytest.raises(NotFoundError) as exc:
        store.create(
            test_post.id, Actor.from_user(student), "Cross-post", parent_reply_id=foreign_parent.id
        )

    assert exc.value.field == "parent_reply_id"
    assert test_post.reply_count == 0


def test_depth_limit_enforced(db_session, test_post, student) -> None:
    """Depth 5 is allowed; one more level fails and leaves no record behind."""
    store = ReplyStore(db_session)
    actor = Actor.from_user(student)
    parent_id = None
    for level in range(6):
        reply = store.create(test_post.id, actor, f"Level {level}", parent_reply_id=parent_id)
        parent_id = reply.id
    assert reply.depth == 5
    rows_before = _reply_rows(db_session)

    with pytest.raises(DepthExceededError):
        store.create(test_post.id, actor, "Too deep", parent_reply_id=parent_id)

    assert _reply_rows(db_session) == rows_before
    assert test_post.reply_count == 6


def test_custom_max_depth(db_session, test_post, student) -> None:
    store = ReplyStore(db_session, max_depth=1)
    actor = Actor.from_user(student)
    top = store.create(test_post.id, actor, "Top")
    nested = store.create(test_post.id, actor, "Nested", parent_reply_id=top.id)

    with pytest.raises(DepthExceededError):
        store.create(test_post.id, actor, "Nested again", parent_reply_id=nested.id)


def test_edit_by_author(db_session, test_post, student) -> None:
    store = ReplyStore(db_session)
    reply = store.create(test_post.id, Actor.from_user(student), "Typo")

    edited = store.edit(reply.id, Actor.from_user(student), " Fixed ")

    assert edited.content == "Fixed"


def test_edit_by_other_user_denied(db_session, test_post, student, instructor) -> None:
    store = ReplyStore(db_session)
    reply = store.create(test_post.id, Actor.from_user(student), "Mine")

    with pytest.raises(PermissionDeniedError):
        store.edit(reply.id, Actor.from_user(instructor), "Not yours")

    assert reply.content == "Mine"


class TestSoftDelete:
    """Soft deletion keeps children and hides the reply from listings."""

    def test_author_can_delete(self, db_session, test_post, student) -> None:
        store = ReplyStore(db_session)
        reply = store.create(test_post.id, Actor.from_user(student), "Oops")

        store.soft_delete(reply.id, Actor.from_user(student))

        assert reply.is_deleted is True
        assert reply.deleted_by == student.id
        assert reply.deleted_at is not None
        assert test_post.reply_count == 0
        assert store.list_top_level(test_post.id) == []

    def test_moderator_can_delete(self, db_session, test_post, student, moderator) -> None:
        store = ReplyStore(db_session)
        reply = store.create(test_post.id, Actor.from_user(student), "Spam")

        store.soft_delete(reply.id, Actor.from_user(moderator))

        assert reply.is_deleted is True
        assert reply.deleted_by == moderator.id

    def test_other_student_denied(self, db_session, test_post, student, other_student) -> None:
        store = ReplyStore(db_session)
        reply = store.create(test_post.id, Actor.from_user(student), "Keep me")

        with pytest.raises(PermissionDeniedError):
            store.soft_delete(reply.id, Actor.from_user(other_student))

        assert reply.is_deleted is False

    def test_children_survive(self, db_session, test_post, student, other_student) -> None:
        store = ReplyStore(db_session)
        parent = store.create(test_post.id, Actor.from_user(student), "Parent")
        child = store.create(
            test_post.id, Actor.from_user(other_student), "Child", parent_reply_id=parent.id
        )

        store.soft_delete(parent.id, Actor.from_user(student))

        assert [r.id for r in store.list_children(parent.id)] == [child.id]
        assert child.parent_reply_id == parent.id

    def test_deleted_reply_cannot_be_parent(self, db_session, test_post, student) -> None:
        store = ReplyStore(db_session)
        parent = store.create(test_post.id, Actor.from_user(student), "Parent")
        store.soft_delete(parent.id, Actor.from_user(student))

        with pytest.raises(NotFoundError):
            store.create(test_post.id, Actor.from_user(student), "Late", parent_reply_id=parent.id)

    def test_deleting_twice_raises(self, db_session, test_post, student) -> None:
        store = ReplyStore(db_session)
        reply = store.create(test_post.id, Actor.from_user(student), "Once")
        store.soft_delete(reply.id, Actor.from_user(student))

        with pytest.raises(NotFoundError):
            store.soft_delete(reply.id, Actor.from_user(student))


def test_list_top_level_orders_by_score(db_session, test_post, student, other_student) -> None:
    store = ReplyStore(db_session)
    first = store.create(test_post.id, Actor.from_user(student), "First")
    second = store.create(test_post.id, Actor.from_user(student), "Second")
    reply_votes.apply(db_session, second.id, other_student.id, "up")

    assert [r.id for r in store.list_top_level(test_post.id)] == [second.id, first.id]


def test_list_children_of_missing_parent(db_session) -> None:
    with pytest.raises(NotFoundError):
        ReplyStore(db_session).list_children(4242)


def test_list_user_replies_paginates(db_session, test_post, student, other_student) -> None:
    store = ReplyStore(db_session)
    mine = [store.create(test_post.id, Actor.from_user(student), f"Reply {i}") for i in range(3)]
    store.create(test_post.id, Actor.from_user(other_student), "Not mine")
    store.soft_delete(mine[0].id, Actor.from_user(student))

    page = store.list_user_replies(student.id, page=1, limit=1)

    assert page.total_replies == 2
    assert page.total_pages == 2
    assert page.current_page == 1
    assert [r.id for r in page.replies] == [mine[2].id]
