"""Reply store: creation, edits, soft deletion and flat listings."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from forum_stage.core.settings import settings
from forum_stage.db.time import utcnow
from forum_stage.models.post import Post
from forum_stage.models.reply import Reply
from forum_stage.repositories.reply_repo import ReplyRepository
from forum_stage.services.actor import Actor
from forum_stage.services.atomic import run_atomic
from forum_stage.services.errors import (
    DepthExceededError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from forum_stage.services.voting import touch_activity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplyPage:
    replies: list[Reply]
    current_page: int
    total_pages: int
    total_replies: int


def clean_content(content: str | None, *, field: str = "content") -> str:
    """Return trimmed content or raise ``ValidationError`` when it is empty or too long."""
    text = (content or "").strip()
    if not text:
        raise ValidationError("Reply content is required", entity="reply", field=field)
    if len(text) > settings.max_content_length:
        raise ValidationError(
            f"Content cannot be more than {settings.max_content_length} characters",
            entity="reply",
            field=field,
        )
    return text


class ReplyStore:
    """Sole writer of reply depth, parent and soft-delete state."""

    def __init__(self, session: Session, max_depth: int | None = None) -> None:
        self.session = session
        self.repo = ReplyRepository(session)
        self.max_depth = settings.max_reply_depth if max_depth is None else max_depth

    def _get_post(self, post_id: int) -> Post:
        post = self.session.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found", entity="post")
        return post

    def get_active(self, reply_id: int) -> Reply:
        """Return a non-deleted reply or raise ``NotFoundError``."""
        reply = self.repo.get_by_id(reply_id)
        if reply is None or reply.is_deleted:
            raise NotFoundError("Reply not found", entity="reply")
        return reply

    def create(
        self,
        post_id: int,
        author: Actor,
        content: str,
        parent_reply_id: int | None = None,
    ) -> Reply:
        """Create a reply under a post, optionally nested under another reply.

        Raises:
            ValidationError: If the content is empty after trimming.
            NotFoundError: If the post or the parent reply (in this post) is missing.
            DepthExceededError: If the resulting depth would exceed the maximum.
        """
        text = clean_content(content)

        def _create() -> Reply:
            post = self._get_post(post_id)
            depth = 0
            if parent_reply_id is not None:
                parent = self.repo.get_by_id(parent_reply_id)
                if parent is None or parent.post_id != post_id or parent.is_deleted:
                    raise NotFoundError(
                        "Parent reply not found", entity="reply", field="parent_reply_id"
                    )
                depth = parent.depth + 1
                if depth > self.max_depth:
                    raise DepthExceededError(
                        f"Maximum nesting depth of {self.max_depth} reached",
                        entity="reply",
                        field="parent_reply_id",
                    )

            reply = self.repo.add(
                Reply(
                    post_id=post_id,
                    author_id=author.user_id,
                    parent_reply_id=parent_reply_id,
                    content=text,
                    depth=depth,
                    is_instructor_reply=author.is_instructor,
                    created_at=utcnow(),
                )
            )
            post.reply_count = (post.reply_count or 0) + 1
            touch_activity(post)
            return reply

        reply = run_atomic(self.session, _create, entity="post")
        logger.info("Reply %s created on post %s at depth %d", reply.id, post_id, reply.depth)
        return reply

    def edit(self, reply_id: int, editor: Actor, new_content: str) -> Reply:
        """Replace a reply's content. Only the author may edit."""
        reply = self.get_active(reply_id)
        if reply.author_id != editor.user_id:
            raise PermissionDeniedError(
                "You can only edit your own replies", entity="reply", field="author"
            )
        text = clean_content(new_content)

        def _edit() -> Reply:
            reply.content = text
            post = self._get_post(reply.post_id)
            touch_activity(post)
            return reply

        return run_atomic(self.session, _edit, entity="reply")

    def soft_delete(self, reply_id: int, requester: Actor) -> Reply:
        """Tombstone a reply. Children are left in place.

        The author, an instructor or a moderator may delete.
        """
        reply = self.get_active(reply_id)
        if reply.author_id != requester.user_id and not requester.can_moderate:
            raise PermissionDeniedError(
                "You can only delete your own replies", entity="reply", field="author"
            )

        def _delete() -> Reply:
            reply.is_deleted = True
            reply.deleted_at = utcnow()
            reply.deleted_by = requester.user_id
            post = self._get_post(reply.post_id)
            post.reply_count = max((post.reply_count or 0) - 1, 0)
            touch_activity(post)
            return reply

        run_atomic(self.session, _delete, entity="reply")
        logger.info("Reply %s soft-deleted by user %s", reply_id, requester.user_id)
        return reply

    def list_top_level(self, post_id: int) -> list[Reply]:
        """Active top-level replies, score descending then oldest first."""
        self._get_post(post_id)
        return self.repo.list_top_level(post_id)

    def list_children(self, parent_reply_id: int) -> list[Reply]:
        """Active direct children of a reply, oldest first."""
        if self.repo.get_by_id(parent_reply_id) is None:
            raise NotFoundError("Parent reply not found", entity="reply", field="parent_reply_id")
        return self.repo.list_children(parent_reply_id)

    def list_user_replies(self, user_id: int, page: int = 1, limit: int | None = None) -> ReplyPage:
        """Active replies by one author, newest first, paginated."""
        page = max(page, 1)
        limit = min(max(limit or settings.default_page_size, 1), settings.max_page_size)
        replies, total = self.repo.list_by_author(user_id, offset=(page - 1) * limit, limit=limit)
        return ReplyPage(
            replies=replies,
            current_page=page,
            total_pages=math.ceil(total / limit) if total else 0,
            total_replies=total,
        )
