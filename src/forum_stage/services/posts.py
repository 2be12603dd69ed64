"""Post aggregate: creation, edits, views, listing and cascade deletion."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from forum_stage.core.settings import settings
from forum_stage.db.time import utcnow
from forum_stage.models.post import Post
from forum_stage.repositories.post_repo import POST_SORTS, PostRepository
from forum_stage.services.actor import Actor
from forum_stage.services.atomic import run_atomic
from forum_stage.services.errors import NotFoundError, PermissionDeniedError, ValidationError
from forum_stage.services.media import MediaOwner, MediaStore, get_media_store
from forum_stage.services.voting import touch_activity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaUpload:
    blob: bytes
    filename: str = ""


@dataclass(frozen=True)
class PostRemoval:
    """Outcome of a hard delete; ``media_id`` is discarded once the caller commits."""

    removed_replies: int
    media_id: str | None = None


@dataclass(frozen=True)
class PostPage:
    posts: list[Post]
    current_page: int
    total_pages: int
    total_posts: int
    has_next: bool
    has_prev: bool


def normalize_tags(tags: list[str] | str | None) -> list[str]:
    """Accept a list or a comma-separated string; trim, drop blanks, cap the count."""
    if tags is None:
        return []
    raw = tags.split(",") if isinstance(tags, str) else list(tags)
    cleaned = [str(tag).strip() for tag in raw]
    return [tag for tag in cleaned if tag][: settings.max_post_tags]


def _clean_text(value: str | None, *, field: str, label: str, max_length: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required", entity="post", field=field)
    if len(text) > max_length:
        raise ValidationError(
            f"{label} cannot be more than {max_length} characters",
            entity="post",
            field=field,
        )
    return text


def _clean_category(category: str | None) -> str:
    return (category or "").strip() or settings.default_category


class PostAggregate:
    """Owns post lifecycle apart from votes and answer state."""

    def __init__(self, session: Session, media_store: MediaStore | None = None) -> None:
        self.session = session
        self.repo = PostRepository(session)
        self.media_store = media_store if media_store is not None else get_media_store()

    def require(self, post_id: int) -> Post:
        post = self.repo.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found", entity="post")
        return post

    def create(
        self,
        author: Actor,
        title: str,
        content: str,
        category: str | None = None,
        tags: list[str] | str | None = None,
        media: MediaUpload | None = None,
    ) -> Post:
        """Create a post; a failed media upload creates the post without media.

        Raises:
            ValidationError: If the title or content is missing or too long.
        """
        clean_title = _clean_text(title, field="title", label="Title", max_length=settings.max_title_length)
        clean_content = _clean_text(
            content, field="content", label="Content", max_length=settings.max_content_length
        )

        stored = None
        if media is not None and media.blob:
            stored = self.media_store.store(
                media.blob, MediaOwner(user_id=author.user_id, filename=media.filename)
            )
            if stored is None:
                logger.warning("Media upload skipped for new post by user %s", author.user_id)

        now = utcnow()
        post = self.repo.add(
            Post(
                author_id=author.user_id,
                title=clean_title,
                content=clean_content,
                category=_clean_category(category),
                tags=normalize_tags(tags),
                media_id=stored.id if stored else None,
                media_url=stored.url if stored else None,
                created_at=now,
                last_activity=now,
            )
        )
        logger.info("Post %s created by user %s", post.id, author.user_id)
        return post

    def view(self, post_id: int) -> Post:
        """Return a post after bumping its view counter."""
        if not self.repo.increment_views(post_id):
            raise NotFoundError("Post not found", entity="post")
        return self.repo.refresh(self.require(post_id))

    def update(
        self,
        post_id: int,
        editor: Actor,
        *,
        title: str | None = None,
        content: str | None = None,
        category: str | None = None,
        tags: list[str] | str | None = None,
    ) -> Post:
        """Edit the fields that were supplied. Only the author may edit."""
        post = self.require(post_id)
        if post.author_id != editor.user_id:
            raise PermissionDeniedError(
                "You can only edit your own posts", entity="post", field="author"
            )
        changes: dict[str, object] = {}
        if title is not None:
            changes["title"] = _clean_text(
                title, field="title", label="Title", max_length=settings.max_title_length
            )
        if content is not None:
            changes["content"] = _clean_text(
                content, field="content", label="Content", max_length=settings.max_content_length
            )
        if category is not None:
            changes["category"] = _clean_category(category)
        if tags is not None:
            changes["tags"] = normalize_tags(tags)

        def _edit() -> Post:
            for name, value in changes.items():
                setattr(post, name, value)
            touch_activity(post)
            return post

        return run_atomic(self.session, _edit, entity="post")

    def delete(self, post_id: int, requester: Actor) -> PostRemoval:
        """Hard delete a post with its replies and vote rows.

        The author or an instructor may delete. The attached media is left in
        place; pass the returned ``media_id`` to ``discard_media`` after the
        transaction commits.

        Returns:
            The number of replies removed and the id of the orphaned media.
        """
        post = self.require(post_id)
        if post.author_id != requester.user_id and not requester.is_instructor:
            raise PermissionDeniedError(
                "You can only delete your own posts", entity="post", field="author"
            )
        media_id = post.media_id
        removed = run_atomic(self.session, lambda: self.repo.delete_cascade(post), entity="post")
        logger.info("Post %s deleted by user %s with %d replies", post_id, requester.user_id, removed)
        return PostRemoval(removed_replies=removed, media_id=media_id)

    def discard_media(self, media_id: str | None) -> None:
        """Remove media left behind by a committed delete."""
        if media_id:
            self.media_store.delete(media_id)

    def list_posts(
        self,
        *,
        sort_by: str = "latest",
        category: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> PostPage:
        """Return one page of posts sorted by ``latest``, ``votes``, ``activity`` or ``unanswered``."""
        if sort_by not in POST_SORTS:
            sort_by = "latest"
        page = max(page, 1)
        limit = min(max(limit or settings.default_page_size, 1), settings.max_page_size)
        posts, total = self.repo.list_page(
            sort_by=sort_by,
            category=category,
            search=search,
            offset=(page - 1) * limit,
            limit=limit,
        )
        total_pages = math.ceil(total / limit) if total else 0
        return PostPage(
            posts=posts,
            current_page=page,
            total_pages=total_pages,
            total_posts=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
