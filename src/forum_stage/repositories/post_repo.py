"""Data access helpers for working with posts."""
from __future__ import annotations

from sqlalchemy import String, cast, delete, desc, func, or_, select, update
from sqlalchemy.orm import Session

from forum_stage.models.post import Post
from forum_stage.models.reply import Reply
from forum_stage.models.vote import PostVote, ReplyVote

__all__ = ["PostRepository", "POST_SORTS"]

POST_SORTS = ("latest", "votes", "activity", "unanswered")


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def add(self, post: Post) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        self.session.add(post)
        self.session.flush()
        return post

    def increment_views(self, post_id: int) -> bool:
        """Bump the view counter without touching the version column.

        Returns:
            False if no such post exists.
        """
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(views=Post.views + 1)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    def refresh(self, post: Post) -> Post:
        """Reload a post's columns from the database."""
        self.session.refresh(post)
        return post

    def list_page(
        self,
        *,
        sort_by: str = "latest",
        category: str | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Post], int]:
        """Return one page of posts plus the total number of matches."""
        stmt = select(Post)
        if category and category != "all":
            stmt = stmt.where(Post.category == category)
        if search and search.strip():
            keyword = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Post.title).like(keyword),
                    func.lower(Post.content).like(keyword),
                    func.lower(cast(Post.tags, String)).like(keyword),
                )
            )
        if sort_by == "unanswered":
            stmt = stmt.where(Post.is_answered.is_(False))

        total = self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0

        if sort_by == "votes":
            order = (desc(Post.vote_score), desc(Post.created_at), desc(Post.id))
        elif sort_by == "activity":
            order = (desc(Post.last_activity), desc(Post.id))
        else:
            order = (desc(Post.created_at), desc(Post.id))

        rows = self.session.scalars(stmt.order_by(*order).offset(offset).limit(limit))
        return list(rows), int(total)

    def delete_cascade(self, post: Post) -> int:
        """Hard delete a post with its replies and every vote row.

        Returns:
            The number of replies removed.
        """
        removed = self.session.scalar(
            select(func.count(Reply.id)).where(Reply.post_id == post.id)
        ) or 0
        reply_ids = select(Reply.id).where(Reply.post_id == post.id).scalar_subquery()
        self.session.execute(
            delete(ReplyVote)
            .where(ReplyVote.reply_id.in_(reply_ids))
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(Reply)
            .where(Reply.post_id == post.id)
            .execution_options(synchronize_session="fetch")
        )
        self.session.execute(
            delete(PostVote)
            .where(PostVote.post_id == post.id)
            .execution_options(synchronize_session=False)
        )
        self.session.delete(post)
        self.session.flush()
        return int(removed)
