"""Materialize the nested reply tree of a post.

All replies of the post and all their vote rows are fetched once, indexed by
id and by parent id, and the tree is assembled in memory. Every call starts
from current store state; nothing is cached between calls.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from forum_stage.core.settings import settings
from forum_stage.db.time import as_utc
from forum_stage.models.post import Post
from forum_stage.models.reply import Reply
from forum_stage.models.user import User
from forum_stage.models.vote import VOTE_UP
from forum_stage.repositories.reply_repo import ReplyRepository
from forum_stage.services.errors import NotFoundError

_EPOCH = datetime.min


@dataclass
class ReplyNode:
    """A reply with its materialized children.

    Tombstones (deleted replies kept so that their active descendants stay
    reachable) carry no content and no author.
    """

    id: int
    post_id: int
    parent_reply_id: int | None
    depth: int
    content: str | None
    author: User | None
    upvotes: int
    downvotes: int
    vote_score: int
    upvoter_ids: list[int]
    downvoter_ids: list[int]
    is_accepted_answer: bool
    is_instructor_reply: bool
    is_deleted: bool
    created_at: datetime
    updated_at: datetime
    children: list[ReplyNode] = field(default_factory=list)


@dataclass
class ReplyTree:
    """Ordered top-level nodes of one post."""

    post_id: int
    roots: list[ReplyNode]

    def __iter__(self) -> Iterator[ReplyNode]:
        return self.walk()

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())

    def walk(self) -> Iterator[ReplyNode]:
        """Depth-first pre-order traversal; each call restarts from the roots."""
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def _created_key(reply: Reply) -> tuple[datetime, int]:
    created = as_utc(reply.created_at)
    return (created.astimezone(UTC).replace(tzinfo=None) if created else _EPOCH, reply.id)


class TreeMaterializer:
    """Builds ``ReplyTree`` values from the flat reply relation."""

    def __init__(self, session: Session, max_depth: int | None = None) -> None:
        self.session = session
        self.repo = ReplyRepository(session)
        self.max_depth = settings.max_reply_depth if max_depth is None else max_depth

    def materialize(self, post_id: int) -> ReplyTree:
        """Return the nested reply tree of ``post_id``.

        Top-level replies are ordered by score descending, then creation time,
        then id; nested replies chronologically, then by id. Descent stops
        after ``max_depth`` levels below the top level regardless of the depth
        stored on the records.

        Raises:
            NotFoundError: If the post does not exist.
        """
        if self.session.get(Post, post_id) is None:
            raise NotFoundError("Post not found", entity="post")

        arena: dict[int, Reply] = {reply.id: reply for reply in self.repo.list_for_post(post_id)}
        children_by_parent: dict[int | None, list[Reply]] = defaultdict(list)
        for reply in arena.values():
            parent_id = reply.parent_reply_id
            if parent_id is not None and parent_id not in arena:
                continue
            children_by_parent[parent_id].append(reply)

        voters: dict[int, tuple[list[int], list[int]]] = defaultdict(lambda: ([], []))
        for vote in self.repo.votes_for_post(post_id):
            up, down = voters[vote.reply_id]
            (up if vote.direction == VOTE_UP else down).append(vote.voter_id)

        def build(reply: Reply, level: int) -> ReplyNode | None:
            children: list[ReplyNode] = []
            if level < self.max_depth:
                for child in sorted(children_by_parent.get(reply.id, []), key=_created_key):
                    node = build(child, level + 1)
                    if node is not None:
                        children.append(node)
            if reply.is_deleted and not children:
                return None
            return self._node(reply, children, voters[reply.id])

        top_level = sorted(
            children_by_parent.get(None, []),
            key=lambda reply: (-reply.vote_score, *_created_key(reply)),
        )
        roots = [node for node in (build(reply, 0) for reply in top_level) if node is not None]
        return ReplyTree(post_id=post_id, roots=roots)

    @staticmethod
    def _node(
        reply: Reply,
        children: list[ReplyNode],
        voter_sets: tuple[list[int], list[int]],
    ) -> ReplyNode:
        tombstone = reply.is_deleted
        upvoter_ids, downvoter_ids = voter_sets
        return ReplyNode(
            id=reply.id,
            post_id=reply.post_id,
            parent_reply_id=reply.parent_reply_id,
            depth=reply.depth,
            content=None if tombstone else reply.content,
            author=None if tombstone else reply.author,
            upvotes=reply.upvotes,
            downvotes=reply.downvotes,
            vote_score=reply.vote_score,
            upvoter_ids=sorted(upvoter_ids),
            downvoter_ids=sorted(downvoter_ids),
            is_accepted_answer=reply.is_accepted_answer,
            is_instructor_reply=reply.is_instructor_reply,
            is_deleted=tombstone,
            created_at=reply.created_at,
            updated_at=reply.updated_at,
            children=children,
        )
