"""
Read-side index over a flat list of comments.

Storage only knows parent_id adjacency. The index turns one article's
comments into an arena keyed by id with parent -> children lists, which is
what rendering, depth checks and cascading deletes need.
"""

import uuid
from collections import defaultdict, deque
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from otsnews.kernel.models.comment import Comment


class CommentThreadIndex:
    """
    Forest of comments for one article.

    Children keep timestamp order. A reply whose parent is not in the set
    (deleted out from under it, or never valid) is treated as a root.
    """

    def __init__(self, comments: Iterable[Comment]):
        ordered = sorted(comments, key=_chronological)
        self._by_id: Dict[uuid.UUID, Comment] = {c.id: c for c in ordered}
        self._children: Dict[uuid.UUID, List[uuid.UUID]] = defaultdict(list)
        self._roots: List[uuid.UUID] = []

        for comment in ordered:
            parent_id = comment.parent_id
            if parent_id is not None and parent_id in self._by_id and parent_id != comment.id:
                self._children[parent_id].append(comment.id)
            else:
                self._roots.append(comment.id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self._by_id

    def get(self, comment_id: uuid.UUID) -> Optional[Comment]:
        return self._by_id.get(comment_id)

    def all(self) -> List[Comment]:
        """Every comment, oldest first."""
        return list(self._by_id.values())

    def roots(self) -> List[Comment]:
        return [self._by_id[i] for i in self._roots]

    def children(self, comment_id: uuid.UUID) -> List[Comment]:
        return [self._by_id[i] for i in self._children.get(comment_id, ())]

    def depth(self, comment_id: uuid.UUID) -> int:
        """1 for a top-level comment, 2 for a direct reply, and so on."""
        if comment_id not in self._by_id:
            raise KeyError(comment_id)
        depth = 1
        seen = {comment_id}
        parent_id = self._by_id[comment_id].parent_id
        while parent_id is not None and parent_id in self._by_id and parent_id not in seen:
            depth += 1
            seen.add(parent_id)
            parent_id = self._by_id[parent_id].parent_id
        return depth

    def descendants(self, comment_id: uuid.UUID) -> List[Comment]:
        """All replies below a comment, breadth first. The comment itself is excluded."""
        found: List[Comment] = []
        queue = deque(self._children.get(comment_id, ()))
        seen = {comment_id}
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            found.append(self._by_id[current])
            queue.extend(self._children.get(current, ()))
        return found

    def to_tree(self) -> List[dict]:
        """Nested ``{"comment": ..., "replies": [...]}`` nodes, roots first."""

        def build(comment_id: uuid.UUID) -> dict:
            return {
                "comment": self._by_id[comment_id],
                "replies": [build(child) for child in self._children.get(comment_id, ())],
            }

        return [build(root) for root in self._roots]


def _chronological(comment: Comment):
    # SQLite hands back naive UTC datetimes, fresh rows carry tz-aware ones
    timestamp = comment.timestamp
    if timestamp is not None and timestamp.tzinfo is not None:
        timestamp = timestamp.replace(tzinfo=None)
    return (timestamp or datetime.min, str(comment.id))
