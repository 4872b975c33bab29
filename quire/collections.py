from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from .content import Post


class PostCollection(Sequence[Post]):
    """Lightweight helper for working with lists of Posts in templates and code."""

    def __init__(self, posts: Iterable[Post]):
        self._posts = list(posts)

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        return self._posts[item]

    def __eq__(self, other) -> bool:
        if isinstance(other, PostCollection):
            return self._posts == other._posts
        return NotImplemented

    def sorted(self, reverse: bool = True) -> PostCollection:
        """Sort posts by their ``date`` metadata.

        Dates are compared as plain strings, so ISO-8601 dates sort
        chronologically. Posts without a date compare as the empty string.
        The sort is stable; posts with equal dates keep their current order.

        Args:
            reverse: If True (default), newest first.

        Returns:
            A new PostCollection with sorted posts.
        """
        return PostCollection(sorted(self._posts, key=lambda p: p.date, reverse=reverse))

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"
