"""Post content types and file discovery for Quire.

Key classes:
- Post: Dataclass representing one blog post.
- RouteParams: Hashable route parameter for a post page.
- FilePostLoader: Implementation of the PostLoader protocol for a posts directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import PostNotFoundError

logger = logging.getLogger(__name__)

POST_SUFFIX = ".md"


@dataclass
class Post:
    """Represents a blog post.

    Attributes:
        id: Identifier derived from the source filename without extension.
        metadata: Front matter key/value pairs (``title`` and ``date`` by convention).
        content_html: Rendered body; None for summaries.
        path: Path to the source file.
    """

    id: str
    metadata: dict[str, Any] = field(default_factory=dict)
    content_html: str | None = None
    path: Path | None = None

    @property
    def title(self) -> str:
        return str(self.metadata.get("title", self.id))

    @property
    def date(self) -> str:
        value = self.metadata.get("date")
        return "" if value is None else str(value)


@dataclass(frozen=True)
class RouteParams:
    """Route parameter naming one post page (``/posts/<id>/``)."""

    id: str

    def as_dict(self) -> dict[str, dict[str, str]]:
        """Return the ``{"params": {"id": ...}}`` shape used for static paths."""
        return {"params": {"id": self.id}}


class FilePostLoader:
    """Loads post files from a directory.

    Only markdown files directly inside the directory are posts; sub
    directories and other files are ignored.

    Attributes:
        posts_dir: Directory containing post sources.
    """

    def __init__(self, posts_dir: Path):
        self.posts_dir = posts_dir

    def iter_files(self) -> list[Path]:
        """Return all post files, ordered by filename.

        Raises:
            PostNotFoundError: If the posts directory does not exist.
        """
        if not self.posts_dir.is_dir():
            raise PostNotFoundError(self.posts_dir, "posts directory does not exist")
        files = sorted(
            path
            for path in self.posts_dir.iterdir()
            if path.is_file() and path.suffix == POST_SUFFIX
        )
        logger.debug("Found %d posts in %s", len(files), self.posts_dir)
        return files

    def resolve(self, identifier: str) -> Path:
        """Map an identifier to its source file.

        Only identifiers of discovered post files are accepted, so anything
        the listing returns can be fetched and nothing else can.

        Args:
            identifier: Post identifier supplied by a route.

        Returns:
            Path to ``<posts_dir>/<identifier>.md``.

        Raises:
            PostNotFoundError: If no discovered post has this identifier.
        """
        for path in self.iter_files():
            if self.identifier_for(path) == identifier:
                return path
        raise PostNotFoundError(
            self.posts_dir, f"no post named {identifier!r}", identifier
        )

    @staticmethod
    def identifier_for(path: Path) -> str:
        """Derive the post identifier from a source path."""
        return path.stem
