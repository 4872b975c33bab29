"""Protocol definitions for Quire.

This module defines the interfaces used between the post repository and
its collaborators. Page renderers depend on ``PostSource`` rather than on
the file-backed repository, so tests and alternative backends can supply
their own implementation.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .content import Post, RouteParams


@runtime_checkable
class PostSource(Protocol):
    """Read-only queries over a set of posts."""

    @abstractmethod
    def list_post_summaries(self) -> Sequence[Post]:
        """Return all posts with metadata only, newest first."""
        ...

    @abstractmethod
    def list_post_ids(self) -> frozenset[RouteParams]:
        """Return route params for every post."""
        ...

    @abstractmethod
    def get_post(self, identifier: str) -> Post:
        """Return one post with its rendered HTML body.

        Raises:
            PostNotFoundError: If no post has this identifier.
        """
        ...


@runtime_checkable
class PostLoader(Protocol):
    """Discovers post source files and maps identifiers to paths."""

    @abstractmethod
    def iter_files(self) -> list[Path]:
        """Return the paths of all post source files.

        Raises:
            PostNotFoundError: If the posts directory does not exist.
        """
        ...

    @abstractmethod
    def resolve(self, identifier: str) -> Path:
        """Return the source path for an identifier.

        Raises:
            PostNotFoundError: If the identifier names no post file.
        """
        ...

    @abstractmethod
    def identifier_for(self, path: Path) -> str:
        """Return the identifier of a post source file."""
        ...


@runtime_checkable
class MetadataExtractor(Protocol):
    """Splits a source file into its metadata and body."""

    @abstractmethod
    def extract(self, content: str, path: Path) -> tuple[dict[str, Any], str]:
        """Extract metadata from content.

        Args:
            content: Raw source file text.
            path: Path to the source file, for error reporting.

        Returns:
            Tuple of (metadata mapping, remaining body text).
        """
        ...


@runtime_checkable
class ContentRenderer(Protocol):
    """Converts a post body to an HTML fragment."""

    @abstractmethod
    def render(self, content: str, path: Path) -> str:
        """Render content to HTML.

        Args:
            content: Markdown source of the body.
            path: Path to the source file, for error reporting.

        Returns:
            Rendered HTML fragment.
        """
        ...
