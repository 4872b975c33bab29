"""Post repository for Quire.

This module turns a directory of markdown files into queryable Post
records. Every query reads the directory afresh; nothing is cached and
there is no write path.

Key classes:
- PostRepository: Implementation of the PostSource protocol.

Example::

    repo = PostRepository(Path("posts"))
    for post in repo.list_post_summaries():
        print(post.id, post.date, post.title)
    post = repo.get_post("ssg-ssr")
    post.content_html
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .collections import PostCollection
from .content import FilePostLoader, Post, RouteParams
from .extractors import default_metadata_extractor
from .protocols import ContentRenderer, MetadataExtractor, PostLoader
from .renderers import default_renderer

logger = logging.getLogger(__name__)


class PostRepository:
    """Read-only access to the posts stored in a directory.

    Attributes:
        posts_dir: Directory containing ``<id>.md`` files.
        loader: Post file discovery and identifier resolution.
        metadata_extractor: Front matter parser.
        renderer: Markdown to HTML converter.
    """

    def __init__(
        self,
        posts_dir: Path,
        loader: PostLoader | None = None,
        metadata_extractor: MetadataExtractor | None = None,
        renderer: ContentRenderer | None = None,
    ):
        """Initialize the repository.

        Args:
            posts_dir: Path to the posts directory.
            loader: Optional custom loader.
            metadata_extractor: Optional custom front matter extractor.
            renderer: Optional custom markdown renderer.
        """
        self.posts_dir = posts_dir
        self.loader = loader or FilePostLoader(posts_dir)
        self.metadata_extractor = metadata_extractor or default_metadata_extractor
        self.renderer = renderer or default_renderer

    @classmethod
    def from_config(cls, project_root: Path, config: dict[str, Any]) -> PostRepository:
        """Create a repository for the posts directory named in the config."""
        return cls(project_root / config.get("posts_dir", "posts"))

    def list_post_summaries(self) -> PostCollection:
        """Return every post with its metadata, newest first.

        Bodies are not converted. Any malformed front matter fails the
        whole call.

        Raises:
            PostNotFoundError: If the posts directory does not exist.
            MalformedMetadataError: If a post's front matter cannot be parsed.
        """
        summaries = []
        for path in self.loader.iter_files():
            metadata, _ = self._read(path)
            summaries.append(Post(id=self.loader.identifier_for(path), metadata=metadata, path=path))
        return PostCollection(summaries).sorted()

    def list_post_ids(self) -> frozenset[RouteParams]:
        """Return the route params of every post.

        Raises:
            PostNotFoundError: If the posts directory does not exist.
        """
        return frozenset(
            RouteParams(id=self.loader.identifier_for(path)) for path in self.loader.iter_files()
        )

    def get_post(self, identifier: str) -> Post:
        """Return one post with its body rendered to HTML.

        Args:
            identifier: Post identifier (the filename without ``.md``).

        Raises:
            PostNotFoundError: If no post has this identifier.
            MalformedMetadataError: If the front matter cannot be parsed.
            ConversionError: If the body cannot be converted.
        """
        path = self.loader.resolve(identifier)
        metadata, body = self._read(path)
        content_html = self.renderer.render(body, path)
        logger.debug("Rendered post %s (%d bytes of HTML)", identifier, len(content_html))
        return Post(id=identifier, metadata=metadata, content_html=content_html, path=path)

    def _read(self, path: Path) -> tuple[dict[str, Any], str]:
        raw = path.read_text(encoding="utf-8")
        return self.metadata_extractor.extract(raw, path)
