"""Front matter extraction for Quire.

Posts start with a YAML block between two ``---`` lines, followed by the
markdown body::

    ---
    title: "Two Forms of Pre-rendering"
    date: "2020-01-01"
    ---
    Next.js has two forms of pre-rendering...

Key items:
- extract_frontmatter: Split text into (metadata, body), strictly.
- FrontmatterExtractor: MetadataExtractor implementation used by the repository.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from .errors import MalformedMetadataError

FRONTMATTER_OPEN_RE = re.compile(r"\A---[ \t]*\r?\n")
FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<block>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def _normalize_value(value: Any) -> Any:
    # YAML turns unquoted dates into date objects; keep them sortable as text.
    if isinstance(value, date):
        return value.isoformat()
    return value


def extract_frontmatter(text: str, path: Path) -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from content.

    Text without an opening delimiter has no metadata and is all body. An
    opening delimiter without a closing one, invalid YAML, or a block that
    is not a mapping is an error.

    Args:
        text: Raw file content.
        path: Path to the source file, for error reporting.

    Returns:
        Tuple of (front matter dict, remaining content).

    Raises:
        MalformedMetadataError: If the front matter block cannot be parsed.
    """
    text = text.lstrip("\ufeff")
    if not FRONTMATTER_OPEN_RE.match(text):
        return {}, text
    match = FRONTMATTER_RE.match(text)
    if not match:
        raise MalformedMetadataError(path, "front matter is missing its closing '---' line")
    try:
        data = yaml.safe_load(match.group("block"))
    except yaml.YAMLError as exc:
        raise MalformedMetadataError(path, f"invalid YAML in front matter: {exc}", exc) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedMetadataError(
            path, f"front matter must be a mapping, got {type(data).__name__}"
        )
    metadata = {str(key): _normalize_value(value) for key, value in data.items()}
    return metadata, text[match.end() :]


class FrontmatterExtractor:
    """Extracts YAML front matter from content.

    Parses the YAML block at the beginning of the file (between ``---``
    markers) and returns it with the remaining body.
    """

    def extract(self, content: str, path: Path) -> tuple[dict[str, Any], str]:
        """Extract front matter from content.

        Args:
            content: Source content with potential front matter.
            path: Path to the source file.

        Returns:
            Tuple of (metadata dict, body text).
        """
        return extract_frontmatter(content, path)


# Default extractor instance
default_metadata_extractor = FrontmatterExtractor()
