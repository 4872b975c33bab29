"""Exceptions raised by Quire.

Every error carries the file it concerns so the CLI and dev server can
report it with context.

Key classes:
- QuireError: Base class with source path and original error.
- PostNotFoundError: Unknown identifier or missing posts directory.
- MalformedMetadataError: Front matter that cannot be parsed.
- ConversionError: Markdown that the renderer cannot process.
"""

from __future__ import annotations

from pathlib import Path


class QuireError(Exception):
    """Base error with file context.

    Attributes:
        source_path: Path to the file (or directory) the error concerns, if known.
        message: Human-readable error message.
        original_error: The original exception that was caught, if any.
    """

    def __init__(
        self,
        source_path: Path | None,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}" if source_path else message)


class PostNotFoundError(QuireError):
    """No post exists for an identifier, or the posts directory is absent.

    Attributes:
        identifier: The requested identifier, or None when the whole
            posts directory is missing.
    """

    def __init__(
        self, source_path: Path | None, message: str, identifier: str | None = None
    ):
        self.identifier = identifier
        super().__init__(source_path, message)


class MalformedMetadataError(QuireError):
    """A post's front matter block cannot be parsed as a YAML mapping."""


class ConversionError(QuireError):
    """The markdown renderer failed on a post body."""
