"""Utility functions for Quire.

This module contains small helpers used throughout the Quire codebase:
string processing, identifier checks, date formatting and directory handling.

Key functions:
    slugify: Convert a title to a post identifier.
    is_valid_identifier: Check that a string is safe as a new post filename.
    format_date: Format an ISO date string for display.
    escape_html: Escape special HTML characters.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime
from pathlib import Path

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def slugify(name: str) -> str:
    """Convert a title or filename stem to a URL-friendly identifier.

    Args:
        name: Title or filename stem.

    Returns:
        Lowercase slug with runs of other characters collapsed to hyphens.

    Examples:
        >>> slugify("SSG vs SSR")
        'ssg-vs-ssr'
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", name)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "untitled"


def is_valid_identifier(identifier: str) -> bool:
    """Check that an identifier is safe to use as the filename of a new post.

    Identifiers must start with a letter or digit and may contain letters,
    digits, dots, hyphens and underscores. Path separators and ``..`` are
    rejected.

    Args:
        identifier: Candidate post identifier.

    Returns:
        True if the identifier is filename-safe.
    """
    if not identifier or ".." in identifier:
        return False
    return IDENTIFIER_RE.match(identifier) is not None


def format_date(value: str | date | None) -> str:
    """Format an ISO-8601 date string as ``Month D, YYYY``.

    Values that are not ISO dates are returned unchanged so templates never
    fail on a hand-written date.

    Args:
        value: ISO date or datetime string (``2020-01-02``), or a date object.

    Returns:
        Human-readable date such as ``January 2, 2020``.

    Examples:
        >>> format_date("2020-01-02")
        'January 2, 2020'

        >>> format_date("someday")
        'someday'
    """
    if value is None:
        return ""
    if isinstance(value, date):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return str(value)
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML.

    Examples:
        >>> escape_html('<b>"hi"</b>')
        '&lt;b&gt;&quot;hi&quot;&lt;/b&gt;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
