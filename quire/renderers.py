"""Markdown rendering for Quire.

Post bodies are converted to HTML fragments with mistune. The renderer adds
anchor ids to headings and highlights fenced code blocks with Pygments when
the block names a known language.

Key classes:
- MarkdownRenderer: ContentRenderer implementation used by the repository.
"""

from __future__ import annotations

import re
from pathlib import Path

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .errors import ConversionError
from .utils import escape_html

MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text (may contain inline HTML).

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = re.sub(r"<[^>]+>", "", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer with heading anchors and syntax highlighting.

    Raw HTML in the markdown passes through unescaped; post sources are
    written by the site's authors.
    """

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        """Render a heading with a unique auto-generated ID.

        Args:
            text: Heading text content.
            level: Heading level (1-6).
            **attrs: Additional attributes.

        Returns:
            HTML heading tag with id attribute.
        """
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        if not heading_id:
            return f"<h{level}>{text}</h{level}>\n"
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'javascript').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info and info.strip() else ""
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML.

    A fresh mistune parser is created per call so heading ids never leak
    between posts.
    """

    def __init__(self, plugins: list[str] | None = None):
        self.plugins = list(MARKDOWN_PLUGINS if plugins is None else plugins)

    def render(self, content: str, path: Path) -> str:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source content.
            path: Path to the source file.

        Returns:
            Rendered HTML fragment.

        Raises:
            ConversionError: If mistune fails on the input.
        """
        markdown = mistune.create_markdown(renderer=_HighlightRenderer(), plugins=self.plugins)
        try:
            return markdown(content)
        except Exception as exc:
            raise ConversionError(path, f"could not convert markdown: {exc}", exc) from exc


# Default renderer instance
default_renderer = MarkdownRenderer()
