"""Template rendering engine for Quire.

This module uses Jinja2 to render the site's pages. Layouts are looked up
first in the project's ``layouts`` directory and then in the layouts
bundled with Quire, so a project can override any of them by file name.

Key class:
- TemplateEngine: Handles template loading and provides context to templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from pygments.formatters import HtmlFormatter

from .utils import format_date

BUILTIN_LAYOUTS_DIR = Path(__file__).parent / "layouts"

__all__ = ["BUILTIN_LAYOUTS_DIR", "TemplateEngine", "post_url"]


def post_url(identifier: str) -> str:
    """Return the URL path of a post page.

    Args:
        identifier: Post identifier.

    Returns:
        URL path like ``/posts/ssg-ssr/``.
    """
    return f"/posts/{quote(identifier)}/"


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        site: Site configuration exposed to templates as ``site``.
        env: Jinja2 environment.
    """

    def __init__(self, site: dict[str, Any], layouts_dir: Path | None = None):
        """Initialize the template engine.

        Args:
            site: Site configuration (title, author, intro...).
            layouts_dir: Optional project directory with layout overrides.
        """
        self.site = site
        search_path = [BUILTIN_LAYOUTS_DIR]
        if layouts_dir is not None and layouts_dir.is_dir():
            search_path.insert(0, layouts_dir)
        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
        )
        self._install_globals()

    def _install_globals(self) -> None:
        """Install global variables, functions and filters in the Jinja environment."""
        self.env.globals["site"] = self.site
        self.env.globals["post_url"] = post_url
        self.env.globals["pygments_css"] = self._pygments_css
        self.env.filters["date"] = format_date

    @staticmethod
    def _pygments_css() -> Markup:
        """Return Pygments CSS styles for the .highlight class."""
        return Markup(HtmlFormatter().get_style_defs(".highlight"))

    def render(self, template_name: str, **context: Any) -> str:
        """Render a layout by name.

        Args:
            template_name: Layout file name, e.g. ``home.html.jinja``.
            **context: Variables to make available in the template.

        Returns:
            Rendered HTML string.
        """
        template = self.env.get_template(template_name)
        return template.render(**context)
