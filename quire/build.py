"""Site building functionality for Quire.

This module loads the project configuration and writes the statically
generated pages of the site: the home page, one page per post and a 404
page. API routes only exist on the dev server.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from quire.yaml.
- create_site_renderer: Wires repository, template engine and page renderer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateError

from .collections import PostCollection
from .errors import QuireError
from .pages import SiteRenderer
from .posts import PostRepository
from .templates import TemplateEngine
from .utils import ensure_clean_dir

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "quire.yaml"

DEFAULT_CONFIG = {
    "posts_dir": "posts",
    "output_dir": "output",
    "layouts_dir": "layouts",
    "port": 3000,
    "title": "Quire Blog",
    "description": "",
    "author": "",
    "intro": "",
    "log_level": "WARNING",
}


class BuildError(QuireError):
    """Error during site build with file context."""


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        posts: Summaries of all posts, newest first.
        output_dir: Directory where the site was built.
        written: Paths of the files written, relative to output_dir.
    """

    posts: PostCollection
    output_dir: Path
    written: list[Path]


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from quire.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        QuireError: If the file is not valid YAML.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise QuireError(config_path, f"invalid configuration: {exc}", exc) from exc
        if isinstance(loaded, dict):
            config.update(loaded)
        else:
            logger.warning("Ignoring %s: expected a mapping", config_path)
    return config


def create_site_renderer(project_root: Path, config: dict[str, Any]) -> SiteRenderer:
    """Create the page renderer for a project.

    Args:
        project_root: Root directory of the project.
        config: Loaded configuration.

    Returns:
        SiteRenderer reading posts from the configured directory.
    """
    repository = PostRepository.from_config(project_root, config)
    engine = TemplateEngine(config, layouts_dir=project_root / config.get("layouts_dir", "layouts"))
    return SiteRenderer(repository, engine)


def build_site(
    project_root: Path,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead of config output_dir.

    Returns:
        BuildResult containing the posts, output directory and written files.

    Raises:
        BuildError: If any page fails to render.
    """
    config = load_config(project_root)
    output_dir = output_dir_override or (project_root / config.get("output_dir", "output"))
    renderer = create_site_renderer(project_root, config)
    posts_dir = project_root / config.get("posts_dir", "posts")

    # Read everything before touching the output so a failed build leaves it intact.
    pages: dict[Path, str] = {}
    posts = _render(posts_dir, lambda: renderer.home_props()["all_posts"])
    pages[Path("index.html")] = _render(posts_dir, renderer.render_home)
    for entry in _render(posts_dir, renderer.static_paths)["paths"]:
        identifier = entry["params"]["id"]
        source = posts_dir / f"{identifier}.md"
        pages[Path("posts") / identifier / "index.html"] = _render(
            source, lambda: renderer.render_post(identifier)
        )
    pages[Path("404.html")] = _render(posts_dir, renderer.render_not_found)

    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    for rel_path, rendered in pages.items():
        _write_page(output_dir, rel_path, rendered)
    logger.info("Wrote %d pages to %s", len(pages), output_dir)
    return BuildResult(posts=posts, output_dir=output_dir, written=list(pages))


def _render(source_path: Path, render):
    """Run a render step, converting failures to BuildError.

    Args:
        source_path: File or directory to blame on failure.
        render: Zero-argument callable producing the result.

    Returns:
        Whatever render returns.
    """
    try:
        return render()
    except QuireError as exc:
        raise BuildError(exc.source_path or source_path, exc.message, exc) from exc
    except TemplateError as exc:
        raise BuildError(source_path, format_template_error(exc), exc) from exc


def format_template_error(exc: Exception) -> str:
    """Format a template exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    lineno = getattr(exc, "lineno", None)
    if error_type == "TemplateSyntaxError" and lineno:
        return f"Template syntax error on line {lineno}: {exc.message}"
    if error_type == "UndefinedError":
        return f"Undefined variable: {exc}"
    if error_type == "TemplateNotFound":
        return f"Layout not found: {exc}"
    return f"{error_type}: {exc}"


def _write_page(output_dir: Path, rel_path: Path, rendered: str) -> None:
    """Write a rendered page to the output directory.

    Args:
        output_dir: Base output directory.
        rel_path: Target path relative to output_dir.
        rendered: Rendered HTML content.
    """
    target = output_dir / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        f.write(rendered)
