"""Command-line interface for Quire.

This module defines the CLI commands using Click framework.
It provides commands for creating new projects, writing posts, building
sites, and running the development server.

Commands:
- new: Scaffold a new Quire project.
- post: Create a new markdown post, prompting for missing details.
- list: Print the posts, newest first.
- build: Build the site into the output directory.
- serve: Run development server with live reload.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from datetime import date
from pathlib import Path
from typing import Any

import click
import questionary
import yaml

from . import __version__
from .errors import QuireError
from .utils import is_valid_identifier, slugify

# Path to the starter project copied by `quire new`
_STARTER_DIR = Path(__file__).parent / "starter"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="quire")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Quire markdown blog."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("name")
def new(name: str):
    """Scaffold a new Quire project."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    _scaffold(target)
    click.echo(f"New Quire site created at {target}")


@cli.command()
@click.option("--title", help="Post title")
@click.option("--date", "date_", help="Post date (YYYY-MM-DD), defaults to today")
@click.option("--id", "identifier", help="Post identifier, defaults to the slugified title")
@click.pass_context
def post(ctx: click.Context, title: str | None, date_: str | None, identifier: str | None):
    """Create a new markdown post."""
    project_root = Path.cwd()
    config = _load_project_config(ctx, project_root)
    posts_dir = project_root / config.get("posts_dir", "posts")

    if title is None:
        title = questionary.text(
            "Title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()
    title = title.strip()
    if not title:
        raise click.ClickException("Title cannot be empty")

    if date_ is None:
        date_ = questionary.text(
            "Date (YYYY-MM-DD):",
            default=date.today().isoformat(),
            style=_questionary_style(),
        ).ask()
        if date_ is None:
            raise click.Abort()
    date_ = date_.strip()

    if identifier is None:
        identifier = questionary.text(
            "Identifier (file name without .md):",
            default=slugify(title),
            validate=lambda x: is_valid_identifier(x.strip()) or "Use letters, digits, '.', '-' or '_'",
            style=_questionary_style(),
        ).ask()
        if identifier is None:
            raise click.Abort()
    identifier = identifier.strip()
    if not is_valid_identifier(identifier):
        raise click.ClickException(f"Invalid post identifier: {identifier!r}")

    target_path = posts_dir / f"{identifier}.md"
    if target_path.exists():
        raise click.ClickException(
            f"File already exists: {target_path.relative_to(project_root)}"
        )

    posts_dir.mkdir(parents=True, exist_ok=True)
    frontmatter = yaml.safe_dump(
        {"title": title, "date": date_}, sort_keys=False, allow_unicode=True
    )
    target_path.write_text(f"---\n{frontmatter}---\n\n", encoding="utf-8")
    click.echo(f"Created {target_path.relative_to(project_root)}")


@cli.command(name="list")
@click.pass_context
def list_posts(ctx: click.Context):
    """Print the posts, newest first."""
    project_root = Path.cwd()
    config = _load_project_config(ctx, project_root)
    from .posts import PostRepository

    try:
        posts = PostRepository.from_config(project_root, config).list_post_summaries()
    except QuireError as exc:
        raise click.ClickException(str(exc)) from exc
    if not posts:
        click.echo("No posts yet.")
        return
    width = max(len(p.id) for p in posts)
    for p in posts:
        click.echo(f"{p.id.ljust(width)}  {p.date or '-':<10}  {p.title}")


@cli.command()
@click.pass_context
def build(ctx: click.Context):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    _load_project_config(ctx, project_root)
    from .build import BuildError, build_site

    try:
        result = build_site(project_root)
    except BuildError as exc:
        # Display user-friendly error message
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {_display_path(exc.source_path, project_root)}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.written)} pages ({len(result.posts)} posts) into {result.output_dir}")


@cli.command()
@click.option(
    "--port",
    type=int,
    required=False,
    help="Port to run the dev server (overrides quire.yaml)",
)
@click.option(
    "--ws-port",
    type=int,
    required=False,
    help="Port for the live reload websocket server (overrides quire.yaml ws_port)",
)
@click.pass_context
def serve(ctx: click.Context, port: int | None, ws_port: int | None):
    """Run dev server with live reload."""
    project_root = Path.cwd()
    _load_project_config(ctx, project_root)
    from .server import DevServer

    server = DevServer(project_root, http_port=port, ws_port=ws_port)
    server.start()


def _load_project_config(ctx: click.Context, project_root: Path) -> dict[str, Any]:
    """Load quire.yaml and configure logging from it."""
    from .build import load_config

    try:
        config = load_config(project_root)
    except QuireError as exc:
        raise click.ClickException(str(exc)) from exc
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    _configure_logging(config, verbose)
    return config


def _configure_logging(config: dict[str, Any], verbose: bool) -> None:
    level_name = "DEBUG" if verbose else str(config.get("log_level", "WARNING")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise click.ClickException(f"Unknown log_level in quire.yaml: {config.get('log_level')!r}")
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("quire").setLevel(level)


def _display_path(path: Path | None, project_root: Path) -> str:
    if path is None:
        return "-"
    try:
        return str(path.relative_to(project_root))
    except ValueError:
        return str(path)


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


def _scaffold(root: Path) -> None:
    """Create the directory structure and files for a new Quire project.

    Args:
        root: Root directory for the new project.
    """
    for src_path in _STARTER_DIR.rglob("*"):
        if src_path.is_dir():
            continue
        rel_path = src_path.relative_to(_STARTER_DIR)
        dest_path = root / rel_path
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dest_path)
    (root / ".gitignore").write_text("output/\n", encoding="utf-8")

    _try_git_init(root)


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("QUIRE_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        # Non-fatal: user can run git init manually
        click.echo(f"Skipping git init: {exc}", err=True)
