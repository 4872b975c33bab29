"""Quire markdown blog.

This package turns a directory of markdown posts with YAML front matter into
a home page listing the posts and one page per post. Pages are rendered with
Jinja2 layouts and can be exported as a static site or served by a
development server with live reload.

The main entry point is the CLI module, which provides commands for
scaffolding new projects, writing posts, building and serving the site.

Architecture:
- posts: the post repository (discovery, front matter, sorting, rendering).
- extractors / renderers: front matter parsing and markdown conversion.
- pages / templates: page-rendering collaborators on top of the repository.
- build / server / cli: static export, dev server, command line.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
