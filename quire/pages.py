"""Page rendering for Quire.

The pages of the site sit on top of a PostSource: the home page lists
post summaries, one page exists per post id, and everything else is a
404. The JSON endpoint served by the dev server is independent of posts.

Key items:
- SiteRenderer: Builds page props from a PostSource and renders layouts.
- hello_api: Payload of ``GET /api/hello``.
"""

from __future__ import annotations

from typing import Any

from .errors import PostNotFoundError
from .protocols import PostSource
from .templates import TemplateEngine

HOME_LAYOUT = "home.html.jinja"
POST_LAYOUT = "post.html.jinja"
NOT_FOUND_LAYOUT = "404.html.jinja"


def hello_api() -> dict[str, str]:
    """Return the fixed acknowledgment served at ``/api/hello``."""
    return {"name": "John Doe"}


class SiteRenderer:
    """Renders the home, post and 404 pages.

    Attributes:
        posts: Source of post data.
        engine: Template engine used for layouts.
    """

    def __init__(self, posts: PostSource, engine: TemplateEngine):
        self.posts = posts
        self.engine = engine

    def home_props(self) -> dict[str, Any]:
        return {"all_posts": self.posts.list_post_summaries()}

    def static_paths(self) -> dict[str, Any]:
        """Return the post pages to generate ahead of time.

        Paths are sorted by id. ``fallback`` is always False: ids missing
        from this list are not found.
        """
        params = sorted(self.posts.list_post_ids(), key=lambda p: p.id)
        return {"paths": [p.as_dict() for p in params], "fallback": False}

    def post_props(self, identifier: str) -> dict[str, Any]:
        """Return the props of one post page.

        Raises:
            PostNotFoundError: If the id is not among the static paths.
        """
        known = {p.id for p in self.posts.list_post_ids()}
        if identifier not in known:
            source = getattr(self.posts, "posts_dir", None)
            raise PostNotFoundError(source, f"no post named {identifier!r}", identifier)
        return {"post": self.posts.get_post(identifier)}

    def render_home(self) -> str:
        return self.engine.render(HOME_LAYOUT, **self.home_props())

    def render_post(self, identifier: str) -> str:
        return self.engine.render(POST_LAYOUT, **self.post_props(identifier))

    def render_not_found(self) -> str:
        return self.engine.render(NOT_FOUND_LAYOUT)
