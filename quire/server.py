"""Development server for Quire.

Renders pages on every request so edits to posts show up immediately:
- ``/`` renders the home page, ``/posts/<id>/`` a post page.
- ``/api/hello`` returns a fixed JSON acknowledgment.
- Unknown paths and ids get the 404 page with a 404 status.
- A reload script is injected into HTML responses; the posts and layouts
  folders are watched and connected browsers reload on change.

Key classes:
- DevServer: Main class for running the development server.
- _ReloadHandler: HTTP request handler delegating to DevServer.respond.
- _ChangeHandler: File system event handler for triggering reloads.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import unquote, urlsplit

import websockets
from jinja2 import TemplateError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import create_site_renderer, format_template_error, load_config
from .errors import PostNotFoundError, QuireError
from .pages import hello_api

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

POST_PATH_RE = re.compile(r"^/posts/(?P<id>[^/]+)/?(?:index\.html)?$")
HOME_PATHS = ("/", "/index.html")
HELLO_PATH = "/api/hello"
CHANGE_EVENT_TYPES = ("created", "modified", "deleted", "moved")

RELOAD_SCRIPT_TEMPLATE = """
<script>
(() => {{
  const ws = new WebSocket('ws://' + location.hostname + ':{ws_port}');
  ws.onmessage = (event) => {{
    const data = JSON.parse(event.data || '{{}}');
    if (data.type === 'reload') location.reload();
  }};
}})();
</script>
"""


class _ReloadHandler(BaseHTTPRequestHandler):
    """HTTP request handler that renders pages through the dev server.

    Attributes:
        dev_server: The DevServer answering requests; set on a subclass.
    """

    dev_server: DevServer | None = None

    def do_GET(self):
        self._respond(include_body=True)

    def do_HEAD(self):
        self._respond(include_body=False)

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)

    def _respond(self, include_body: bool) -> None:
        path = urlsplit(self.path).path
        status, content_type, body = self.dev_server.respond(path)
        encoded = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-type", content_type)
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        if include_body:
            self.wfile.write(encoded)


class DevServer:
    """Development server with live reload functionality.

    Attributes:
        project_root: Root directory of the project.
        config: Site configuration.
        renderer: Page renderer; reads posts afresh on every request.
        ws_port: Port for WebSocket connections.
        http_port: Port for HTTP server.
        _observer: File system observer for changes.
        _ws_clients: Set of connected WebSocket clients.
        _loop: Event loop for WebSocket handling.
    """

    def __init__(self, project_root: Path, http_port: int | None = None, ws_port: int | None = None):
        """Initialize the development server.

        Args:
            project_root: Root directory of the project.
            http_port: Optional override for HTTP port.
            ws_port: Optional override for the websocket port.
        """
        self.project_root = project_root
        self.config = load_config(project_root)
        self.renderer = create_site_renderer(project_root, self.config)
        base_http = int(http_port or self.config.get("port", 3000))
        resolved_ws = (
            ws_port
            if ws_port is not None
            else (
                base_http + 1
                if http_port is not None
                else self.config.get("ws_port", base_http + 1)
            )
        )
        self.ws_port = int(resolved_ws)
        self.http_port = base_http
        self.reload_script = RELOAD_SCRIPT_TEMPLATE.format(ws_port=self.ws_port)
        self._observer: Observer | None = None
        self._httpd: ThreadingHTTPServer | None = None
        self._ws_clients: set = set()
        self._loop = asyncio.new_event_loop()
        self._last_reload_at = 0.0
        self._debounce_seconds = 0.1

    @property
    def watched_dirs(self) -> list[Path]:
        return [
            self.project_root / self.config.get("posts_dir", "posts"),
            self.project_root / self.config.get("layouts_dir", "layouts"),
        ]

    def respond(self, path: str) -> tuple[int, str, str]:
        """Produce the response for a request path.

        Args:
            path: URL path without query string.

        Returns:
            Tuple of (status code, content type, body).
        """
        if path == HELLO_PATH:
            return 200, JSON_CONTENT_TYPE, json.dumps(hello_api())
        try:
            return self._render_page(path)
        except QuireError as exc:
            logger.error("Failed to render %s: %s", path, exc)
            return 500, TEXT_CONTENT_TYPE, f"Error: {exc}"
        except TemplateError as exc:
            message = format_template_error(exc)
            logger.error("Failed to render %s: %s", path, message)
            return 500, TEXT_CONTENT_TYPE, f"Error: {message}"

    def _render_page(self, path: str) -> tuple[int, str, str]:
        try:
            if path in HOME_PATHS:
                return 200, HTML_CONTENT_TYPE, self._inject(self.renderer.render_home())
            match = POST_PATH_RE.match(path)
            if match:
                html = self.renderer.render_post(unquote(match.group("id")))
                return 200, HTML_CONTENT_TYPE, self._inject(html)
        except PostNotFoundError:
            return self._not_found()
        return self._not_found()

    def _not_found(self) -> tuple[int, str, str]:
        return 404, HTML_CONTENT_TYPE, self._inject(self.renderer.render_not_found())

    def _inject(self, content: str) -> str:
        """Insert the live reload script before ``</body>``."""
        if "</body>" in content:
            return content.replace("</body>", f"{self.reload_script}</body>")
        return content + self.reload_script

    def start(self) -> None:  # pragma: no cover - integration path
        threading.Thread(target=self._start_http, daemon=True).start()
        threading.Thread(target=self._start_ws, daemon=True).start()
        self._start_watcher()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
        if self._httpd:
            self._httpd.shutdown()
        self._loop.call_soon_threadsafe(self._loop.stop)

    def _start_http(self) -> None:  # pragma: no cover - integration path
        handler_cls = type("_BoundReloadHandler", (_ReloadHandler,), {"dev_server": self})
        self._httpd = ThreadingHTTPServer(("", self.http_port), handler_cls)
        print(f"Serving {self.project_root} at http://localhost:{self.http_port}")
        self._httpd.serve_forever()

    def _start_ws(self) -> None:  # pragma: no cover - integration path
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self._run_ws_server())
        except OSError as exc:
            print(f"WebSocket server failed to start (port {self.ws_port}): {exc}")
            return

    async def _run_ws_server(self) -> None:  # pragma: no cover - integration path
        async with websockets.serve(self._ws_handler, "0.0.0.0", self.ws_port):
            await asyncio.Future()  # Run forever

    async def _ws_handler(self, websocket):
        self._ws_clients.add(websocket)
        try:
            await websocket.wait_closed()
        finally:
            self._ws_clients.discard(websocket)

    def _broadcast_reload(self):
        message = json.dumps({"type": "reload"})
        asyncio.run_coroutine_threadsafe(self._async_broadcast(message), self._loop)

    async def _async_broadcast(self, message: str):
        stale = set()
        for ws in list(self._ws_clients):
            try:
                await ws.send(message)
            except Exception as exc:
                logger.debug("Dropping websocket client: %s", exc)
                stale.add(ws)
        for ws in stale:
            self._ws_clients.discard(ws)

    def _start_watcher(self) -> None:
        handler = _ChangeHandler(self)
        observer = Observer()
        for watch_path in self.watched_dirs:
            if watch_path.exists():
                observer.schedule(handler, str(watch_path), recursive=True)
        observer.start()
        self._observer = observer

    def notify_change(self, path: Path) -> bool:
        """Tell connected browsers to reload after a source change.

        Changes arriving within the debounce window of the previous reload
        are dropped.

        Args:
            path: The changed file.

        Returns:
            True if a reload was broadcast.
        """
        now = time.time()
        if (now - self._last_reload_at) < self._debounce_seconds:
            return False
        self._last_reload_at = now
        logger.info("Change detected in %s; reloading", path)
        self._broadcast_reload()
        return True


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: DevServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        # Rendering reads the posts; only writes should reload browsers.
        if event.is_directory or event.event_type not in CHANGE_EVENT_TYPES:
            return
        path = Path(event.src_path)
        # Editor swap and backup files
        if path.name.startswith(".") or path.name.endswith("~"):
            return
        self.server.notify_change(path)
