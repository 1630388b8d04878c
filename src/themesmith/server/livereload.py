# src/themesmith/server/livereload.py

"""
Live-reload dev server.

A local reverse proxy in front of the theme's site (e.g. http://localhost/my-theme):
- every request is forwarded upstream with httpx
- HTML responses get a small client script injected before </body>
- the client listens on a server-sent events stream; broadcast_reload() pushes one
  "reload" to every client connected right now (no history, no replay)
"""

from __future__ import annotations

import asyncio
import logging
import re
import socket
from urllib.parse import urlsplit

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from ..errors import ServerFailure

logger = logging.getLogger(__name__)

CLIENT_PATH = "/__livereload/client.js"
EVENTS_PATH = "/__livereload/events"

CLIENT_JS = (
    "(function () {\n"
    f'  var source = new EventSource("{EVENTS_PATH}");\n'
    '  source.addEventListener("reload", function () { window.location.reload(); });\n'
    "})();\n"
)
SCRIPT_TAG = f'<script src="{CLIENT_PATH}" async></script>'.encode()

_BODY_CLOSE = re.compile(rb"</body\s*>", re.IGNORECASE)

# Never forwarded in either direction.
_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
    "host",
    "content-length",
}
_PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def inject_client(html: bytes) -> bytes:
    """Insert the client script before the last </body>, or append it."""
    found = None
    for found in _BODY_CLOSE.finditer(html):
        pass
    if found is None:
        return html + SCRIPT_TAG
    return html[: found.start()] + SCRIPT_TAG + html[found.start() :]


class LiveReloadServer:
    def __init__(
        self,
        proxy_target: str,
        *,
        host: str = "127.0.0.1",
        port: int = 3000,
        upstream: httpx.AsyncClient | None = None,
    ) -> None:
        parts = urlsplit(proxy_target)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Proxy target must be an absolute URL, got {proxy_target!r}")
        self.proxy_target = proxy_target
        self.origin = f"{parts.scheme}://{parts.netloc}"
        self.host = host
        self.port = port

        self._upstream = upstream
        self._owns_upstream = upstream is None
        self._subscribers: set[asyncio.Queue[str | None]] = set()
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self.app = self._build_app()

    # ---- reload signalling ----

    @property
    def client_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[str | None]:
        q: asyncio.Queue[str | None] = asyncio.Queue()
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue[str | None]) -> None:
        self._subscribers.discard(q)

    def broadcast_reload(self) -> int:
        for q in list(self._subscribers):
            q.put_nowait("reload")
        return len(self._subscribers)

    # ---- proxying ----

    def upstream_url(self, path: str, query: str = "") -> str:
        """`/` maps to the target itself; any other path is resolved against its origin."""
        url = self.proxy_target if path in ("", "/") else self.origin + path
        if query:
            url += ("&" if "?" in url else "?") + query
        return url

    def _client(self) -> httpx.AsyncClient:
        if self._upstream is None:
            self._upstream = httpx.AsyncClient(timeout=30.0, follow_redirects=False)
        return self._upstream

    async def _proxy(self, request: Request) -> Response:
        url = self.upstream_url(request.url.path, request.url.query)
        headers = {k: v for k, v in request.headers.items() if k.lower() not in _HOP_HEADERS}
        # Bodies are rewritten, so ask for them uncompressed.
        headers["accept-encoding"] = "identity"
        body = await request.body()

        try:
            upstream = await self._client().request(
                request.method, url, headers=headers, content=body or None
            )
        except httpx.ConnectError as e:
            logger.error("Proxy cannot connect to %s: %s", self.origin, e)
            return PlainTextResponse(f"Cannot connect to {self.origin}", status_code=502)
        except httpx.TimeoutException:
            logger.error("Proxy timeout for %s", url)
            return PlainTextResponse(f"Timeout connecting to {self.origin}", status_code=504)

        local_origin = str(request.base_url).rstrip("/")
        content = upstream.content
        if "text/html" in upstream.headers.get("content-type", ""):
            content = inject_client(content.replace(self.origin.encode(), local_origin.encode()))

        response = Response(content=content, status_code=upstream.status_code)
        for key, value in upstream.headers.multi_items():
            lk = key.lower()
            if lk in _HOP_HEADERS or lk == "content-encoding":
                continue
            if lk == "location":
                value = value.replace(self.origin, local_origin)
            response.raw_headers.append((lk.encode("latin-1"), value.encode("latin-1")))
        return response

    async def _events(self, request: Request) -> StreamingResponse:
        q = self.subscribe()
        logger.debug("Live-reload client connected (%d total)", self.client_count)

        async def stream():
            try:
                yield ": connected\n\n"
                while True:
                    msg = await q.get()
                    if msg is None:
                        break
                    yield f"event: {msg}\ndata: {msg}\n\n"
            finally:
                self.unsubscribe(q)

        return StreamingResponse(
            stream(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    def _build_app(self) -> FastAPI:
        app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

        @app.get(CLIENT_PATH)
        async def client_js() -> Response:
            return Response(CLIENT_JS, media_type="application/javascript")

        @app.get(EVENTS_PATH)
        async def events(request: Request) -> StreamingResponse:
            return await self._events(request)

        @app.api_route("/{path:path}", methods=_PROXY_METHODS)
        async def proxy(request: Request, path: str) -> Response:
            return await self._proxy(request)

        return app

    # ---- lifecycle ----

    @property
    def is_running(self) -> bool:
        return self._serve_task is not None and not self._serve_task.done()

    @property
    def local_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def start(self) -> None:
        if self.is_running:
            return
        try:
            sock = socket.create_server((self.host, self.port))
        except OSError as e:
            raise ServerFailure(f"Cannot listen on {self.host}:{self.port}: {e}") from e

        config = uvicorn.Config(
            self.app,
            lifespan="off",
            log_config=None,
            access_log=False,
            timeout_graceful_shutdown=1,
        )
        self._server = uvicorn.Server(config)
        self._serve_task = asyncio.create_task(self._server.serve(sockets=[sock]), name="livereload")

        while not self._server.started:
            if self._serve_task.done():
                exc = self._serve_task.exception()
                raise ServerFailure(f"Live-reload server stopped during startup: {exc}")
            await asyncio.sleep(0.05)
        logger.info("Proxying %s at %s", self.proxy_target, self.local_url)

    async def stop(self) -> None:
        for q in list(self._subscribers):
            q.put_nowait(None)
        if self._server is not None:
            self._server.should_exit = True
        if self._serve_task is not None:
            await asyncio.gather(self._serve_task, return_exceptions=True)
        if self._owns_upstream and self._upstream is not None:
            await self._upstream.aclose()
            self._upstream = None

    async def wait_closed(self) -> None:
        if self._serve_task is not None:
            await asyncio.shield(self._serve_task)
