"""
Transport - Host HTTP layer the registration engine installs routes into.

``Transport`` is the narrow contract the engine depends on. ``AsgiTransport``
is a small reference implementation with Express-style dispatch:

- Stages run in registration order; a stage answers the request or calls
  ``await next()`` to pass it on.
- ``await next(error)`` skips ordinary stages and runs the error chain
  (handlers registered with ``use_error``) in order.
- A handler that raises is treated as ``next(error)``; if the status is
  still below 400 it becomes 500 first.
- When nothing answers, the transport falls back to a plain-text 404 (no
  error) or a plain-text error page.
"""

from __future__ import annotations

import logging
import re
from http import HTTPStatus
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Pattern,
    Protocol,
    runtime_checkable,
)

from .._invoke import invoke, positional_arity
from .request import Request
from .response import Response, TemplateRenderer

logger = logging.getLogger("arbor.transport")

Next = Callable[..., Awaitable[Any]]
Handler = Callable[..., Any]

_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


@runtime_checkable
class Transport(Protocol):
    """
    Contract consumed by controllers and the registration engine.

    Route handlers receive ``(request, response, next)``; error handlers
    receive ``(error, request, response, next)``.
    """

    def get(self, path: str, *handlers: Handler) -> None: ...

    def post(self, path: str, *handlers: Handler) -> None: ...

    def put(self, path: str, *handlers: Handler) -> None: ...

    def delete(self, path: str, *handlers: Handler) -> None: ...

    def all(self, *handlers: Handler) -> None:
        """Register handlers matching any path and any method."""

    def use_error(self, handler: Handler) -> None:
        """Append a handler to the error chain."""


def compile_path(path: str) -> Pattern[str]:
    """
    Compile an Express-style path into a regex.

    ``:name`` captures one segment, ``*`` matches anything and a trailing
    slash is optional.
    """
    if path == "*":
        return re.compile(r"^.*$")

    pattern = ""
    position = 0
    for match in _PARAM_RE.finditer(path):
        pattern += re.escape(path[position:match.start()])
        pattern += f"(?P<{match.group(1)}>[^/]+)"
        position = match.end()
    pattern += re.escape(path[position:])
    pattern = pattern.replace(r"\*", ".*").rstrip("/")
    return re.compile(f"^{pattern}/?$")


@dataclass
class Stage:
    """One entry of the dispatch stack."""

    handler: Handler
    method: Optional[str] = None
    pattern: Optional[Pattern[str]] = None
    prefix: Optional[str] = None
    is_error: bool = False
    arity: Optional[int] = field(default=None)

    def __post_init__(self):
        self.arity = positional_arity(self.handler)

    def match(self, request: Request) -> Optional[Dict[str, str]]:
        if self.method is not None and request.method != self.method:
            return None
        if self.pattern is not None:
            found = self.pattern.match(request.path)
            return found.groupdict() if found else None
        if self.prefix is not None:
            if request.path == self.prefix or request.path.startswith(self.prefix.rstrip("/") + "/"):
                return {}
            return None
        return {}


class AsgiTransport:
    """
    Reference host transport with an ASGI entry point.

    Example:
        transport = AsgiTransport()
        transport.get("/", index)
        transport.all(not_found)
        transport.use_error(render_error)
        uvicorn.run(transport)
    """

    def __init__(self):
        self.stages: List[Stage] = []
        self.renderer: Optional[TemplateRenderer] = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _route(self, method: Optional[str], path: str, handlers: tuple) -> None:
        if not handlers:
            raise TypeError(f"No handler given for {method or 'ALL'} {path}")
        pattern = compile_path(path)
        for handler in handlers:
            self.stages.append(Stage(handler, method=method, pattern=pattern))
        logger.debug("Installed %s %s (%d handler(s))", method or "ALL", path, len(handlers))

    def get(self, path: str, *handlers: Handler) -> None:
        self._route("GET", path, handlers)

    def post(self, path: str, *handlers: Handler) -> None:
        self._route("POST", path, handlers)

    def put(self, path: str, *handlers: Handler) -> None:
        self._route("PUT", path, handlers)

    def delete(self, path: str, *handlers: Handler) -> None:
        self._route("DELETE", path, handlers)

    def all(self, *handlers: Handler) -> None:
        self._route(None, "*", handlers)

    def use(self, *handlers: Handler, path: Optional[str] = None) -> None:
        """Mount middleware, optionally restricted to a path prefix."""
        for handler in handlers:
            self.stages.append(Stage(handler, prefix=path))

    def use_error(self, handler: Handler) -> None:
        self.stages.append(Stage(handler, is_error=True))

    def set_renderer(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def handle(self, request: Request, response: Optional[Response] = None) -> Response:
        """Run the request through the dispatch stack."""
        response = response or Response(renderer=self.renderer)
        position = 0

        async def next_(error: Any = None) -> None:
            nonlocal position
            while position < len(self.stages):
                stage = self.stages[position]
                position += 1

                if stage.is_error != (error is not None):
                    continue
                params = stage.match(request)
                if params is None:
                    continue

                request.params = params
                try:
                    if stage.is_error:
                        await invoke(stage.handler, stage.arity, error, request, response, next_)
                    else:
                        await invoke(stage.handler, stage.arity, request, response, next_)
                except Exception as exc:
                    if not response.headers_sent and response.status_code < 400:
                        response.status_code = 500
                    logger.debug("Handler %r raised %r", stage.handler, exc)
                    await next_(exc)
                return

            self._finalize(error, request, response)

        await next_()
        return response

    def _finalize(self, error: Any, request: Request, response: Response) -> None:
        """Default behaviour once every stage passed the request on."""
        if response.headers_sent:
            if error is not None:
                logger.error("Error after response was sent for %s %s: %s",
                             request.method, request.path, error)
            return

        if error is None:
            response.status(404).send(
                f"Cannot {request.method} {request.path}", "text/plain; charset=utf-8"
            )
            return

        if response.status_code < 400:
            response.status_code = getattr(error, "status_code", 500)
        if response.status_code >= 500:
            logger.error("Unhandled error for %s %s", request.method, request.path,
                         exc_info=error if isinstance(error, BaseException) else None)
        message = str(error) if getattr(error, "public", False) else _reason(response.status_code)
        response.send(message, "text/plain; charset=utf-8")

    # ------------------------------------------------------------------
    # ASGI
    # ------------------------------------------------------------------

    async def __call__(self, scope: Dict[str, Any], receive, send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise RuntimeError(f"Unsupported ASGI scope type: {scope['type']}")

        request = await Request.from_asgi(scope, receive)
        response = await self.handle(request)
        if not response.headers_sent:
            response.send(b"")

        headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in response.headers.items()
        ]
        headers.append((b"content-length", str(len(response.body)).encode("latin-1")))
        await send({"type": "http.response.start", "status": response.status_code, "headers": headers})
        await send({"type": "http.response.body", "body": response.body})

    async def _lifespan(self, receive, send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"
