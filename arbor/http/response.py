"""
Response - Buffered HTTP response for the reference transport.

The response is finished by exactly one of ``send``, ``json``,
``redirect`` or ``render``; afterwards ``headers_sent`` is True and the
status can no longer change.
"""

from __future__ import annotations

import json as _json
from typing import Any, Dict, Mapping, Optional, Protocol


class TemplateRenderer(Protocol):
    """Anything able to turn a template name and params into markup."""

    def render(self, template_name: str, params: Mapping[str, Any]) -> str: ...


class ResponseAlreadySent(RuntimeError):
    """Raised when a finished response is written to again."""


class Response:
    """
    HTTP response.

    Attributes:
        status_code: Current status code (200 until changed)
        headers: Response headers
        locals: Values made available to every rendered template
        body: Encoded body once the response is finished
    """

    def __init__(self, renderer: Optional[TemplateRenderer] = None):
        self.status_code = 200
        self.headers: Dict[str, str] = {}
        self.locals: Dict[str, Any] = {}
        self.body = b""
        self._renderer = renderer
        self._sent = False

    @property
    def headers_sent(self) -> bool:
        return self._sent

    def status(self, code: int) -> "Response":
        if self._sent:
            raise ResponseAlreadySent("Cannot set status after the response was sent")
        self.status_code = code
        return self

    def set_header(self, name: str, value: str) -> "Response":
        if self._sent:
            raise ResponseAlreadySent("Cannot set headers after the response was sent")
        self.headers[name] = value
        return self

    def send(self, body: Any = b"", content_type: Optional[str] = None) -> "Response":
        if self._sent:
            raise ResponseAlreadySent("Response was already sent")
        if isinstance(body, str):
            body = body.encode("utf-8")
            content_type = content_type or "text/html; charset=utf-8"
        if content_type and "content-type" not in {k.lower() for k in self.headers}:
            self.headers["Content-Type"] = content_type
        self.body = bytes(body)
        self._sent = True
        return self

    def json(self, data: Any) -> "Response":
        if not any(k.lower() == "content-type" for k in self.headers):
            self.headers["Content-Type"] = "application/json"
        return self.send(_json.dumps(data).encode("utf-8"))

    def redirect(self, location: str, status: int = 302) -> "Response":
        self.status(status).set_header("Location", location)
        return self.send(b"")

    def render(self, template_name: str, params: Optional[Mapping[str, Any]] = None) -> "Response":
        """Render a template with ``locals`` overlaid by ``params``."""
        if self._renderer is None:
            raise RuntimeError(
                "No renderer is bound to the transport; "
                "call Renderer(...).setup(transport) first"
            )
        context = {**self.locals, **(params or {})}
        html = self._renderer.render(template_name, context)
        return self.send(html, "text/html; charset=utf-8")

    def __repr__(self) -> str:
        return f"<Response {self.status_code} sent={self._sent}>"
