"""
Request - Minimal HTTP request for the reference transport.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import parse_qs


class Request:
    """
    HTTP request.

    Attributes:
        method: Upper-case HTTP method
        path: Request path (no query string)
        query: Parsed query string (last value wins)
        headers: Lower-cased header names to values
        body: Raw request body
        params: Path parameters captured by the matched route
        state: Per-request scratch space shared by handlers
    """

    __slots__ = ("method", "path", "query", "headers", "body", "params", "state", "scope")

    def __init__(
        self,
        method: str,
        path: str,
        *,
        query: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: bytes = b"",
        scope: Optional[Dict[str, Any]] = None,
    ):
        self.method = method.upper()
        self.path = path or "/"
        self.query = query or {}
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        self.body = body
        self.params: Dict[str, str] = {}
        self.state: Dict[str, Any] = {}
        self.scope = scope or {}

    @classmethod
    async def from_asgi(
        cls,
        scope: Dict[str, Any],
        receive: Callable[[], Awaitable[Dict[str, Any]]],
    ) -> "Request":
        """Build a request from an ASGI HTTP scope, reading the full body."""
        chunks: List[bytes] = []
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)

        raw_query = scope.get("query_string", b"").decode("latin-1")
        query = {key: values[-1] for key, values in parse_qs(raw_query).items()}
        headers = {
            name.decode("latin-1"): value.decode("latin-1")
            for name, value in scope.get("headers", [])
        }

        return cls(
            scope.get("method", "GET"),
            scope.get("path", "/"),
            query=query,
            headers=headers,
            body=b"".join(chunks),
            scope=scope,
        )

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    def json(self) -> Any:
        """Parse request body as JSON."""
        return json.loads(self.body or b"null")

    def form(self) -> Dict[str, str]:
        """Parse an url-encoded request body."""
        parsed = parse_qs(self.body.decode("utf-8"))
        return {key: values[-1] for key, values in parsed.items()}

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"
