"""
Shared test fixtures and helpers for the Arbor test suite.
"""

import sys
import textwrap
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from arbor.http import AsgiTransport, Request, Response


# ============================================================================
# Transport spy
# ============================================================================


class RecordingTransport:
    """Transport that records every registration call instead of serving."""

    def __init__(self):
        self.calls: List[Tuple[str, Optional[str], Tuple[Any, ...]]] = []

    def get(self, path, *handlers):
        self.calls.append(("GET", path, handlers))

    def post(self, path, *handlers):
        self.calls.append(("POST", path, handlers))

    def put(self, path, *handlers):
        self.calls.append(("PUT", path, handlers))

    def delete(self, path, *handlers):
        self.calls.append(("DELETE", path, handlers))

    def all(self, *handlers):
        self.calls.append(("ALL", None, handlers))

    def use_error(self, handler):
        self.calls.append(("ERROR", None, (handler,)))

    @property
    def routes(self) -> List[Tuple[str, str]]:
        return [(verb, path) for verb, path, _ in self.calls if verb in ("GET", "POST", "PUT", "DELETE")]

    @property
    def kinds(self) -> List[str]:
        return [verb for verb, _, _ in self.calls]


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def transport() -> AsgiTransport:
    return AsgiTransport()


# ============================================================================
# Request helpers
# ============================================================================


def make_request(method: str = "GET", path: str = "/", **kwargs) -> Request:
    return Request(method, path, **kwargs)


async def dispatch(transport: AsgiTransport, method: str = "GET", path: str = "/", **kwargs) -> Response:
    """Run one request through an AsgiTransport."""
    return await transport.handle(make_request(method, path, **kwargs))


class FakeResponse:
    """Response double recording render calls."""

    def __init__(self):
        self.rendered: List[Tuple[str, Dict[str, Any]]] = []
        self.status_code = 200
        self.headers_sent = False

    def render(self, template_name, params):
        self.rendered.append((template_name, dict(params)))


@pytest.fixture
def fake_response() -> FakeResponse:
    return FakeResponse()


# ============================================================================
# Controller trees on disk
# ============================================================================


@pytest.fixture
def controllers_dir(tmp_path, monkeypatch) -> Callable[..., Path]:
    """
    Build a controller tree below ``tmp_path``.

    Returns a factory taking ``{relative_path: source}`` and an optional
    root directory name. The parent of the root is put on ``sys.path`` so
    controller files can import each other by package name, and every
    module loaded from ``tmp_path`` is removed afterwards.
    """
    monkeypatch.syspath_prepend(str(tmp_path))

    def build(files: Dict[str, str], name: str = "routes") -> Path:
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        for relative, source in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(source))
        return root

    yield build

    for name, module in list(sys.modules.items()):
        if _loaded_from(module, tmp_path):
            del sys.modules[name]


def _loaded_from(module: Any, directory: Path) -> bool:
    """True if a module's file or package path lies below ``directory``."""
    directory = directory.resolve()
    locations = [getattr(module, "__file__", None), *(getattr(module, "__path__", None) or [])]
    return any(
        location is not None and Path(location).resolve().is_relative_to(directory)
        for location in locations
    )
