"""
Arbor HTTP - Host transport collaborator.

The registration engine only depends on the ``Transport`` contract;
``AsgiTransport`` is the in-process implementation used by ``App`` and
the test suite.
"""

from .request import Request
from .response import Response, ResponseAlreadySent, TemplateRenderer
from .transport import AsgiTransport, Transport, compile_path

__all__ = [
    "Request",
    "Response",
    "ResponseAlreadySent",
    "TemplateRenderer",
    "AsgiTransport",
    "Transport",
    "compile_path",
]
