"""
Route Descriptor Model

Descriptors are attached to handler functions by the verb decorators and
collected into a per-controller table by ``extract_routes``. Nothing here
touches a transport.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class Verb(str, Enum):
    """HTTP verbs a controller can declare, in registration order."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


DESCRIPTORS_ATTR = "__route_descriptors__"


@dataclass(frozen=True)
class RouteDescriptor:
    """
    One route declared on a handler method.

    Attributes:
        verb: HTTP verb
        path: Transport path (e.g. "/users/:id")
        middleware: Handlers run before the method, in order
        handler_name: Name of the controller method
    """
    verb: Verb
    path: str
    middleware: Tuple[Any, ...] = field(default=())
    handler_name: str = ""

    def describe(self, unit_name: str) -> str:
        """Report line for this route."""
        return f"{self.verb.value} {self.path} from {unit_name}"


def descriptors_of(func: Any) -> Tuple[RouteDescriptor, ...]:
    """Descriptors attached to a function (empty if none)."""
    return tuple(getattr(func, DESCRIPTORS_ATTR, ()))


def _handler_members(unit: type) -> Dict[str, Any]:
    """
    Class members in definition order, base classes first.

    A subclass attribute replaces the inherited one in place, so an
    overriding method keeps the position of the method it overrides.
    """
    members: Dict[str, Any] = {}
    for klass in reversed(unit.__mro__):
        if klass is object:
            continue
        for name, value in vars(klass).items():
            members[name] = value
    return members


def extract_routes(unit: type) -> List[RouteDescriptor]:
    """
    Build the descriptor table of a controller class.

    Ordered by verb (GET, POST, PUT, DELETE), then by method discovery
    order within a verb.

    Args:
        unit: Controller class to inspect

    Returns:
        Ordered list of RouteDescriptor
    """
    members = [
        (name, descriptors_of(value))
        for name, value in _handler_members(unit).items()
        if callable(value)
    ]

    table: List[RouteDescriptor] = []
    for verb in Verb:
        for _, descriptors in members:
            table.extend(d for d in descriptors if d.verb is verb)
    return table
