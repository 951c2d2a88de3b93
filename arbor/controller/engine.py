"""
Registration Engine

Drives a full registration pass over discovered controllers:

1. Partition the controllers (see ``composition``).
2. Activate every top-level controller through its ``setup``. Child
   controllers are only ever activated by their parent's ``setup``.
3. Report the routes that reached the transport: children first, then
   top-level controllers.
4. Install the catch-all, then the error-controller chain.

Each route reaches the transport once and appears in the report once. A
controller that fails is logged and left out of both.
"""

import logging
from typing import Any, Iterable, Iterator, List, Optional, Set, Type

from ..faults import IntrospectionFault, UnmatchedRouteFault
from .base import Controller, ErrorController, installed_routes
from .composition import partition
from .errors import install_error_controllers
from .metadata import RouteDescriptor

logger = logging.getLogger("arbor.registry")


class RegistrationReport:
    """
    Ordered, append-only record of what a registration pass installed.

    Used for diagnostics only.
    """

    def __init__(self):
        self._lines: List[str] = []

    def append(self, line: str) -> None:
        self._lines.append(line)

    def lines(self) -> List[str]:
        return list(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._lines))

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, line: object) -> bool:
        return line in self._lines

    def __repr__(self) -> str:
        return f"RegistrationReport({len(self._lines)} entries)"


class OutsideFrameworkRoutes:
    """
    Paths the catch-all must leave alone.

    Filled by subsystems serving their own routes (e.g. an OAuth callback
    or a JWKS document). Adding is idempotent and may happen after startup;
    readers always see a consistent snapshot.
    """

    def __init__(self, paths: Iterable[str] = ()):
        self._paths: frozenset = frozenset(paths)

    def add(self, path: str) -> None:
        if path not in self._paths:
            self._paths = self._paths | {path}

    def discard(self, path: str) -> None:
        self._paths = self._paths - {path}

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))

    def __len__(self) -> int:
        return len(self._paths)


class RegistrationEngine:
    """
    Installs controllers, the catch-all and error controllers on a transport.

    Example:
        engine = RegistrationEngine()
        engine.add_outside_framework_route("/.well-known/jwks.json")
        report = engine.register(transport, result.controllers, result.error_controllers)
    """

    def __init__(self, outside_routes: Optional[OutsideFrameworkRoutes] = None):
        self.outside_routes = outside_routes if outside_routes is not None else OutsideFrameworkRoutes()
        self.report = RegistrationReport()

    def add_outside_framework_route(self, path: str) -> None:
        """Exempt ``path`` from the catch-all not-found behaviour."""
        logger.debug("Adding outside framework route: %s", path)
        self.outside_routes.add(path)

    def register(
        self,
        transport: Any,
        units: Iterable[Type[Controller]],
        error_units: Iterable[Type[ErrorController]] = (),
    ) -> RegistrationReport:
        """
        Run the registration pass.

        Args:
            transport: Host transport (see ``arbor.http.Transport``)
            units: Discovered controller classes, in any order
            error_units: Discovered error controller classes

        Returns:
            The registration report
        """
        logger.info("Setting up routes...")
        layout = partition(units)

        # Children are activated by their parent's setup, never from here
        for unit in layout.top_level:
            if self._introspect(unit) is None:
                continue

            try:
                unit.setup(transport)
            except Exception as exc:
                fault = IntrospectionFault(unit, exc)
                logger.error(str(fault), exc_info=exc)

        # Children first, then top-level units; only what reached the transport
        reported: Set[Type[Controller]] = set()
        for unit in (*layout.children, *layout.top_level):
            if unit in reported:
                continue
            table = installed_routes(transport, unit)
            if table is not None:
                self._record(unit, table)
                reported.add(unit)

        transport.all(self.catch_all)
        install_error_controllers(transport, error_units, self.report)

        logger.info("Routes added:")
        for line in self.report:
            logger.info("\t%s", line)

        return self.report

    async def catch_all(self, request: Any, response: Any, next: Any) -> Any:
        """Last route: 404 for everything not served elsewhere."""
        if request.path in self.outside_routes:
            return await next()

        response.status(404)
        return await next(UnmatchedRouteFault(request.path, request.method))

    def _introspect(self, unit: Type[Controller]) -> Optional[List[RouteDescriptor]]:
        try:
            return unit.routes()
        except Exception as exc:
            fault = IntrospectionFault(unit, exc)
            logger.error(str(fault), exc_info=exc)
            return None

    def _record(self, unit: Type[Controller], table: List[RouteDescriptor]) -> None:
        for descriptor in table:
            self.report.append(descriptor.describe(unit.__name__))
