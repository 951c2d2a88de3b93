"""
Controller Manifest.

An explicit list of controller classes, for applications that prefer
declaring their controllers over scanning a directory. Produces the same
``DiscoveryResult`` as the scanner, without loading any file.
"""

from typing import Any, Iterable

from ..controller.base import is_controller, is_error_controller
from ..faults import ConfigFault
from .scanner import DiscoveryResult


class ControllerManifest:
    """
    Hand-written controller registry.

    Example:
        manifest = ControllerManifest(HomeController, AccountController, NotFoundPage)
        result = await manifest.scan()
    """

    def __init__(self, *units: Any):
        self._result = DiscoveryResult()
        self.extend(units)

    def add(self, unit: Any) -> "ControllerManifest":
        if is_controller(unit):
            if unit not in self._result.controllers:
                self._result.controllers.append(unit)
        elif is_error_controller(unit):
            if unit not in self._result.error_controllers:
                self._result.error_controllers.append(unit)
        else:
            raise ConfigFault(
                "manifest",
                f"{unit!r} is neither a Controller nor an ErrorController subclass",
            )
        return self

    def extend(self, units: Iterable[Any]) -> "ControllerManifest":
        for unit in units:
            self.add(unit)
        return self

    async def scan(self) -> DiscoveryResult:
        return DiscoveryResult(
            controllers=list(self._result.controllers),
            error_controllers=list(self._result.error_controllers),
        )

    def __len__(self) -> int:
        return len(self._result)
