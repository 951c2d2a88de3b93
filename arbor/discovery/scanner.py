"""
Controller Scanner.

Walks a directory tree, loads every Python file as a module and collects
the Controller and ErrorController classes it exports.

- Sibling entries are scanned concurrently; result order is not part of
  the contract.
- Loading a module never registers routes.
- A file that fails to load is logged and skipped; its siblings are not
  affected.
"""

import asyncio
import importlib.util
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import List, Optional, Type, Union

import aiofiles.os

from ..controller.base import Controller, ErrorController, is_controller, is_error_controller
from ..faults import ConfigFault, DiscoveryLoadFault

logger = logging.getLogger("arbor.discovery")

SKIPPED_DIRECTORIES = frozenset({"__pycache__"})

# Parent name for files whose derived module name is already taken
FALLBACK_NAMESPACE = "arbor_discovered"


@dataclass
class DiscoveryResult:
    """Controllers and error controllers found by a discovery pass."""

    controllers: List[Type[Controller]] = field(default_factory=list)
    error_controllers: List[Type[ErrorController]] = field(default_factory=list)

    def merge(self, other: "DiscoveryResult") -> "DiscoveryResult":
        """Append ``other``'s units that are not already present."""
        for unit in other.controllers:
            if unit not in self.controllers:
                self.controllers.append(unit)
        for unit in other.error_controllers:
            if unit not in self.error_controllers:
                self.error_controllers.append(unit)
        return self

    def __len__(self) -> int:
        return len(self.controllers) + len(self.error_controllers)


def exported_members(module: ModuleType) -> List[object]:
    """
    Members a module exports.

    ``__all__`` when the module defines it; otherwise the public names
    defined in the module itself, so imported classes are left to the
    module that defines them.
    """
    exported = getattr(module, "__all__", None)
    if exported is not None:
        return [getattr(module, name) for name in exported if hasattr(module, name)]

    return [
        member
        for name, member in vars(module).items()
        if not name.startswith("_")
        and getattr(member, "__module__", None) == module.__name__
    ]


def classify_module(module: ModuleType) -> DiscoveryResult:
    """Collect the controller classes a module exports."""
    result = DiscoveryResult()
    for member in exported_members(module):
        if is_controller(member) and member not in result.controllers:
            result.controllers.append(member)
        elif is_error_controller(member) and member not in result.error_controllers:
            result.error_controllers.append(member)
    return result


class ControllerScanner:
    """
    Discovers controllers below a root directory.

    Module names are derived from the root directory name and the relative
    path (``routes/admin/users.py`` -> ``routes.admin.users``), so a file
    that was already imported under that name is reused instead of loaded
    twice. This keeps class identity stable when one controller file
    imports another to declare it as a child. A name already held by a
    module from another file (e.g. a root directory called like an installed
    package) is left alone and the file is loaded below
    ``FALLBACK_NAMESPACE`` instead.

    Example:
        result = await ControllerScanner("routes").scan()
        engine.register(transport, result.controllers, result.error_controllers)
    """

    def __init__(self, root: Union[str, Path], *, suffix: str = ".py"):
        root = Path(root)
        if not root.is_dir():
            raise ConfigFault("controllers_path", f"'{root}' is not a directory")
        self.root = root.resolve()
        self.suffix = suffix

    async def scan(self) -> DiscoveryResult:
        """Scan the whole tree."""
        result = await self._scan_directory(self.root)
        logger.debug(
            "Discovered %d controller(s) and %d error controller(s) under %s",
            len(result.controllers), len(result.error_controllers), self.root,
        )
        return result

    async def _scan_directory(self, directory: Path) -> DiscoveryResult:
        names = await aiofiles.os.listdir(directory)
        found = await asyncio.gather(*(
            self._scan_entry(directory / name)
            for name in sorted(names)
            if not name.startswith(".")
        ))

        result = DiscoveryResult()
        for partial in found:
            result.merge(partial)
        return result

    async def _scan_entry(self, path: Path) -> DiscoveryResult:
        if await aiofiles.os.path.isdir(path):
            if path.name in SKIPPED_DIRECTORIES:
                return DiscoveryResult()
            return await self._scan_directory(path)

        if path.suffix != self.suffix:
            return DiscoveryResult()

        try:
            module = self._load_module(path)
        except Exception as exc:
            fault = DiscoveryLoadFault(str(path), exc)
            logger.error(str(fault), exc_info=exc)
            return DiscoveryResult()

        result = classify_module(module)
        logger.debug(
            "%s loaded successfully: %s found",
            path, [unit.__name__ for unit in (*result.controllers, *result.error_controllers)],
        )
        return result

    def module_name(self, path: Path) -> str:
        relative = path.relative_to(self.root).with_suffix("")
        parts = [self.root.name, *relative.parts]
        if parts[-1] == "__init__":
            parts.pop()
        return ".".join(parts)

    def _load_module(self, path: Path) -> ModuleType:
        name = self.module_name(path)

        existing = sys.modules.get(name)
        if existing is not None:
            if _same_file(existing, path):
                return existing
            # Never replace a module loaded from somewhere else
            logger.debug("%s is taken by %r; loading %s as %s.%s",
                         name, existing, path, FALLBACK_NAMESPACE, name)
            name = f"{FALLBACK_NAMESPACE}.{name}"
            existing = sys.modules.get(name)
            if existing is not None and _same_file(existing, path):
                return existing

        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot create a module spec for {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise
        return module


def _same_file(module: ModuleType, path: Path) -> bool:
    location: Optional[str] = getattr(module, "__file__", None)
    return location is not None and Path(location).resolve() == path.resolve()


async def discover(root: Union[str, Path]) -> DiscoveryResult:
    """Discover controllers below ``root``."""
    return await ControllerScanner(root).scan()
