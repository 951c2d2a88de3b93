"""
Arbor Faults - Structured fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
- Concrete faults for configuration, discovery, routing and rendering

Discovery and registration faults are built and logged, never raised out
of the engine: one broken controller must not stop the application from
starting.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines the logging level used when a fault is reported.
    """
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.DISCOVERY = FaultDomain("discovery", "Controller discovery and introspection errors")
FaultDomain.ROUTING = FaultDomain("routing", "Route declaration and matching errors")
FaultDomain.RENDER = FaultDomain("render", "Page rendering errors")


DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.DISCOVERY: Severity.ERROR,
    FaultDomain.ROUTING: Severity.ERROR,
    FaultDomain.RENDER: Severity.WARN,
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    Attributes:
        code: Stable machine-readable identifier (e.g., "ROUTE_NOT_FOUND")
        message: Human-readable summary
        severity: Fault severity (INFO, WARN, ERROR, FATAL)
        domain: Fault domain (CONFIG, DISCOVERY, ROUTING, RENDER)
        public: Whether the message is safe to expose to a client
        metadata: Additional context data

    Example:
        ```python
        raise Fault(
            code="CONFIG_INVALID",
            message="port must be an integer",
            domain=FaultDomain.CONFIG,
        )
        ```
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain,
        severity: Optional[Severity] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.domain = domain
        self.severity = severity or DOMAIN_DEFAULTS.get(domain, Severity.ERROR)
        self.public = public
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize fault for logging."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "metadata": self.metadata,
        }


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Configuration is missing or invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            domain=FaultDomain.CONFIG,
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# DISCOVERY Faults
# ============================================================================

class DiscoveryLoadFault(Fault):
    """A discovery candidate file failed to load."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(
            code="DISCOVERY_LOAD_FAILED",
            message=f"Failed to load controller file '{path}': {cause}",
            domain=FaultDomain.DISCOVERY,
            metadata={"path": path, "cause": type(cause).__name__},
        )
        self.__cause__ = cause


class IntrospectionFault(Fault):
    """A unit's route descriptors could not be enumerated or applied."""

    def __init__(self, unit: Any, cause: BaseException):
        name = getattr(unit, "__qualname__", repr(unit))
        super().__init__(
            code="INTROSPECTION_FAILED",
            message=f"Failed to introspect controller '{name}': {cause}",
            domain=FaultDomain.DISCOVERY,
            metadata={"unit": name, "cause": type(cause).__name__},
        )
        self.__cause__ = cause


# ============================================================================
# ROUTING Faults
# ============================================================================

class RouteDeclarationFault(Fault):
    """A handler method declares routes in an unsupported way."""

    def __init__(self, handler_name: str, reason: str):
        super().__init__(
            code="ROUTE_DECLARATION_INVALID",
            message=f"Invalid route declaration on '{handler_name}': {reason}",
            domain=FaultDomain.ROUTING,
            metadata={"handler": handler_name, "reason": reason},
        )


class UnmatchedRouteFault(Fault):
    """No installed route matched the request path."""

    def __init__(self, path: str, method: str = ""):
        super().__init__(
            code="ROUTE_NOT_FOUND",
            message=f"Not Found: {path}",
            domain=FaultDomain.ROUTING,
            public=True,
            metadata={"path": path, "method": method},
        )
        self.status_code = 404


# ============================================================================
# RENDER Faults
# ============================================================================

class RenderPreconditionFault(Fault):
    """A page handler was not called with exactly one response object."""

    def __init__(self, handler_name: str, found: int):
        super().__init__(
            code="PAGE_RESPONSE_ARGUMENT",
            message=(
                f"Incorrect number of response objects found in arguments for "
                f"{handler_name}: expected exactly one, found {found}"
            ),
            domain=FaultDomain.RENDER,
            metadata={"handler": handler_name, "found": found},
        )
