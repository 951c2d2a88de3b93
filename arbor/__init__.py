"""
Arbor - Class-based controllers for async Python web apps

Complete integration of:
- Controllers: Handler methods declared with GET/POST/PUT/DELETE decorators
- Discovery: Controllers found by scanning a directory tree, or a manifest
- Composition: Parent/child controllers registered exactly once
- Registration: Deterministic route order, catch-all and registration report
- Error controllers: Status-gated error pages
- Pages: Handler return values rendered through a base template
- Faults: Structured error handling with fault domains
"""

__version__ = "0.1.0"

# ============================================================================
# Controllers
# ============================================================================

from .controller import (
    BASE_TEMPLATE,
    DELETE,
    GET,
    POST,
    PUT,
    Controller,
    ErrorController,
    OutsideFrameworkRoutes,
    Partition,
    RegistrationEngine,
    RegistrationReport,
    RouteDescriptor,
    Verb,
    error_handler,
    extract_routes,
    page,
    partition,
)

# ============================================================================
# Discovery
# ============================================================================

from .discovery import ControllerManifest, ControllerScanner, DiscoveryResult, discover

# ============================================================================
# Host collaborators
# ============================================================================

from .http import AsgiTransport, Request, Response, Transport
from .templates import Renderer
from .middleware import (
    HealthCheckMiddleware,
    HealthCheckStatus,
    global_template_values,
    health_check_middleware,
)

# ============================================================================
# Bootstrap, config & faults
# ============================================================================

from .app import App, Initializer
from .config import ArborConfig
from .faults import (
    ConfigFault,
    DiscoveryLoadFault,
    Fault,
    FaultDomain,
    IntrospectionFault,
    RenderPreconditionFault,
    RouteDeclarationFault,
    Severity,
    UnmatchedRouteFault,
)

__all__ = [
    "__version__",
    # Controllers
    "Controller", "ErrorController", "error_handler",
    "GET", "POST", "PUT", "DELETE",
    "page", "BASE_TEMPLATE",
    "RouteDescriptor", "Verb", "extract_routes",
    "Partition", "partition",
    "RegistrationEngine", "RegistrationReport", "OutsideFrameworkRoutes",
    # Discovery
    "ControllerManifest", "ControllerScanner", "DiscoveryResult", "discover",
    # Host collaborators
    "AsgiTransport", "Transport", "Request", "Response", "Renderer",
    "HealthCheckMiddleware", "HealthCheckStatus",
    "health_check_middleware", "global_template_values",
    # Bootstrap, config & faults
    "App", "Initializer", "ArborConfig",
    "Fault", "FaultDomain", "Severity",
    "ConfigFault", "DiscoveryLoadFault", "IntrospectionFault",
    "RouteDeclarationFault", "UnmatchedRouteFault", "RenderPreconditionFault",
]
