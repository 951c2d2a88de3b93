"""
Arbor Controller System

Class-based handlers declared with verb decorators, composed into a
single registration pass.

Key Features:
- Zero import-time side effects: routes are installed by ``setup`` only
- Explicit child relations instead of routing-by-convention prefixes
- Deterministic order: verb, then method order, then catch-all, then errors
- Status-gated error controllers

Example:
    from arbor import Controller, GET, POST, page

    class AccountController(Controller):
        children = [AccountSettingsController]

        @GET("/account")
        @page("Account", "account")
        async def show(self, request, response):
            return {"user": request.state["user"]}
"""

from .base import (
    Controller,
    ErrorController,
    apply_routes,
    error_handler,
    installed_routes,
    is_controller,
    is_error_controller,
)
from .composition import Partition, partition
from .decorators import DELETE, GET, POST, PUT, RouteDecorator
from .engine import OutsideFrameworkRoutes, RegistrationEngine, RegistrationReport
from .errors import bind_error_controller, install_error_controllers
from .metadata import RouteDescriptor, Verb, extract_routes
from .page import BASE_TEMPLATE, page

__all__ = [
    # Base
    "Controller",
    "ErrorController",
    "apply_routes",
    "error_handler",
    "installed_routes",
    "is_controller",
    "is_error_controller",

    # Decorators
    "RouteDecorator",
    "GET", "POST", "PUT", "DELETE",
    "page",
    "BASE_TEMPLATE",

    # Metadata
    "RouteDescriptor",
    "Verb",
    "extract_routes",

    # Composition & registration
    "Partition",
    "partition",
    "RegistrationEngine",
    "RegistrationReport",
    "OutsideFrameworkRoutes",

    # Error chain
    "bind_error_controller",
    "install_error_controllers",
]
