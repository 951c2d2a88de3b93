"""
Controller Method Decorators

HTTP verb decorators for controller methods.
Attach descriptors without import-time side effects: nothing is
registered until the controller's ``setup`` runs.
"""

from typing import Any, Callable, TypeVar

from ..faults import RouteDeclarationFault
from .metadata import DESCRIPTORS_ATTR, RouteDescriptor, Verb, descriptors_of


F = TypeVar('F', bound=Callable[..., Any])


class RouteDecorator:
    """
    Base route decorator.

    Attaches a RouteDescriptor to the decorated function and returns the
    function itself, so its call signature is unchanged.
    """

    verb: Verb

    def __init__(self, path: str, *middleware: Any):
        if not isinstance(path, str):
            raise TypeError(f"Route path must be a string, got {type(path).__name__}")
        self.path = path
        self.middleware = tuple(middleware)

    def __call__(self, func: F) -> F:
        existing = descriptors_of(func)
        if any(d.verb is self.verb for d in existing):
            raise RouteDeclarationFault(
                func.__name__,
                f"a method may carry at most one {self.verb.value} route",
            )

        descriptor = RouteDescriptor(
            verb=self.verb,
            path=self.path,
            middleware=self.middleware,
            handler_name=func.__name__,
        )
        # New tuple: functools.wraps shares __dict__ values with the wrapped function
        setattr(func, DESCRIPTORS_ATTR, existing + (descriptor,))
        return func


class GET(RouteDecorator):
    """
    GET route decorator.

    GET routes only carry a path; request bodies are not parsed for them.

    Example:
        @GET("/users")
        async def list_users(self, request, response):
            ...
    """

    verb = Verb.GET

    def __init__(self, path: str, *middleware: Any):
        if middleware:
            raise RouteDeclarationFault(f"GET {path}", "GET routes take no middleware")
        super().__init__(path)


class POST(RouteDecorator):
    """
    POST route decorator.

    Example:
        @POST("/users", parse_form)
        async def create_user(self, request, response):
            ...
    """

    verb = Verb.POST


class PUT(RouteDecorator):
    """PUT route decorator."""

    verb = Verb.PUT


class DELETE(RouteDecorator):
    """DELETE route decorator."""

    verb = Verb.DELETE
