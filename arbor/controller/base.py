"""
Controller Base Classes

Provides the two unit capabilities the discovery layer looks for:

- ``Controller``: exposes a route table and an idempotent ``setup``
- ``ErrorController``: handles errors for one bound status code

Which controllers were set up on which transport is tracked here, keyed
weakly by transport, so a transport only has to offer the verb methods.
"""

import abc
import logging
import weakref
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple, Type, TypeVar, Union

from ..faults import IntrospectionFault
from .metadata import RouteDescriptor, extract_routes

logger = logging.getLogger("arbor.registry")

E = TypeVar("E", bound=type)


class SetupState:
    """
    Activation bookkeeping for one transport.

    Attributes:
        started: Controllers whose ``setup`` has begun (guards cycles)
        installed: Controllers whose routes reached the transport, with
            the descriptor table that was installed
    """

    def __init__(self):
        self.started: Set[type] = set()
        self.installed: Dict[type, List[RouteDescriptor]] = {}


_setup_states: "weakref.WeakKeyDictionary[Any, SetupState]" = weakref.WeakKeyDictionary()


def setup_state(transport: Any) -> SetupState:
    """Activation state of ``transport``, created on first use."""
    state = _setup_states.get(transport)
    if state is None:
        state = _setup_states[transport] = SetupState()
    return state


def installed_routes(transport: Any, unit: type) -> Optional[List[RouteDescriptor]]:
    """Routes ``unit`` installed on ``transport``, or None if it was not set up."""
    state = _setup_states.get(transport)
    if state is None:
        return None
    return state.installed.get(unit)


class Controller:
    """
    Base Controller class.

    Controllers group handler methods declared with the verb decorators.
    A controller may own child controllers: they are activated by the
    parent's ``setup`` and never directly by the registration engine.

    Class Attributes:
        children: Controllers activated before this one's own routes

    Example:
        class UsersController(Controller):
            children = [UserSettingsController]

            @GET("/users")
            async def index(self, request, response):
                response.json(await load_users())

            @POST("/users", parse_json)
            async def create(self, request, response):
                ...
    """

    children: Union[Sequence[Type["Controller"]], Type["Controller"]] = ()

    @classmethod
    def child_units(cls) -> Tuple[Type["Controller"], ...]:
        """Declared children, normalized to a tuple."""
        children = cls.children
        if isinstance(children, type):
            return (children,)
        return tuple(children or ())

    @classmethod
    def routes(cls) -> List[RouteDescriptor]:
        """The controller's route table (pure, no side effects)."""
        return extract_routes(cls)

    @classmethod
    def setup(cls, transport: Any) -> None:
        """
        Activate the controller on a transport.

        Runs once per transport: children first, in declaration order,
        then this controller's own routes. Repeated calls are no-ops.

        A child that fails is logged and skipped; the remaining children
        and this controller's own routes are still installed.
        """
        state = setup_state(transport)
        if cls in state.started:
            return
        state.started.add(cls)

        for child in cls.child_units():
            try:
                child.setup(transport)
            except Exception as exc:
                fault = IntrospectionFault(child, exc)
                logger.error(str(fault), exc_info=exc)

        try:
            state.installed[cls] = apply_routes(transport, cls)
        except Exception:
            state.started.discard(cls)
            raise


def apply_routes(transport: Any, unit: Type[Controller]) -> List[RouteDescriptor]:
    """
    Install a controller's route table on a transport.

    A single instance is created and every handler is bound to it.

    Returns:
        The descriptors that were installed
    """
    table = unit.routes()
    instance = unit()

    for descriptor in table:
        handler = getattr(instance, descriptor.handler_name)
        register: Callable[..., None] = getattr(transport, descriptor.verb.value.lower())
        register(descriptor.path, *descriptor.middleware, handler)

    return table


class ErrorController(abc.ABC):
    """
    Base class for error pages.

    Bind a status code with the ``error_handler`` decorator (or by setting
    ``status_code``). The controller only runs when the response carries
    that status.

    Class Attributes:
        status_code: Status this controller handles
        handles_error: Human-readable label, used for diagnostics only

    Example:
        @error_handler(404, "Page not found")
        class NotFoundPage(ErrorController):
            def handle(self, error, request, response, next):
                response.render("404", {"path": request.path})
    """

    status_code: Optional[int] = None
    handles_error: Optional[str] = None

    @abc.abstractmethod
    def handle(self, error: Any, request: Any, response: Any, next: Any) -> Any:
        """Handle an error whose response status matches ``status_code``."""

    @property
    def label(self) -> str:
        return self.handles_error or str(self.status_code)


def error_handler(status_code: int, description: Optional[str] = None) -> Callable[[E], E]:
    """
    Bind an ErrorController to a status code.

    Args:
        status_code: Status that triggers the controller
        description: Label for diagnostics (defaults to the status code)
    """
    def decorator(cls: E) -> E:
        cls.status_code = status_code
        if getattr(cls, "handles_error", None) is None:
            cls.handles_error = description or str(status_code)
        return cls

    return decorator


def is_controller(obj: Any) -> bool:
    """True for Controller subclasses (the base class itself excluded)."""
    return isinstance(obj, type) and issubclass(obj, Controller) and obj is not Controller


def is_error_controller(obj: Any) -> bool:
    """True for ErrorController subclasses (the base class itself excluded)."""
    return (
        isinstance(obj, type)
        and issubclass(obj, ErrorController)
        and obj is not ErrorController
    )
