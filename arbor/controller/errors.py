"""
Error-Controller Chain

Wraps ErrorControllers into transport error handlers. Each wrapper only
fires for its bound status code and passes everything else on, so several
error pages can be chained with unmatched errors falling through to the
transport's default behaviour.
"""

import inspect
import logging
from typing import Any, Callable, Iterable, List, Type

from ..faults import IntrospectionFault
from .base import ErrorController

logger = logging.getLogger("arbor.errors")


def bind_error_controller(controller: ErrorController) -> Callable[..., Any]:
    """
    Build the status-gated error handler for one controller instance.

    Failures inside ``handle`` are not caught here.
    """
    status_code = controller.status_code

    async def gate(error: Any, request: Any, response: Any, next: Callable[..., Any]) -> Any:
        # A response that started streaming cannot be re-rendered
        if response.headers_sent:
            return await next(error)

        if response.status_code != status_code:
            return await next(error)

        result = controller.handle(error, request, response, next)
        if inspect.isawaitable(result):
            result = await result
        return result

    gate.__name__ = f"{type(controller).__name__}.handle"
    gate.__qualname__ = gate.__name__
    return gate


def install_error_controllers(
    transport: Any,
    units: Iterable[Type[ErrorController]],
    report: Any = None,
) -> List[ErrorController]:
    """
    Instantiate each error controller once and append it to the error chain.

    Units without a bound status code, or that fail to instantiate, are
    logged and skipped.

    Returns:
        The installed controller instances, in chain order
    """
    installed: List[ErrorController] = []

    for unit in units:
        if unit.status_code is None:
            logger.warning(
                "Error controller %s has no bound status code; skipped "
                "(use @error_handler(status))", unit.__qualname__,
            )
            continue

        try:
            controller = unit()
        except Exception as exc:
            fault = IntrospectionFault(unit, exc)
            logger.error(str(fault), exc_info=exc)
            continue

        transport.use_error(bind_error_controller(controller))
        installed.append(controller)

        if report is not None:
            report.append(
                f"ERROR {controller.status_code} ({controller.label}) from {unit.__name__}"
            )

    return installed
