"""
Page Decorator

Turns a handler's return value into a render of the base template:

- ``False``: the handler owns the response (e.g. it redirected), nothing
  is rendered
- a mapping, a dataclass instance or a ``SimpleNamespace``: its fields are
  merged over the default render params
- anything else (including ``None``): render with the default params
"""

import dataclasses
import functools
import inspect
import logging
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any, Callable, Dict, Optional, Sequence, Union

from .._invoke import positional_arity
from ..faults import RenderPreconditionFault

logger = logging.getLogger("arbor.page")

BASE_TEMPLATE = "base"

Script = Union[str, Dict[str, Any]]


def is_response(obj: Any) -> bool:
    """Anything with a callable ``render`` can receive a page."""
    return callable(getattr(obj, "render", None))


def output_params(output: Any) -> Optional[Mapping]:
    """Render params carried by a handler's return value, if any."""
    if isinstance(output, Mapping):
        return output
    if dataclasses.is_dataclass(output) and not isinstance(output, type):
        # Shallow: nested values reach the template as they are
        return {f.name: getattr(output, f.name) for f in dataclasses.fields(output)}
    if isinstance(output, SimpleNamespace):
        return vars(output)
    return None


def page(
    title: str,
    page_name: str,
    extra_scripts: Sequence[Script] = (),
    extra_styles: Sequence[str] = (),
    **extra_params: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Render the base template after the decorated handler runs.

    Args:
        title: Page title
        page_name: Name of the page template included by the base template
        extra_scripts: Script URLs, or ``{"script": url, "defer": bool}``
        extra_styles: Stylesheet URLs
        **extra_params: Additional fixed render params

    Example:
        @GET("/login")
        @page("Login", "login", extra_styles=["/css/login.css"])
        async def login(self, request, response):
            if request.state.get("user"):
                response.redirect("/")
                return False
            return {"next": request.query.get("next", "/")}
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        arity = positional_arity(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> None:
            responses = [arg for arg in args if is_response(arg)]
            if len(responses) != 1:
                fault = RenderPreconditionFault(func.__qualname__, len(responses))
                logger.warning(str(fault))
                return None

            # The handler runs first so it can validate, redirect or opt out
            call_args = args if arity is None else args[:arity]
            output = func(*call_args, **kwargs)
            if inspect.isawaitable(output):
                output = await output

            if output is False:
                return None

            params: Dict[str, Any] = {
                "title": title,
                "page": page_name,
                "extraStyles": list(extra_styles),
                "extraScripts": list(extra_scripts),
                **extra_params,
            }
            extra = output_params(output)
            if extra is not None:
                params.update(extra)

            responses[0].render(BASE_TEMPLATE, params)
            return None

        return wrapper

    return decorator
