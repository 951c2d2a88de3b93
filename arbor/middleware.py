"""
Host middlewares - Mounted with ``transport.use``.

- HealthCheckMiddleware: health endpoint following the draft "Health Check
  Response Format for HTTP APIs"
- GlobalTemplateValuesMiddleware: site-wide values for every rendered page
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional


class HealthCheckStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


class HealthCheckMiddleware:
    """
    Answers the health-check endpoint; passes every other request on.

    The status is process-wide: ``HealthCheckMiddleware.set_status`` changes
    what every instance reports.
    """

    HEALTH_CHECK_ENDPOINT = "/.well-known/health-check"
    CONTENT_TYPE = "application/health+json"

    status: HealthCheckStatus = HealthCheckStatus.OK

    def __init__(self, initial_status: HealthCheckStatus = HealthCheckStatus.OK):
        HealthCheckMiddleware.status = initial_status

    @classmethod
    def set_status(cls, status: HealthCheckStatus) -> None:
        cls.status = status

    async def __call__(self, request: Any, response: Any, next: Callable[..., Any]) -> Any:
        if request.path != self.HEALTH_CHECK_ENDPOINT:
            return await next()

        status = HealthCheckMiddleware.status
        code = 200 if status is HealthCheckStatus.OK else 500
        response.status(code).set_header("Content-Type", self.CONTENT_TYPE)
        response.json({"status": status.value})


def health_check_middleware(
    initial_status: HealthCheckStatus = HealthCheckStatus.OK,
) -> HealthCheckMiddleware:
    """Create the health-check middleware."""
    return HealthCheckMiddleware(initial_status)


class GlobalTemplateValuesMiddleware:
    """
    Copies site-wide values into ``response.locals``.

    Known keys: description, keywords, author, titlePrefix, titleSuffix.
    Any other keyword is copied as-is.
    """

    KNOWN_KEYS = ("description", "keywords", "author", "titlePrefix", "titleSuffix")

    def __init__(self, **values: Optional[str]):
        self.values: Dict[str, str] = {
            key: value for key, value in values.items() if value is not None
        }

    async def __call__(self, request: Any, response: Any, next: Callable[..., Any]) -> Any:
        response.locals.update(self.values)
        return await next()


def global_template_values(**values: Optional[str]) -> GlobalTemplateValuesMiddleware:
    """
    Create the global template values middleware.

    Example:
        transport.use(global_template_values(author="Jane", titleSuffix=" | Site"))
    """
    return GlobalTemplateValuesMiddleware(**values)
