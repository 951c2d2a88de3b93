"""
App bootstrap.

``Initializer`` wires the transport, middlewares, renderer, discovery and
registration together; ``App`` runs it and serves the result with uvicorn.
Customize setup by passing a configured ``Initializer`` or subclassing it.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .config import ArborConfig
from .controller.engine import RegistrationEngine, RegistrationReport
from .discovery import ControllerManifest, ControllerScanner, DiscoveryResult
from .http import AsgiTransport
from .templates import Renderer

logger = logging.getLogger("arbor.app")

Source = Union[ControllerManifest, ControllerScanner]


class Initializer:
    """
    Performs the startup sequence.

    Args:
        config: Application configuration (loaded from the environment if None)
        *middlewares: Handlers mounted before any controller route
        manifest: Explicit controllers; replaces directory scanning
        engine: Registration engine (e.g. one shared with an OAuth subsystem)

    Example:
        initializer = Initializer(ArborConfig(controllers_path="app/routes"),
                                  health_check_middleware())
        await initializer.init()
        print(initializer.report.lines())
    """

    def __init__(
        self,
        config: Optional[ArborConfig] = None,
        *middlewares: Callable[..., Any],
        manifest: Optional[ControllerManifest] = None,
        engine: Optional[RegistrationEngine] = None,
    ):
        self.config = config or ArborConfig.load()
        self.middlewares = middlewares
        self.manifest = manifest
        self.engine = engine or RegistrationEngine()
        self._transport: Optional[AsgiTransport] = None
        self._report: Optional[RegistrationReport] = None

    @property
    def transport(self) -> AsgiTransport:
        if self._transport is None:
            raise RuntimeError("Transport is not set. Please call init() first.")
        return self._transport

    @property
    def report(self) -> RegistrationReport:
        if self._report is None:
            raise RuntimeError("Routes are not registered. Please call init() first.")
        return self._report

    def create_transport(self) -> AsgiTransport:
        return AsgiTransport()

    def setup_middleware(self, transport: AsgiTransport) -> None:
        for middleware in self.middlewares:
            transport.use(middleware)

    def setup_renderer(self, transport: AsgiTransport) -> None:
        views = Path(self.config.views_path)
        if not views.is_dir():
            logger.warning("Views directory %s not found; pages cannot be rendered", views)
            return
        Renderer(views).setup(transport)

    def controller_source(self) -> Source:
        if self.manifest is not None:
            return self.manifest
        return ControllerScanner(self.config.controllers_path)

    async def discover(self) -> DiscoveryResult:
        return await self.controller_source().scan()

    async def init(self) -> AsgiTransport:
        """Build the transport and register every discovered controller."""
        transport = self.create_transport()
        self._transport = transport

        self.setup_middleware(transport)
        self.setup_renderer(transport)

        result = await self.discover()
        self._report = self.engine.register(
            transport, result.controllers, result.error_controllers,
        )
        return transport


class App:
    """
    Top level container for running the web app.

    Example:
        if __name__ == "__main__":
            App().run()
    """

    def __init__(self, initializer: Optional[Initializer] = None):
        self._initializer = initializer

    @property
    def initializer(self) -> Initializer:
        if self._initializer is None:
            raise RuntimeError("Initializer is not set. Please call run() first.")
        return self._initializer

    @property
    def transport(self) -> AsgiTransport:
        return self.initializer.transport

    async def init(self) -> AsgiTransport:
        if self._initializer is None:
            self._initializer = Initializer()
        return await self.initializer.init()

    def run(self) -> None:
        """Initialize and serve until interrupted."""
        import uvicorn

        if self._initializer is None:
            self._initializer = Initializer()
        config = self.initializer.config

        root = logging.getLogger()
        if not root.handlers:
            logging.basicConfig(
                level=config.log_level,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )

        transport = asyncio.run(self.initializer.init())

        logger.info("Server is running on port %s", config.port)
        uvicorn.run(transport, host=config.host, port=config.port, log_level=config.log_level.lower())
