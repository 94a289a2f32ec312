"""Hypercorn runner for the redirect app."""

import asyncio
from typing import Optional

from hypercorn.asyncio import serve
from hypercorn.config import Config as HypercornConfig

from ..shared.logger import log_error, log_info, log_warning


class RedirectHTTPServer:
    """Plain HTTP listener serving one ASGI app."""

    def __init__(self, app, host: str = "0.0.0.0", port: int = 80, log_level: str = "INFO"):
        """Initialize the HTTP server.

        Args:
            app: ASGI application to serve
            host: Host to bind to
            port: Port to bind to
            log_level: Level for hypercorn's own loggers
        """
        self.app = app
        self.host = host
        self.port = port
        self.log_level = log_level
        self.server_task: Optional[asyncio.Task] = None
        self.shutdown_event = asyncio.Event()
        self.is_running = False

        log_info(f"RedirectHTTPServer initialized for {host}:{port}", component="http_server")

    def build_config(self) -> HypercornConfig:
        config = HypercornConfig()
        config.bind = [f"{self.host}:{self.port}"]
        level = self.log_level.upper()
        config.loglevel = "DEBUG" if level == "TRACE" else level
        # access lines come from the app's own middleware
        config.accesslog = None
        return config

    async def start(self) -> None:
        """Start serving in a background task."""
        if self.is_running:
            log_warning("RedirectHTTPServer already running", component="http_server")
            return

        try:
            config = self.build_config()
            log_info(f"Starting RedirectHTTPServer on {self.host}:{self.port}", component="http_server")
            self.shutdown_event.clear()
            self.server_task = asyncio.create_task(
                serve(self.app, config, shutdown_trigger=self.shutdown_event.wait)
            )
            self.is_running = True
        except Exception as e:
            log_error(f"Failed to start RedirectHTTPServer: {e}", component="http_server", error=e)
            self.is_running = False
            raise

    async def wait_for_shutdown(self) -> None:
        """Wait for the server to shut down."""
        if self.server_task:
            await self.server_task
