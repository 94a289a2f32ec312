"""Main entry point for the service redirector."""

import asyncio
import signal
import sys
from typing import Optional

from .server import RedirectHTTPServer, create_redirector_app
from .shared.config import RedirectorSettings, get_config
from .shared.logger import log_error, log_info
from .shared.python_logger_config import setup_python_logging


async def run_server(settings: RedirectorSettings) -> None:
    """Serve redirects until SIGINT or SIGTERM."""
    log_info("=" * 60, component="main")
    log_info("SERVICE REDIRECTOR STARTUP", component="main")
    log_info("=" * 60, component="main")
    log_info(
        f"Listening on {settings.host}:{settings.port}",
        component="main",
        backend=settings.directory_backend,
        hostname_suffix=settings.hostname_suffix or None,
        redirect_to_nomad_ui=settings.redirect_to_nomad_ui
    )

    app = create_redirector_app(settings)
    server = RedirectHTTPServer(app, settings.host, settings.port, settings.log_level)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, server.shutdown_event.set)
        except NotImplementedError:
            # no signal handlers on this platform; KeyboardInterrupt still works
            break

    await server.start()
    await server.wait_for_shutdown()
    log_info("Service redirector stopped", component="main")


def main(settings: Optional[RedirectorSettings] = None) -> None:
    """Run the server with the given settings, or the environment's."""
    try:
        if settings is None:
            settings = get_config()
        setup_python_logging(settings.log_level)
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        log_info("Shutting down service redirector (interrupted)", component="main")
        sys.exit(0)
    except Exception as e:
        log_error(f"Failed to start service redirector: {e}", component="main", error=e)
        print(f"ERROR: Failed to start service redirector: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
