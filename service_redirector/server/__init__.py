"""HTTP surface: Starlette app, HTML pages and the hypercorn runner."""

from .app import RedirectorApp, create_redirector_app
from .http_server import RedirectHTTPServer

__all__ = ["RedirectorApp", "create_redirector_app", "RedirectHTTPServer"]
