"""ASGI application serving redirects.

A single catch-all Starlette route hands every request to the redirect
engine and turns the resulting decision into an HTTP response.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import quote, urlunsplit

from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response
from starlette.routing import Route

from ..directory import ServiceDirectory, create_directory
from ..routing.engine import RedirectEngine, get_hostname
from ..routing.models import DecisionType, RedirectDecision
from ..routing.routes import CustomRouteTable
from ..shared.config import RedirectorSettings
from ..shared.logger import get_component_logger, log_info
from .pages import render_candidate_list, render_error, render_not_found

ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def original_url(request: Request) -> str:
    """Request URL with the path as sent on the wire, percent-encoding intact."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1").split("?", 1)[0]
    else:
        path = quote(request.url.path, safe="/:@!$&'()*+,;=")
    query = request.scope.get("query_string", b"").decode("latin-1")
    return urlunsplit((request.url.scheme, request.url.netloc, path, query, ""))


class RedirectorApp:
    """Redirect application: settings, engine and the Starlette app around them."""

    def __init__(self, settings: RedirectorSettings, directory: Optional[ServiceDirectory] = None,
                 routes: Optional[CustomRouteTable] = None):
        """Initialize the redirect app.

        Args:
            settings: Process-wide settings
            directory: Directory backend (defaults to the one selected in settings)
            routes: Custom route table (defaults to the one in settings)
        """
        self.settings = settings
        self.directory = directory if directory is not None else create_directory(settings)
        self.engine = RedirectEngine(settings, self.directory, routes)
        self.access_logger = get_component_logger("access")

        self.app = Starlette(
            routes=[
                Route("/{path:path}", self.handle_request, methods=ALL_METHODS),
            ],
            lifespan=self.lifespan,
        )
        self.app.add_middleware(BaseHTTPMiddleware, dispatch=self.log_requests)

    @asynccontextmanager
    async def lifespan(self, app: Starlette):
        log_info(
            f"Redirector ready with {len(self.engine.routes)} custom routes",
            component="app",
            **getattr(self.directory, "describe", dict)()
        )
        try:
            yield
        finally:
            await self.directory.close()
            log_info("Directory client closed", component="app")

    async def log_requests(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        self.access_logger.log_response(
            request.method,
            get_hostname(request.headers.get("host", "")),
            request.url.path,
            response.status_code,
            duration_ms
        )
        return response

    async def handle_request(self, request: Request) -> Response:
        decision = await self.engine.decide(request.headers.get("host", ""), original_url(request))
        return self.render(decision)

    def render(self, decision: RedirectDecision) -> Response:
        """Turn a decision into its HTTP response."""
        status = decision.status_code

        if decision.type == DecisionType.LIVENESS:
            if decision.body:
                return PlainTextResponse(decision.body, status_code=status)
            return Response(status_code=status)

        if decision.type == DecisionType.SINGLE_REDIRECT:
            return RedirectResponse(decision.url, status_code=status)

        if decision.type == DecisionType.CANDIDATE_LIST:
            return HTMLResponse(render_candidate_list(decision, self.settings), status_code=status)

        if decision.type == DecisionType.NO_MATCH:
            return HTMLResponse(render_not_found(decision, self.settings), status_code=status)

        return HTMLResponse(render_error(decision), status_code=status)


def create_redirector_app(settings: RedirectorSettings, directory: Optional[ServiceDirectory] = None,
                          routes: Optional[CustomRouteTable] = None) -> Starlette:
    """Create the Starlette app for the given settings."""
    return RedirectorApp(settings, directory, routes).app
