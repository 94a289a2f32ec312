"""Redirect decision engine.

Turns (Host header, request URL) into a RedirectDecision:

1. health/metrics short-circuit
2. custom routes, on the raw hostname and then without the cluster suffix
3. optional "send cluster hostnames to the Nomad UI" mode
4. service address parsing and a directory query
5. one candidate -> redirect, several -> listing, none -> not found
"""

import asyncio
from typing import TYPE_CHECKING, List, Optional, Tuple
from urllib.parse import urlencode, urlsplit, urlunsplit

from ..shared.config import RedirectorSettings
from ..shared.logger import log_debug, log_error, log_info, log_warning
from .address import ServiceAddress, strip_hostname_suffix
from .errors import DirectoryError, ParseFailure, RewriteError, TemplateError
from .models import CandidateBackend, CandidateLink, NoMatchReason, RedirectDecision
from .rewriter import rewrite
from .routes import CustomRouteTable, render_route_target

if TYPE_CHECKING:
    from ..directory.base import ServiceDirectory

NOMAD_UI_PORT = 4646
NOMAD_UI_CLIENTS_PATH = '/ui/clients'
LIVENESS_PREFIXES = (('health', 'ok'), ('metrics', ''))


def get_hostname(host_header: str) -> str:
    """Strip the port from a Host header value."""
    host = host_header.strip()
    if host.startswith('['):
        # bracketed IPv6 literal, "[::1]:8080"
        end = host.find(']')
        if end != -1:
            return host[:end + 1]
    return host.split(':', 1)[0]


def add_hostname_suffix(hostname: str, suffix: str) -> str:
    """Append the cluster suffix so bare node names resolve at the edge."""
    if not suffix:
        return hostname
    return f"{hostname}.{suffix.lstrip('.')}"


class RedirectEngine:
    """Decides where a request for a service hostname should go."""

    def __init__(self, settings: RedirectorSettings, directory: "ServiceDirectory",
                 routes: Optional[CustomRouteTable] = None):
        """Initialize the engine.

        Args:
            settings: Process-wide settings
            directory: Backend answering service instance queries
            routes: Custom route table (defaults to the one in settings)
        """
        self.settings = settings
        self.directory = directory
        self.routes = routes if routes is not None else CustomRouteTable(settings.custom_routes)

    async def decide(self, host_header: str, request_url: str) -> RedirectDecision:
        """Evaluate one request."""
        try:
            path = urlsplit(request_url).path
        except ValueError as e:
            log_error(f"Cannot parse request URL {request_url}", component="engine", error=e)
            return RedirectDecision.upstream_error(f"cannot parse request URL: {e}")

        # health checks at /healthy, /healthz, ... and metrics stub
        for prefix, body in LIVENESS_PREFIXES:
            if path.lstrip('/').startswith(prefix):
                log_debug(f"Responded to {prefix} check", component="engine", hostname=host_header, path=path)
                return RedirectDecision.liveness(body)

        hostname = get_hostname(host_header)
        log_info(f"Request: {hostname}{path}", component="engine")

        decision = self._try_custom_routes(hostname, path, request_url)
        if decision is not None:
            return decision

        if self.settings.redirect_to_nomad_ui and self._is_cluster_hostname(hostname):
            return self._redirect_to_nomad_ui(hostname, request_url)

        try:
            address = ServiceAddress.parse(hostname, self.settings.hostname_suffix)
        except ParseFailure as e:
            log_info(f"Unable to parse hostname as a Consul service address: {hostname}",
                     component="engine", error=e.reason)
            return RedirectDecision.no_match(NoMatchReason.NOT_A_SERVICE_ADDRESS, hostname)

        try:
            candidates = await self._query_directory(address)
        except DirectoryError as e:
            log_error(f"Error querying directory for {hostname}", component="engine", error=e)
            return RedirectDecision.upstream_error(str(e), hostname, address)

        log_info(f"Found {len(candidates)} options for hostname {hostname}", component="engine",
                 service=address.service_name, port_type=address.port_type or None)

        if not candidates:
            return RedirectDecision.no_match(NoMatchReason.NO_INSTANCES, hostname, address)

        try:
            links = [self._build_link(candidate, request_url) for candidate in candidates]
        except RewriteError as e:
            log_error(f"Error building URL for {hostname}", component="engine", error=e)
            return RedirectDecision.upstream_error(str(e), hostname, address)

        if len(links) == 1:
            log_info(f"Redirecting to {links[0].url}", component="engine", hostname=hostname)
            return RedirectDecision.single_redirect(links[0].url, hostname, address)

        return RedirectDecision.candidate_list(links, hostname, address)

    def _try_custom_routes(self, hostname: str, path: str, request_url: str) -> Optional[RedirectDecision]:
        """Custom routes for the hostname, then for the hostname without the cluster suffix."""
        hostnames: List[str] = [hostname]
        cut_hostname = strip_hostname_suffix(hostname, self.settings.hostname_suffix)
        if cut_hostname != hostname:
            hostnames.append(cut_hostname)

        for candidate_hostname in hostnames:
            match = self.routes.resolve(candidate_hostname, path)
            if match is None:
                continue

            try:
                url = render_route_target(match, request_url)
            except TemplateError as e:
                log_error(f"Error processing custom route with {match.entry.key}", component="engine",
                          error=e, route_key=match.entry.key)
                return RedirectDecision.upstream_error(str(e), hostname)

            log_info(f"Custom route {match.entry.key} redirects to {url}", component="engine",
                     hostname=match.hostname, route_key=match.entry.key)
            return RedirectDecision.single_redirect(url, hostname)
        return None

    def _is_cluster_hostname(self, hostname: str) -> bool:
        suffix = self.settings.hostname_suffix
        if suffix and (hostname == suffix or hostname.endswith(f".{suffix}")):
            return True
        alias = self.settings.nomad_ui_hostname
        return bool(alias) and hostname == alias

    def _redirect_to_nomad_ui(self, hostname: str, request_url: str) -> RedirectDecision:
        try:
            url = rewrite(request_url, hostname, 'http', NOMAD_UI_PORT)
        except RewriteError as e:
            log_error(f"Error building URL with {hostname}", component="engine", error=e)
            return RedirectDecision.upstream_error(str(e), hostname)

        parts = urlsplit(url)
        if parts.path in ('', '/'):
            url = urlunsplit((parts.scheme, parts.netloc, NOMAD_UI_CLIENTS_PATH,
                              urlencode({'search': hostname}), parts.fragment))

        log_info(f"Redirecting cluster hostname to the Nomad UI: {url}", component="engine", hostname=hostname)
        return RedirectDecision.single_redirect(url, hostname)

    async def _query_directory(self, address: ServiceAddress) -> Tuple[CandidateBackend, ...]:
        """Query the directory under the configured deadline, sorted by (hostname, port)."""
        timeout = self.settings.directory_timeout
        try:
            candidates = await asyncio.wait_for(
                self.directory.query(address.service_name, address.port_type, timeout=timeout),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            log_warning(f"Directory query for {address.describe()} exceeded {timeout}s", component="engine")
            raise DirectoryError(f"directory query for {address.describe()} timed out after {timeout}s") from e

        return tuple(sorted(candidates, key=lambda c: c.sort_key))

    def _build_link(self, candidate: CandidateBackend, request_url: str) -> CandidateLink:
        display_hostname = add_hostname_suffix(candidate.hostname, self.settings.hostname_suffix)
        url = rewrite(request_url, display_hostname, candidate.guess_scheme(), candidate.port)
        return CandidateLink(candidate=candidate, display_hostname=display_hostname, url=url)
