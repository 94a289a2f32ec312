"""Operator-configured custom routes.

A custom route maps a hostname, or ``hostname/first-path-segment``, to a
target URL template. A single template can act as

* a plain host alias:          ``{"h": "http://home:1234"}``
* a path-rewriting alias:      ``{"h/grafana": "http://grafana:2345/graphs/index"}``
* a query template with $arg$: ``{"h/graph": "http://grafana:2345/graph?id=$arg$&detail=1"}``

where ``$arg$`` is replaced by whatever follows the matched key in the
request path.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field

from ..shared.config import parse_custom_routes
from ..shared.logger import log_info, log_trace, log_warning
from .errors import TemplateError

ARG_TOKEN = '$arg$'


class RouteEntry(BaseModel):
    """One custom route, immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Hostname, or hostname/path composite key")
    target_template: str = Field(..., description="Target URL, may contain $arg$ in path or query")

    @property
    def key_path(self) -> str:
        """Path part of a composite key ("h/a/b" -> "/a/b"), empty for a bare hostname."""
        _host, slash, path = self.key.partition('/')
        return f"/{path}" if slash else ''

    @property
    def has_arg(self) -> bool:
        return ARG_TOKEN in self.target_template


@dataclass(frozen=True)
class RouteMatch:
    """A route entry together with the hostname it was matched for."""

    entry: RouteEntry
    hostname: str


def substitute_arg(template: str, arg: str) -> str:
    """Replace every ``$arg$`` in template with arg."""
    return template.replace(ARG_TOKEN, arg)


def join_queries(*queries: str) -> str:
    """Join non-empty query strings with ``&``."""
    return '&'.join(query for query in queries if query)


def render_route_target(match: RouteMatch, request_url: str) -> str:
    """Build the redirect URL for a matched custom route.

    The scheme and host come from the template. The request path loses the
    matched key's path prefix; what is left either fills ``$arg$``, is appended
    to the template path, or passes through. The template query (if any) comes
    first, followed by the request query.

    Raises:
        TemplateError: if the template is not a URL with scheme and host
    """
    entry = match.entry
    try:
        template = urlsplit(entry.target_template)
    except ValueError as e:
        raise TemplateError(entry.key, entry.target_template, str(e)) from e
    if not template.scheme or not template.netloc:
        raise TemplateError(entry.key, entry.target_template, "missing scheme or host")

    request = urlsplit(request_url)
    path = request.path
    query = request.query

    # if custom route "/a" exists and we are at "/a/b", trim "/a" from the new url
    key_path = entry.key_path
    if key_path and path.startswith(key_path):
        path = path[len(key_path):]

    if entry.has_arg:
        arg = path.lstrip('/')
        path = substitute_arg(template.path, arg)
        query = join_queries(substitute_arg(template.query, arg), request.query)
    else:
        if len(template.path) > 1:
            path = template.path + path
        query = join_queries(template.query, request.query)

    return urlunsplit((template.scheme, template.netloc, path, query, request.fragment))


class CustomRouteTable:
    """Read-only lookup table of custom routes."""

    def __init__(self, routes: Optional[Mapping[str, str]] = None):
        entries = {
            key: RouteEntry(key=key, target_template=template)
            for key, template in (routes or {}).items()
        }
        self._entries: Mapping[str, RouteEntry] = MappingProxyType(entries)

        for entry in self._entries.values():
            parsed = urlsplit(entry.target_template)
            if not parsed.scheme or not parsed.netloc:
                log_warning(
                    f"Custom route {entry.key} has an unusable target {entry.target_template}",
                    component="routes",
                    route_key=entry.key
                )

        if self._entries:
            log_info(f"Found custom routes: {dict(routes)}", component="routes")

    @classmethod
    def from_json(cls, raw: Optional[str]) -> 'CustomRouteTable':
        """Load the table from its JSON object form ("" and "{}" mean empty)."""
        return cls(parse_custom_routes(raw))

    def __len__(self) -> int:
        return len(self._entries)

    def candidate_keys(self, hostname: str, request_path: str) -> Iterator[str]:
        """Keys to try for a request, most specific first."""
        # exact match for "hostname/one/two"
        yield f"{hostname}{request_path}"

        # "hostname/one" when the path is "/one/two..."
        segments = request_path.split('/')
        if len(segments) > 2:
            yield f"{hostname}/{segments[1]}"

        # bare hostname
        yield hostname

    def resolve(self, hostname: str, request_path: str) -> Optional[RouteMatch]:
        """Find the custom route for a hostname and request path."""
        if not self._entries:
            return None

        for key in self.candidate_keys(hostname, request_path):
            entry = self._entries.get(key)
            if entry is not None:
                log_trace(f"Custom route key {key} matched", component="routes", route_key=key)
                return RouteMatch(entry=entry, hostname=hostname)
            log_trace(f"Custom route key {key} not configured", component="routes", route_key=key)
        return None
