"""Error taxonomy for the redirect decision engine.

Every failure is local to one request. Parse failures and empty directory
results become 404 help pages; the rest are surfaced as 500 pages.
"""


class RedirectorError(Exception):
    """Base class for all redirect decision errors."""


class ParseFailure(RedirectorError):
    """Hostname is not a service address."""

    def __init__(self, hostname: str, reason: str = "not a service address"):
        self.hostname = hostname
        self.reason = reason
        super().__init__(f"{hostname}: {reason}")


class DirectoryError(RedirectorError):
    """The service directory could not answer a query."""


class TemplateError(RedirectorError):
    """A custom route target is not a usable URL."""

    def __init__(self, route_key: str, template: str, reason: str):
        self.route_key = route_key
        self.template = template
        super().__init__(f"custom route {route_key} -> {template}: {reason}")


class RewriteError(RedirectorError):
    """The request URL could not be re-parsed while building a redirect."""
