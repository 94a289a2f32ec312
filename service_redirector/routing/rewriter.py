"""Rebuild a request URL against a different scheme and host."""

from urllib.parse import urlsplit, urlunsplit

from .errors import RewriteError


def rewrite(base_url: str, target_host: str, scheme: str, port: int = 0) -> str:
    """Replace scheme and host of ``base_url``, keeping path, query and fragment.

    Args:
        base_url: Original request URL
        target_host: New host; may already carry its own ``:port``
        scheme: New scheme
        port: Port to append to the host, or 0 to use ``target_host`` as is

    Raises:
        RewriteError: if ``base_url`` cannot be parsed
    """
    try:
        parts = urlsplit(base_url)
    except ValueError as e:
        raise RewriteError(f"cannot parse {base_url!r}: {e}") from e

    netloc = f"{target_host}:{port}" if port else target_host
    return urlunsplit((scheme, netloc, parts.path, parts.query, parts.fragment))
