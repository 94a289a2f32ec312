"""Service directory backends."""

from .base import DirectoryError, ServiceDirectory
from .consul import ConsulCatalogClient
from .dns import DnsSrvDirectory

__all__ = [
    'ConsulCatalogClient',
    'DirectoryError',
    'DnsSrvDirectory',
    'ServiceDirectory',
    'create_directory',
]


def create_directory(settings) -> ServiceDirectory:
    """Build the directory backend selected in settings."""
    if settings.directory_backend == 'dns':
        return DnsSrvDirectory(
            nameserver=settings.dns_nameserver,
            port=settings.dns_port,
            domain=settings.dns_domain,
        )
    return ConsulCatalogClient(
        settings.consul_base_url,
        token=settings.consul_http_token,
        timeout=settings.directory_timeout,
    )
