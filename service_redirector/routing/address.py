"""Parsing of Consul-style service hostnames.

Accepted formats (the datacenter part is ignored):

    ServiceName.service.consul
    _ServiceName._PortName.service.consul
    ServiceName.service.DatacenterName.consul
    _ServiceName._PortName.service.DatacenterName.consul
"""

from dataclasses import dataclass
from ipaddress import ip_address
from typing import Optional

from .errors import ParseFailure

SERVICE_SEPARATOR = '.service.'


def strip_hostname_suffix(hostname: str, suffix: str) -> str:
    """Remove a trailing ``.suffix`` from hostname, if present."""
    if suffix and hostname.endswith(f".{suffix}"):
        return hostname[:-(len(suffix) + 1)]
    return hostname


def _looks_like_ip(value: str) -> bool:
    try:
        ip_address(value)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class ServiceAddress:
    """A service name plus optional port type (empty means any)."""

    service_name: str
    port_type: str = ''

    @classmethod
    def parse(cls, hostname: str, cluster_suffix: str = '') -> 'ServiceAddress':
        """Parse a hostname into a service address.

        Raises:
            ParseFailure: if the hostname is not a service address
        """
        name = strip_hostname_suffix(hostname, cluster_suffix)
        if SERVICE_SEPARATOR not in name:
            # the suffix was part of the service address itself ("x.service.consul" with suffix "consul")
            name = hostname

        left, separator, _datacenter = name.partition(SERVICE_SEPARATOR)
        if not separator:
            raise ParseFailure(hostname, "no .service. segment")

        service_name, port_type = left, ''
        if '.' in left:
            service_name, port_type = left.split('.', 1)
            port_type = port_type.removeprefix('_')
        service_name = service_name.removeprefix('_')

        # don't parse IP addresses
        if '.' in port_type or (port_type and _looks_like_ip(port_type)):
            raise ParseFailure(hostname, "port type looks like an address")

        if not service_name:
            raise ParseFailure(hostname, "empty service name")

        return cls(service_name=service_name, port_type=port_type)

    def describe(self) -> str:
        if self.port_type:
            return f"service {self.service_name} and port type {self.port_type}"
        return f"service {self.service_name}"


def parse_service_address(hostname: str, cluster_suffix: str = '') -> Optional[ServiceAddress]:
    """Parse a hostname, returning None when it is not a service address."""
    try:
        return ServiceAddress.parse(hostname, cluster_suffix)
    except ParseFailure:
        return None
