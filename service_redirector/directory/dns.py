"""DNS SRV backend.

Looks services up through Consul's DNS interface (or any server answering the
same SRV names), then turns each SRV target into a node hostname with an
address lookup followed by a reverse (PTR) lookup:

    _grafana._http.service.consul  SRV  1 1 3000 0a000005.addr.dc1.consul.
    0a000005.addr.dc1.consul       A    10.0.0.5
    5.0.0.10.in-addr.arpa          PTR  node-5.lan.          -> hostname "node-5"
"""

from typing import Awaitable, Callable, Dict, List, Optional

import dns.asyncresolver
import dns.exception
import dns.resolver

from ..routing.errors import DirectoryError
from ..routing.models import CandidateBackend
from ..shared.dns_resolver import resolve_ptr
from ..shared.logger import log_debug, log_trace

ADDRESS_TYPES = ('A', 'AAAA')

PtrLookup = Callable[[str], Awaitable[Optional[str]]]


def srv_query_name(service_name: str, port_type: str, domain: str) -> str:
    """SRV name for a service, RFC 2782 style when a port type is given."""
    if port_type:
        return f"_{service_name}._{port_type}.service.{domain}"
    return f"{service_name}.service.{domain}"


class DnsSrvDirectory:
    """Service directory backed by SRV records plus reverse DNS."""

    def __init__(self, nameserver: str = '127.0.0.1', port: int = 8600, domain: str = 'consul',
                 resolver: Optional[dns.asyncresolver.Resolver] = None,
                 ptr_lookup: PtrLookup = resolve_ptr):
        """Initialize the DNS backend.

        Args:
            nameserver: Address of the server answering SRV queries
            port: Port of that server (Consul DNS listens on 8600)
            domain: Domain the services live under
            resolver: Optional preconfigured resolver (tests pass a fake)
            ptr_lookup: Coroutine mapping an address to its PTR name
        """
        if resolver is None:
            resolver = dns.asyncresolver.Resolver(configure=False)
            resolver.nameservers = [nameserver]
            resolver.port = port
        self.resolver = resolver
        self.ptr_lookup = ptr_lookup
        self.nameserver = nameserver
        self.port = port
        self.domain = domain.strip('.')
        log_debug(f"DNS SRV directory initialized for {nameserver}:{port}", component="dns")

    async def query(self, service_name: str, port_type: str = '',
                    timeout: float = 5.0) -> List[CandidateBackend]:
        qname = srv_query_name(service_name, port_type, self.domain)
        tags = (port_type,) if port_type else ()

        try:
            answer = await self.resolver.resolve(qname, 'SRV', lifetime=timeout)
        except dns.resolver.NoAnswer:
            return []
        except dns.resolver.NXDOMAIN as e:
            raise DirectoryError(f"no such service name {qname}") from e
        except dns.exception.Timeout as e:
            raise DirectoryError(f"SRV lookup for {qname} timed out") from e
        except dns.exception.DNSException as e:
            raise DirectoryError(f"SRV lookup for {qname} failed: {e}") from e

        candidates = []
        for record in answer:
            target = record.target.to_text(omit_final_dot=True)
            if not (1 <= record.port <= 65535):
                raise DirectoryError(f"SRV record for {qname} on {target} has invalid port {record.port}")

            hostname = await self._node_hostname(target, timeout)
            log_trace(f"{target} port {record.port} -> {hostname}", component="dns", service=service_name)
            candidates.append(CandidateBackend(hostname=hostname, tags=tags, port=record.port))
        return candidates

    async def _node_hostname(self, target: str, timeout: float) -> str:
        """Short hostname of the node behind an SRV target, or the target itself."""
        for rdtype in ADDRESS_TYPES:
            try:
                answer = await self.resolver.resolve(target, rdtype, lifetime=timeout)
            except dns.resolver.NoAnswer:
                continue
            except dns.exception.Timeout as e:
                raise DirectoryError(f"address lookup for {target} timed out") from e
            except dns.exception.DNSException as e:
                raise DirectoryError(f"address lookup for {target} failed: {e}") from e

            for record in answer:
                name = await self.ptr_lookup(record.address)
                if name:
                    return name.rstrip('.').split('.', 1)[0]
            return target
        return target

    async def close(self) -> None:
        """Nothing to release; queries are stateless."""

    def describe(self) -> Dict[str, str]:
        return {"backend": "dns", "address": f"{self.nameserver}:{self.port}"}
