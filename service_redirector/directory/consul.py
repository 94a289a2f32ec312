"""Consul catalog backend.

Queries ``/v1/catalog/service/<name>`` on the Consul HTTP API. The port type
of a service address is passed as the catalog ``tag`` filter, so
``_grafana._http.service.consul`` lists the grafana instances tagged ``http``.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..routing.errors import DirectoryError
from ..routing.models import CandidateBackend
from ..shared.logger import log_debug, log_trace

CATALOG_SERVICE_PATH = "/v1/catalog/service/{service}"


class ConsulCatalogClient:
    """Service directory backed by the Consul catalog HTTP API."""

    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the Consul client.

        Args:
            base_url: Consul HTTP API address, e.g. http://127.0.0.1:8500
            token: Optional ACL token sent as X-Consul-Token
            timeout: Default request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        headers = {"X-Consul-Token": token} if token else {}
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            follow_redirects=False,
            transport=transport,
        )
        log_debug(f"Consul catalog client initialized for {base_url}", component="consul")

    async def query(self, service_name: str, port_type: str = '',
                    timeout: float = 5.0) -> List[CandidateBackend]:
        params = {"tag": port_type} if port_type else {}
        path = CATALOG_SERVICE_PATH.format(service=quote(service_name, safe=""))

        try:
            response = await self.client.get(path, params=params, timeout=timeout)
        except httpx.TimeoutException as e:
            raise DirectoryError(f"Consul query for {service_name} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise DirectoryError(f"Consul query for {service_name} failed: {e}") from e

        if response.status_code != 200:
            raise DirectoryError(
                f"Consul returned {response.status_code} for service {service_name}: {response.text.strip()}"
            )

        try:
            entries = response.json()
        except ValueError as e:
            raise DirectoryError(f"Consul returned a non-JSON catalog for {service_name}") from e

        if entries is None:
            return []
        if not isinstance(entries, list):
            raise DirectoryError(f"Consul returned an unexpected catalog for {service_name}")

        return [self._to_candidate(service_name, entry) for entry in entries]

    @staticmethod
    def _to_candidate(service_name: str, entry: Any) -> CandidateBackend:
        """Map one catalog entry to a candidate, rejecting malformed entries."""
        if not isinstance(entry, dict):
            raise DirectoryError(f"malformed catalog entry for {service_name}: {entry!r}")

        node = entry.get("Node")
        port = entry.get("ServicePort")
        tags = entry.get("ServiceTags") or []

        log_trace(f"{entry.get('Address')} port {port}: {entry}", component="consul", service=service_name)

        if not node or not isinstance(node, str):
            raise DirectoryError(f"catalog entry for {service_name} has no node name")
        if not isinstance(port, int) or isinstance(port, bool) or not (1 <= port <= 65535):
            raise DirectoryError(f"catalog entry for {service_name} on {node} has invalid port {port!r}")

        return CandidateBackend(hostname=node, tags=tuple(str(tag) for tag in tags), port=port)

    async def close(self) -> None:
        await self.client.aclose()

    def describe(self) -> Dict[str, str]:
        return {"backend": "consul", "address": self.base_url}
