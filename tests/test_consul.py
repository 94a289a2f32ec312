"""Consul catalog backend tests against a mocked HTTP transport."""

import httpx
import pytest

from service_redirector.directory import ConsulCatalogClient, DirectoryError, create_directory
from service_redirector.routing.models import CandidateBackend

CATALOG = [
    {"Node": "node-a", "Address": "10.0.0.1", "ServicePort": 3000, "ServiceTags": ["http", "grafana"]},
    {"Node": "node-b", "Address": "10.0.0.2", "ServicePort": 3001, "ServiceTags": None},
]


def client_for(handler, token=None) -> ConsulCatalogClient:
    return ConsulCatalogClient("http://consul:8500", token=token, transport=httpx.MockTransport(handler))


@pytest.mark.directory
@pytest.mark.asyncio
class TestConsulCatalogClient:
    """Catalog queries and response mapping."""

    async def test_query_maps_entries(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=CATALOG)

        client = client_for(handler)
        candidates = await client.query("grafana")
        await client.close()

        assert candidates == [
            CandidateBackend("node-a", ("http", "grafana"), 3000),
            CandidateBackend("node-b", (), 3001),
        ]
        assert requests[0].url.path == "/v1/catalog/service/grafana"
        assert "tag" not in requests[0].url.params

    async def test_port_type_is_sent_as_tag(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["tag"] = request.url.params.get("tag")
            seen["token"] = request.headers.get("x-consul-token")
            return httpx.Response(200, json=[])

        client = client_for(handler, token="secret")
        assert await client.query("grafana", "http") == []
        assert seen == {"tag": "http", "token": "secret"}

    async def test_service_name_is_quoted(self):
        """Test that a slash in the service name stays inside one path segment."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["raw_path"] = request.url.raw_path
            return httpx.Response(200, json=[])

        client = client_for(handler)
        assert await client.query("a/b") == []
        assert seen["raw_path"] == b"/v1/catalog/service/a%2Fb"

    async def test_null_catalog_is_empty(self):
        client = client_for(lambda request: httpx.Response(200, content=b"null"))
        assert await client.query("grafana") == []

    @pytest.mark.parametrize("response", [
        httpx.Response(500, text="rpc error"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"Node": "node-a"}),
        httpx.Response(200, json=[{"Node": "node-a", "ServicePort": 0}]),
        httpx.Response(200, json=[{"Node": "node-a", "ServicePort": "80"}]),
        httpx.Response(200, json=[{"ServicePort": 80}]),
        httpx.Response(200, json=["node-a"]),
    ])
    async def test_bad_responses_raise(self, response):
        client = client_for(lambda request: response)
        with pytest.raises(DirectoryError):
            await client.query("grafana")

    async def test_transport_failure_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = client_for(handler)
        with pytest.raises(DirectoryError):
            await client.query("grafana")

    async def test_timeout_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = client_for(handler)
        with pytest.raises(DirectoryError, match="timed out"):
            await client.query("grafana")


@pytest.mark.directory
class TestCreateDirectory:

    def test_consul_is_default(self, make_settings):
        directory = create_directory(make_settings(consul_http_addr="consul:8500", consul_http_ssl=True))
        assert isinstance(directory, ConsulCatalogClient)
        assert directory.describe() == {"backend": "consul", "address": "https://consul:8500"}
