"""Service hostname parsing tests."""

import pytest

from service_redirector.routing.address import ServiceAddress, parse_service_address, strip_hostname_suffix
from service_redirector.routing.errors import ParseFailure


@pytest.mark.routing
class TestServiceAddressParsing:
    """Accepted hostname formats."""

    @pytest.mark.parametrize("hostname,service,port_type", [
        ("foobar.service.consul", "foobar", ""),
        ("_foobar._http.service.consul", "foobar", "http"),
        ("_foobar._rpc.service.consul", "foobar", "rpc"),
        ("foobar.service.site.consul", "foobar", ""),
        ("_foobar._http.service.site.consul", "foobar", "http"),
        ("_foobar._rpc.service.site.consul", "foobar", "rpc"),
    ])
    def test_parse_known_formats(self, hostname, service, port_type):
        """Test that every documented format yields service and port type."""
        address = ServiceAddress.parse(hostname)
        assert address == ServiceAddress(service, port_type)

    def test_underscores_are_optional(self):
        """Test that a port type without leading underscores still parses."""
        assert ServiceAddress.parse("foobar.http.service.consul") == ServiceAddress("foobar", "http")

    def test_cluster_suffix_is_stripped(self):
        """Test that the cluster suffix does not leak into the datacenter part."""
        address = ServiceAddress.parse("_grafana._http.service.consul.lan", "lan")
        assert address == ServiceAddress("grafana", "http")

    def test_suffix_that_is_part_of_the_address(self):
        """Test that a suffix overlapping the service segment is not stripped."""
        assert ServiceAddress.parse("grafana.service.consul", "service.consul") == ServiceAddress("grafana")

    def test_describe(self):
        assert ServiceAddress("grafana", "http").describe() == "service grafana and port type http"
        assert ServiceAddress("grafana").describe() == "service grafana"


@pytest.mark.routing
class TestServiceAddressRejection:
    """Hostnames that are not service addresses."""

    @pytest.mark.parametrize("hostname", [
        "blah.local",
        "localhost",
        "",
        "service.consul",
        "10.0.0.1",
    ])
    def test_no_service_segment(self, hostname):
        """Test that hostnames without a .service. segment are rejected."""
        with pytest.raises(ParseFailure):
            ServiceAddress.parse(hostname)

    def test_ip_address_is_rejected(self):
        """Test that an address in front of .service. is not taken as a port type."""
        with pytest.raises(ParseFailure):
            ServiceAddress.parse("10.0.0.1.service.consul")

    def test_empty_service_name(self):
        with pytest.raises(ParseFailure) as exc_info:
            ServiceAddress.parse("_.service.consul")
        assert exc_info.value.hostname == "_.service.consul"

    def test_optional_helper_returns_none(self):
        """Test that the non-raising helper maps failures to None."""
        assert parse_service_address("blah.local") is None
        assert parse_service_address("web.service.consul") == ServiceAddress("web")


class TestStripHostnameSuffix:

    def test_strips_trailing_suffix(self):
        assert strip_hostname_suffix("h.local", "local") == "h"

    def test_leaves_other_hostnames_alone(self):
        assert strip_hostname_suffix("hlocal", "local") == "hlocal"
        assert strip_hostname_suffix("h.local", "") == "h.local"
