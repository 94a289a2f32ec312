"""Settings, environment and command-line tests."""

import pytest
from pydantic import ValidationError

from service_redirector.__main__ import settings_from_args
from service_redirector.shared.config import RedirectorSettings, parse_bool_env, parse_custom_routes

ENV_VARS = (
    "SERVER_HOST", "HTTP_PORT", "HOSTNAME_SUFFIX", "NOMAD_UI_HOSTNAME", "CONSUL_UI_HOSTNAME",
    "REDIRECT_TO_NOMAD_UI", "CUSTOM_ROUTES", "DIRECTORY_BACKEND", "CONSUL_HTTP_ADDR",
    "CONSUL_HTTP_TOKEN", "CONSUL_HTTP_SSL", "DNS_NAMESERVER", "DNS_PORT", "DNS_DOMAIN",
    "DIRECTORY_TIMEOUT", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestRedirectorSettings:
    """Defaults, validation and environment loading."""

    def test_defaults(self, clean_env):
        settings = RedirectorSettings.from_env()
        assert settings.port == 80
        assert settings.hostname_suffix == ""
        assert settings.custom_routes == {}
        assert settings.directory_backend == "consul"
        assert settings.consul_base_url == "http://127.0.0.1:8500"
        assert settings.directory_timeout == 5.0

    def test_environment(self, clean_env):
        clean_env.setenv("HTTP_PORT", "8686")
        clean_env.setenv("HOSTNAME_SUFFIX", ".local")
        clean_env.setenv("REDIRECT_TO_NOMAD_UI", "true")
        clean_env.setenv("CUSTOM_ROUTES", '{"h": "http://home:1234"}')
        clean_env.setenv("DIRECTORY_BACKEND", "DNS")
        clean_env.setenv("LOG_LEVEL", "trace")

        settings = RedirectorSettings.from_env()

        assert settings.port == 8686
        assert settings.hostname_suffix == "local"
        assert settings.redirect_to_nomad_ui is True
        assert settings.custom_routes == {"h": "http://home:1234"}
        assert settings.directory_backend == "dns"
        assert settings.log_level == "TRACE"

    def test_overrides_beat_environment(self, clean_env):
        clean_env.setenv("HTTP_PORT", "8686")
        settings = RedirectorSettings.from_env(port=9000, hostname_suffix=None)
        assert settings.port == 9000
        assert settings.hostname_suffix == ""

    @pytest.mark.parametrize("field,value", [
        ("port", 0),
        ("port", 70000),
        ("directory_timeout", 0),
        ("directory_backend", "etcd"),
        ("custom_routes", "{broken"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            RedirectorSettings(**{field: value})

    def test_settings_are_frozen(self):
        settings = RedirectorSettings()
        with pytest.raises(ValidationError):
            settings.port = 8080

    def test_consul_address_with_scheme(self):
        settings = RedirectorSettings(consul_http_addr="https://consul.lan:8501/")
        assert settings.consul_base_url == "https://consul.lan:8501"


class TestParsers:

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("1", True), ("YES", True), ("on", True),
        ("false", False), ("0", False), ("", False), (None, False),
    ])
    def test_parse_bool_env(self, value, expected):
        assert parse_bool_env(value) is expected

    def test_parse_custom_routes(self):
        assert parse_custom_routes('{"h/a": "http://a/$arg$"}') == {"h/a": "http://a/$arg$"}
        assert parse_custom_routes("{}") == {}


class TestCommandLine:
    """Flags layered over the environment."""

    def test_flags(self, clean_env):
        settings = settings_from_args([
            "--port", "8686",
            "--hostname-suffix", "local",
            "--redirect-to-nomad-ui",
            "--custom-routes", '{"h": "http://home:1234"}',
            "--directory-backend", "dns",
            "--dns-port", "53",
            "--log-level", "debug",
        ])
        assert settings.port == 8686
        assert settings.hostname_suffix == "local"
        assert settings.redirect_to_nomad_ui is True
        assert settings.custom_routes == {"h": "http://home:1234"}
        assert settings.directory_backend == "dns"
        assert settings.dns_port == 53
        assert settings.log_level == "DEBUG"

    def test_unset_flags_fall_back_to_environment(self, clean_env):
        clean_env.setenv("HOSTNAME_SUFFIX", "lan")
        clean_env.setenv("REDIRECT_TO_NOMAD_UI", "yes")
        settings = settings_from_args([])
        assert settings.hostname_suffix == "lan"
        assert settings.redirect_to_nomad_ui is True

    def test_bad_backend_flag_exits(self, clean_env):
        with pytest.raises(SystemExit):
            settings_from_args(["--directory-backend", "etcd"])
