"""Centralized configuration for the service redirector.

Settings are read once at startup (environment first, command-line flags on
top) into a frozen ``RedirectorSettings`` instance which is then handed to the
engine and the ASGI app. Nothing mutates it afterwards.
"""

import json
import os
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DIRECTORY_BACKENDS = ('consul', 'dns')


def parse_bool_env(value: Optional[str], default: bool = False) -> bool:
    """Parse boolean environment variable."""
    if value is None:
        return default
    return value.lower() in ('true', 'yes', '1', 'on')


def parse_custom_routes(raw: Optional[str]) -> Dict[str, str]:
    """Parse the JSON key-value map of custom routes.

    An empty string or ``{}`` means no custom routes.

    Raises:
        ValueError: if the value is not a JSON object of strings
    """
    if raw is None or raw.strip() in ('', '{}'):
        return {}

    try:
        routes = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"custom routes must be valid JSON: {e}") from e

    if not isinstance(routes, dict):
        raise ValueError("custom routes must be a JSON object")
    for key, value in routes.items():
        if not isinstance(value, str):
            raise ValueError(f"custom route {key!r} must map to a URL string")
    return routes


class RedirectorSettings(BaseModel):
    """Immutable process-wide settings."""

    model_config = ConfigDict(frozen=True)

    # Server
    host: str = Field('0.0.0.0', description="Address to bind the HTTP listener to")
    port: int = Field(80, description="HTTP listening port")

    # Hostname handling
    hostname_suffix: str = Field('', description="Hostname suffix for nodes in the cluster")
    nomad_ui_hostname: str = Field('', description="Hostname to link to for viewing the Nomad UI")
    consul_ui_hostname: str = Field('', description="Hostname to link to for viewing the Consul UI")
    redirect_to_nomad_ui: bool = Field(False, description="Redirect suffix/alias hostnames to the Nomad UI")
    custom_routes: Dict[str, str] = Field(default_factory=dict, description="Custom routes keyed by hostname[/path]")

    # Service directory
    directory_backend: str = Field('consul', description="Directory backend: consul or dns")
    consul_http_addr: str = Field('127.0.0.1:8500', description="Consul HTTP API address")
    consul_http_token: Optional[str] = Field(None, description="Consul ACL token")
    consul_http_ssl: bool = Field(False, description="Talk to Consul over https")
    dns_nameserver: str = Field('127.0.0.1', description="Nameserver answering service SRV queries")
    dns_port: int = Field(8600, description="Port of the SRV nameserver")
    dns_domain: str = Field('consul', description="Domain the services live under")
    directory_timeout: float = Field(5.0, description="Deadline in seconds for a single directory query")

    # Logging
    log_level: str = Field('INFO', description="Log level (TRACE, DEBUG, INFO, ...)")

    @field_validator('port', 'dns_port')
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (1 <= v <= 65535):
            raise ValueError(f"port must be between 1 and 65535, got {v}")
        return v

    @field_validator('directory_timeout')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("directory timeout must be positive")
        return v

    @field_validator('directory_backend')
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in DIRECTORY_BACKENDS:
            raise ValueError(f"directory backend must be one of {', '.join(DIRECTORY_BACKENDS)}")
        return v

    @field_validator('custom_routes', mode='before')
    @classmethod
    def validate_custom_routes(cls, v: Any) -> Any:
        """Accept the raw JSON string as given on the command line."""
        if v is None or isinstance(v, str):
            return parse_custom_routes(v)
        return v

    @field_validator('hostname_suffix')
    @classmethod
    def strip_suffix_dot(cls, v: str) -> str:
        return v.strip().strip('.')

    @field_validator('log_level')
    @classmethod
    def uppercase_level(cls, v: str) -> str:
        return v.upper()

    @property
    def consul_base_url(self) -> str:
        """Consul HTTP API base URL, with scheme."""
        addr = self.consul_http_addr
        if addr.startswith('http://') or addr.startswith('https://'):
            return addr.rstrip('/')
        scheme = 'https' if self.consul_http_ssl else 'http'
        return f"{scheme}://{addr}".rstrip('/')

    @classmethod
    def from_env(cls, **overrides: Any) -> 'RedirectorSettings':
        """Build settings from environment variables, then apply overrides.

        Overrides whose value is None are ignored so that unset command-line
        flags fall back to the environment.
        """
        values: Dict[str, Any] = {
            'host': os.getenv('SERVER_HOST', '0.0.0.0'),
            'port': int(os.getenv('HTTP_PORT', '80')),
            'hostname_suffix': os.getenv('HOSTNAME_SUFFIX', ''),
            'nomad_ui_hostname': os.getenv('NOMAD_UI_HOSTNAME', ''),
            'consul_ui_hostname': os.getenv('CONSUL_UI_HOSTNAME', ''),
            'redirect_to_nomad_ui': parse_bool_env(os.getenv('REDIRECT_TO_NOMAD_UI')),
            'custom_routes': os.getenv('CUSTOM_ROUTES', '{}'),
            'directory_backend': os.getenv('DIRECTORY_BACKEND', 'consul'),
            'consul_http_addr': os.getenv('CONSUL_HTTP_ADDR', '127.0.0.1:8500'),
            'consul_http_token': os.getenv('CONSUL_HTTP_TOKEN') or None,
            'consul_http_ssl': parse_bool_env(os.getenv('CONSUL_HTTP_SSL')),
            'dns_nameserver': os.getenv('DNS_NAMESERVER', '127.0.0.1'),
            'dns_port': int(os.getenv('DNS_PORT', '8600')),
            'dns_domain': os.getenv('DNS_DOMAIN', 'consul'),
            'directory_timeout': float(os.getenv('DIRECTORY_TIMEOUT', '5.0')),
            'log_level': os.getenv('LOG_LEVEL', 'INFO'),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


@lru_cache()
def get_config() -> RedirectorSettings:
    """Get the settings built from the environment alone."""
    return RedirectorSettings.from_env()
