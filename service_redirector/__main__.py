"""Command-line entry point for the service redirector."""

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .main import main as run_main
from .shared.config import DIRECTORY_BACKENDS, RedirectorSettings

# Load environment variables
load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="service-redirector",
        description="Redirect service hostnames to the nodes running the service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Redirect grafana.service.consul to the nodes registered in Consul
  service-redirector --consul-http-addr 10.0.0.2:8500

  # Append a cluster suffix to node names and send bare cluster hosts to Nomad
  service-redirector --hostname-suffix lan --redirect-to-nomad-ui

  # Custom routes, with $arg$ replaced by the rest of the path
  service-redirector --custom-routes '{"h": "http://homepage.service.consul/", "open": "http://$arg$/"}'

Environment Variables:
  SERVER_HOST            - Host to bind to (default: 0.0.0.0)
  HTTP_PORT              - Port to bind to (default: 80)
  HOSTNAME_SUFFIX        - Hostname suffix for nodes in the cluster
  NOMAD_UI_HOSTNAME      - Hostname to link to for viewing the Nomad UI
  CONSUL_UI_HOSTNAME     - Hostname to link to for viewing the Consul UI
  REDIRECT_TO_NOMAD_UI   - Redirect cluster hostnames to the Nomad UI (true/false)
  CUSTOM_ROUTES          - JSON map of custom routes
  DIRECTORY_BACKEND      - consul or dns (default: consul)
  CONSUL_HTTP_ADDR       - Consul HTTP API address (default: 127.0.0.1:8500)
  CONSUL_HTTP_TOKEN      - Consul ACL token
  CONSUL_HTTP_SSL        - Talk to Consul over https (true/false)
  DNS_NAMESERVER         - Nameserver answering SRV queries (default: 127.0.0.1)
  DNS_PORT               - Port of that nameserver (default: 8600)
  DNS_DOMAIN             - Domain services live under (default: consul)
  DIRECTORY_TIMEOUT      - Directory query deadline in seconds (default: 5)
  LOG_LEVEL              - TRACE, DEBUG, INFO, WARNING or ERROR (default: INFO)
        """
    )

    # Server options
    parser.add_argument("--host", help="Host to bind to (env: SERVER_HOST)")
    parser.add_argument("--port", type=int, help="Port to bind to (env: HTTP_PORT)")

    # Hostname options
    parser.add_argument(
        "--hostname-suffix",
        help="Hostname suffix for nodes in the cluster (env: HOSTNAME_SUFFIX)"
    )
    parser.add_argument(
        "--nomad-ui-hostname",
        help="Hostname to link to for viewing the Nomad UI (env: NOMAD_UI_HOSTNAME)"
    )
    parser.add_argument(
        "--consul-ui-hostname",
        help="Hostname to link to for viewing the Consul UI (env: CONSUL_UI_HOSTNAME)"
    )
    parser.add_argument(
        "--redirect-to-nomad-ui",
        action="store_true",
        default=None,
        help="Redirect the suffix and Nomad UI hostnames to the Nomad UI (env: REDIRECT_TO_NOMAD_UI)"
    )
    parser.add_argument(
        "--custom-routes",
        help="JSON map of custom routes, e.g. '{\"h\": \"http://homepage.service.consul/\"}' (env: CUSTOM_ROUTES)"
    )

    # Directory options
    parser.add_argument(
        "--directory-backend",
        choices=DIRECTORY_BACKENDS,
        help="Service directory backend (env: DIRECTORY_BACKEND)"
    )
    parser.add_argument("--consul-http-addr", help="Consul HTTP API address (env: CONSUL_HTTP_ADDR)")
    parser.add_argument("--dns-nameserver", help="Nameserver answering SRV queries (env: DNS_NAMESERVER)")
    parser.add_argument("--dns-port", type=int, help="Port of the SRV nameserver (env: DNS_PORT)")
    parser.add_argument(
        "--directory-timeout",
        type=float,
        help="Directory query deadline in seconds (env: DIRECTORY_TIMEOUT)"
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (env: LOG_LEVEL)"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def settings_from_args(argv: Optional[List[str]] = None) -> RedirectorSettings:
    """Parse flags and layer them over the environment."""
    args = build_parser().parse_args(argv)
    return RedirectorSettings.from_env(
        host=args.host,
        port=args.port,
        hostname_suffix=args.hostname_suffix,
        nomad_ui_hostname=args.nomad_ui_hostname,
        consul_ui_hostname=args.consul_ui_hostname,
        redirect_to_nomad_ui=args.redirect_to_nomad_ui,
        custom_routes=args.custom_routes,
        directory_backend=args.directory_backend,
        consul_http_addr=args.consul_http_addr,
        dns_nameserver=args.dns_nameserver,
        dns_port=args.dns_port,
        directory_timeout=args.directory_timeout,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    try:
        settings = settings_from_args(argv)
    except (ValidationError, ValueError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)
    run_main(settings)


if __name__ == "__main__":
    main()
