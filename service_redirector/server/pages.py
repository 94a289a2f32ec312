"""HTML bodies for listing, not-found and error responses."""

from html import escape
from typing import Optional

from ..routing.address import ServiceAddress
from ..routing.engine import NOMAD_UI_PORT
from ..routing.models import NoMatchReason, RedirectDecision
from ..shared.config import RedirectorSettings

CONSUL_UI_PORT = 8500

HOSTNAME_TIPS = """
<p>The hostname should be in one of these formats:</p>
<ul>
  <li><b>ServiceName</b>.service.consul</li>
  <li><b>_ServiceName</b>.<b>_PortName</b>.service.consul</li>
  <li><b>ServiceName</b>.service.<b>DatacenterName</b>.consul</li>
  <li><b>_ServiceName</b>.<b>_PortName</b>.service.<b>DatacenterName</b>.consul</li>
</ul>
"""


def describe_service(address: Optional[ServiceAddress]) -> str:
    """HTML fragment naming the service and, when set, its port type."""
    if address is None:
        return ""
    text = f"service <code>{escape(address.service_name)}</code>"
    if address.port_type:
        text += f" and port type <code>{escape(address.port_type)}</code>"
    return text


def render_quick_links(settings: RedirectorSettings, hostname: str) -> str:
    """Links to the Nomad and Consul UIs, on the alias hosts when configured."""
    nomad_host = settings.nomad_ui_hostname or hostname
    consul_host = settings.consul_ui_hostname or hostname
    return f"""
<p>Quick links:</p>
<ul>
<li><a href="http://{escape(nomad_host)}:{NOMAD_UI_PORT}/ui/">Nomad UI</a></li>
<li><a href="http://{escape(consul_host)}:{CONSUL_UI_PORT}/ui/">Consul UI</a></li>
</ul>
"""


def render_not_found(decision: RedirectDecision, settings: RedirectorSettings) -> str:
    hostname = decision.hostname
    if decision.reason == NoMatchReason.NO_INSTANCES:
        intro = f"<p>No results found for {describe_service(decision.address)} in Consul</p>"
    else:
        intro = f"<p>Could not parse hostname <code>{escape(hostname)}</code> as a Consul service address</p>"
    return intro + HOSTNAME_TIPS + render_quick_links(settings, hostname)


def render_candidate_list(decision: RedirectDecision, settings: RedirectorSettings) -> str:
    parts = [f"<p>Consul service ports found for {describe_service(decision.address)}:</p><ul>"]
    for link in decision.candidates:
        tags = ", ".join(link.tags)
        if tags:
            tags = f" ({tags})"
        parts.append(f"""
<li>
    <a href="{escape(link.url)}">
        {escape(link.display_hostname)} port {link.port}{escape(tags)}
    </a>
</li>""")
    parts.append("</ul><br />")
    parts.append(render_quick_links(settings, decision.hostname))
    return "".join(parts)


def render_error(decision: RedirectDecision) -> str:
    if decision.hostname:
        return f"<p>Error handling {escape(decision.hostname)}: {escape(decision.detail or '')}</p>"
    return f"<p>Error: {escape(decision.detail or '')}</p>"
