"""Hostname resolution and redirect decisions."""

from .address import ServiceAddress, parse_service_address
from .engine import RedirectEngine
from .errors import DirectoryError, ParseFailure, RedirectorError, RewriteError, TemplateError
from .models import CandidateBackend, CandidateLink, DecisionType, NoMatchReason, RedirectDecision
from .rewriter import rewrite
from .routes import CustomRouteTable, RouteEntry, RouteMatch, render_route_target, substitute_arg

__all__ = [
    'CandidateBackend',
    'CandidateLink',
    'CustomRouteTable',
    'DecisionType',
    'DirectoryError',
    'NoMatchReason',
    'ParseFailure',
    'RedirectDecision',
    'RedirectEngine',
    'RedirectorError',
    'RewriteError',
    'RouteEntry',
    'RouteMatch',
    'ServiceAddress',
    'TemplateError',
    'parse_service_address',
    'render_route_target',
    'rewrite',
    'substitute_arg',
]
