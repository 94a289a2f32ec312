"""Component logger helpers for the service redirector.

Every module logs through a named component so that console output reads
``[component] message | key=value``. Usage:

    from service_redirector.shared.logger import log_info, log_error

    log_info("Found custom routes", component="routes", count=3)
    log_error("Directory query failed", component="engine", error=e)
"""

import logging
from typing import Dict, Optional

from .log_levels import TRACE

# Context keys that are worth surfacing on the console line
CONTEXT_KEYS = (
    'hostname',
    'path',
    'service',
    'port_type',
    'status',
    'duration_ms',
    'route_key',
    'candidates',
    'error',
    'error_type',
)


class ComponentLogger:
    """Logger bound to a single component name."""

    def __init__(self, component: str, python_logger: Optional[logging.Logger] = None):
        """Initialize the component logger.

        Args:
            component: Component name for logging context
            python_logger: Python logger instance (if None, uses service_redirector.<component>)
        """
        self.component = component
        self.python_logger = python_logger or logging.getLogger(f"service_redirector.{component}")

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with the context fields worth printing."""
        context_parts = [
            f"{key}={kwargs[key]}" for key in CONTEXT_KEYS if key in kwargs and kwargs[key] is not None
        ]
        if context_parts:
            return f"[{self.component}] {message} | " + " ".join(context_parts)
        return f"[{self.component}] {message}"

    def trace(self, message: str, **kwargs):
        if self.python_logger.isEnabledFor(TRACE):
            self.python_logger.log(TRACE, self._format_message(message, **kwargs))

    def debug(self, message: str, **kwargs):
        self.python_logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.python_logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.python_logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, error: Optional[BaseException] = None, **kwargs):
        """Log at ERROR level.

        Args:
            message: Log message
            error: Optional exception to log
            **kwargs: Additional structured data
        """
        if error is not None:
            kwargs['error'] = str(error)
            kwargs['error_type'] = type(error).__name__
        self.python_logger.error(self._format_message(message, **kwargs))

    def log_response(self, method: str, hostname: str, path: str, status: int, duration_ms: float):
        """Log a finished HTTP exchange, escalating the level with the status."""
        message = f"{method} {hostname}{path} -> {status} ({duration_ms:.2f}ms)"
        level = 'error' if status >= 500 else 'warning' if status >= 400 else 'info'
        getattr(self, level)(message, status=status)


_component_loggers: Dict[str, ComponentLogger] = {}


def get_component_logger(component: str) -> ComponentLogger:
    """Create or get the logger for a component."""
    if component not in _component_loggers:
        _component_loggers[component] = ComponentLogger(component)
    return _component_loggers[component]


def log_trace(message: str, component: str = "global", **kwargs):
    """Trace log (very verbose routing detail)."""
    get_component_logger(component).trace(message, **kwargs)


def log_debug(message: str, component: str = "global", **kwargs):
    get_component_logger(component).debug(message, **kwargs)


def log_info(message: str, component: str = "global", **kwargs):
    get_component_logger(component).info(message, **kwargs)


def log_warning(message: str, component: str = "global", **kwargs):
    get_component_logger(component).warning(message, **kwargs)


def log_error(message: str, component: str = "global", error: Optional[BaseException] = None, **kwargs):
    """Error log.

    Args:
        message: Log message
        component: Component name
        error: Optional exception to log
        **kwargs: Additional structured data
    """
    get_component_logger(component).error(message, error=error, **kwargs)
