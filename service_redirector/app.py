"""ASGI app entry point for production deployments.

Usage:
    hypercorn 'service_redirector.app:create_app()'
    uvicorn service_redirector.app:create_app --factory
"""

import logging

from .server import create_redirector_app
from .shared.config import get_config
from .shared.python_logger_config import setup_python_logging

logger = logging.getLogger(__name__)


def create_app():
    """Factory function to create the ASGI app from the environment."""
    settings = get_config()
    setup_python_logging(settings.log_level)
    logger.info("Creating ASGI app via factory function")
    return create_redirector_app(settings)
