"""Component logger and reverse lookup helper tests."""

import logging

import pytest

from service_redirector.shared.dns_resolver import resolve_ptr
from service_redirector.shared.log_levels import TRACE
from service_redirector.shared.logger import ComponentLogger, get_component_logger
from service_redirector.shared.python_logger_config import resolve_level


class TestComponentLogger:
    """Message formatting and level selection."""

    def test_message_carries_component_and_context(self, caplog):
        logger = ComponentLogger("engine")
        with caplog.at_level(logging.INFO, logger="service_redirector.engine"):
            logger.info("Redirecting", hostname="h", path="/x", ignored="y")
        assert caplog.records[-1].getMessage() == "[engine] Redirecting | hostname=h path=/x"

    def test_error_records_exception_type(self, caplog):
        logger = ComponentLogger("engine")
        with caplog.at_level(logging.ERROR, logger="service_redirector.engine"):
            logger.error("Failed", error=ValueError("boom"))
        assert "error=boom error_type=ValueError" in caplog.records[-1].getMessage()

    @pytest.mark.parametrize("status,level", [(307, logging.INFO), (404, logging.WARNING), (500, logging.ERROR)])
    def test_response_level_follows_status(self, caplog, status, level):
        logger = ComponentLogger("access")
        with caplog.at_level(logging.INFO, logger="service_redirector.access"):
            logger.log_response("GET", "h", "/", status, 1.5)
        record = caplog.records[-1]
        assert record.levelno == level
        assert f"GET h/ -> {status} (1.50ms)" in record.getMessage()

    def test_trace_level(self, caplog):
        logger = ComponentLogger("routes")
        with caplog.at_level(TRACE, logger="service_redirector.routes"):
            logger.trace("key tried", route_key="h/a")
        assert caplog.records[-1].levelno == TRACE
        assert logging.getLevelName(TRACE) == "TRACE"
        assert resolve_level("trace") == TRACE
        assert resolve_level("warning") == logging.WARNING

    def test_component_loggers_are_shared(self):
        assert get_component_logger("engine") is get_component_logger("engine")


@pytest.mark.asyncio
class TestResolvePtr:

    async def test_invalid_address(self):
        assert await resolve_ptr("not-an-ip") is None
