"""
Pytest fixtures for the backoffice core test suite.

Provides:
- Structured logging configured once per session
- LogContext isolation between tests
- Captured log records as parsed JSON
- Deterministic clock and default organisation settings
"""

import json
import logging
from io import StringIO

import pytest

from backoffice_config.schema import OrgSettings
from backoffice_kernel.domain.clock import DeterministicClock
from backoffice_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tests.factories import TODAY


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """JSON logging at DEBUG so engine traces are emitted during tests."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Each test starts with an empty LogContext."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Records emitted under the ``backoffice`` logger, parsed from JSON.

    Usage::

        def test_something(captured_logs):
            compute_invoice_totals(lines, 10)
            logs = captured_logs()
            assert any(r["message"] == "BACKOFFICE_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("backoffice")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock and settings
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock.on(TODAY)


@pytest.fixture
def settings():
    return OrgSettings()
