"""Tests for the structlog setup helper."""

import pytest
import structlog
from structlog.testing import capture_logs

from correlated_uncertainty import umath
from correlated_uncertainty.logconfig import configure_logging
from correlated_uncertainty.scalar import ufloat


@pytest.fixture
def restore_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:

    def test_unknown_level(self, restore_structlog):
        with pytest.raises(ValueError):
            configure_logging("chatty")

    def test_domain_errors_are_logged(self, restore_structlog):
        configure_logging("DEBUG")
        with capture_logs() as logs:
            with pytest.raises(ValueError):
                umath.log(ufloat(-1.0, 0.1))
        assert logs[0]["event"] == "math_domain_error"
        assert logs[0]["function"] == "log"
        assert logs[0]["log_level"] == "debug"
