"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Environment variable parsing
- Initialization with and without a token
- Instrumentation of SQLAlchemy and the FastAPI app
- API request records with and without Logfire
"""

import importlib
import os
from unittest.mock import MagicMock, patch

import bizboard.core.monitoring as monitoring


class TestLogfireEnvironmentConfiguration:
    """Test environment variable configuration for Logfire."""

    def teardown_method(self):
        importlib.reload(monitoring)

    def test_logfire_disabled_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_ENABLED is False
            assert monitoring.LOGFIRE_SERVICE_NAME == "bizboard-server"

    def test_logfire_enabled_values(self):
        for value in ("true", "1", "YES"):
            with patch.dict(os.environ, {"LOGFIRE_ENABLED": value}):
                importlib.reload(monitoring)

                assert monitoring.LOGFIRE_ENABLED is True

    def test_logfire_settings_from_environment(self):
        env = {
            "LOGFIRE_TOKEN": "test-token-12345",
            "LOGFIRE_ENVIRONMENT": "staging",
            "LOGFIRE_SERVICE_VERSION": "2.1.0",
        }
        with patch.dict(os.environ, env):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_TOKEN == "test-token-12345"
            assert monitoring.LOGFIRE_ENVIRONMENT == "staging"
            assert monitoring.LOGFIRE_SERVICE_VERSION == "2.1.0"


class TestInitializeLogfire:
    """Test Logfire initialization function."""

    @patch("bizboard.core.monitoring.LOGFIRE_ENABLED", False)
    @patch("bizboard.core.monitoring.logger")
    def test_initialize_logfire_disabled(self, mock_logger):
        """Initialization is skipped when Logfire is disabled."""
        with patch("logfire.configure") as configure:
            monitoring.initialize_logfire()

        configure.assert_not_called()
        mock_logger.info.assert_called_once()
        assert "disabled" in mock_logger.info.call_args[0][0].lower()

    @patch("bizboard.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("bizboard.core.monitoring.LOGFIRE_TOKEN", "")
    @patch("bizboard.core.monitoring.logger")
    def test_initialize_logfire_no_token(self, mock_logger):
        """Initialization warns when the token is not set."""
        monitoring.initialize_logfire()

        mock_logger.warning.assert_called_once()
        assert "token" in mock_logger.warning.call_args[0][0].lower()

    @patch("bizboard.core.monitoring._logfire_active", False)
    @patch("bizboard.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("bizboard.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("bizboard.core.monitoring.LOGFIRE_SERVICE_NAME", "test-service")
    @patch("bizboard.core.monitoring.LOGFIRE_ENVIRONMENT", "test")
    @patch("bizboard.core.monitoring.logger")
    def test_initialize_logfire_instruments_app(self, mock_logger):
        app = MagicMock()
        with patch("logfire.configure") as configure, patch("logfire.instrument_sqlalchemy") as sqlalchemy:
            with patch("logfire.instrument_fastapi") as fastapi:
                monitoring.initialize_logfire(app)

                assert monitoring._logfire_active is True

        configure.assert_called_once()
        assert configure.call_args.kwargs["service_name"] == "test-service"
        assert configure.call_args.kwargs["environment"] == "test"
        sqlalchemy.assert_called_once_with()
        fastapi.assert_called_once_with(app=app)

    @patch("bizboard.core.monitoring._logfire_active", False)
    @patch("bizboard.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("bizboard.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("bizboard.core.monitoring.logger")
    def test_initialize_logfire_skips_fastapi_without_app(self, mock_logger):
        with patch("logfire.configure"), patch("logfire.instrument_sqlalchemy"):
            with patch("logfire.instrument_fastapi") as fastapi:
                monitoring.initialize_logfire()

        fastapi.assert_not_called()

    @patch("bizboard.core.monitoring._logfire_active", False)
    @patch("bizboard.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("bizboard.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("bizboard.core.monitoring.logger")
    def test_initialize_logfire_handles_general_exception(self, mock_logger):
        with patch("logfire.configure", side_effect=RuntimeError("boom")):
            monitoring.initialize_logfire()

            assert monitoring._logfire_active is False

        mock_logger.error.assert_called_once()
        assert "boom" in mock_logger.error.call_args[0][0]


class TestLogAPIRequest:
    """Test API request records."""

    @patch("bizboard.core.monitoring._logfire_active", False)
    @patch("bizboard.core.monitoring.logger")
    def test_plain_log_when_inactive(self, mock_logger):
        with patch("logfire.info") as logfire_info:
            monitoring.log_api_request(method="GET", path="/api/v1/payments", status_code=200, duration_ms=12.345)

        logfire_info.assert_not_called()
        mock_logger.debug.assert_called_once_with("GET /api/v1/payments -> 200 (12.35ms)")

    @patch("bizboard.core.monitoring._logfire_active", True)
    @patch("bizboard.core.monitoring.logger")
    def test_logfire_record_when_active(self, mock_logger):
        with patch("logfire.info") as logfire_info:
            monitoring.log_api_request(method="POST", path="/api/v1/invoices", status_code=422, duration_ms=3.0)

        logfire_info.assert_called_once_with(
            "API request", method="POST", path="/api/v1/invoices", status_code=422, duration_ms=3.0
        )
        mock_logger.debug.assert_called_once()
