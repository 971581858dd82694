"""
Tests for logging configuration.
"""
import logging

from scan2order.logging_config import setup_logging


class TestLoggingConfiguration:
    """Test logging setup and configuration."""

    def test_setup_logging_default_level(self, monkeypatch):
        """Test that setup_logging defaults to INFO level."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert setup_logging() == "INFO"
        assert logging.getLogger("scan2order").level == logging.INFO

    def test_setup_logging_respects_env_var(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        assert setup_logging() == "WARNING"
        assert logging.getLogger("scan2order").level == logging.WARNING

    def test_setup_logging_explicit_level(self):
        setup_logging(level="ERROR")
        assert logging.getLogger("scan2order").level == logging.ERROR

    def test_setup_logging_invalid_level_defaults_to_info(self):
        assert setup_logging(level="INVALID_LEVEL") == "INFO"


class TestNoSensitiveDataInLogs:
    """Customer names and phone numbers stay out of INFO logs."""

    def test_order_submission_logs_no_pii(self, store, caplog):
        from scan2order.cart import add_flavor
        from scan2order.catalog import CATALOG
        from scan2order.services.ordering import submit_order

        setup_logging(level="INFO")
        cart = add_flavor([], CATALOG.get_flavor("van"))
        with caplog.at_level(logging.INFO):
            submit_order(store, cart, "Zulaikha", phone="+1 201-555-1234")

        for record in caplog.records:
            message = record.getMessage()
            assert "Zulaikha" not in message
            assert "2015551234" not in message


class TestLibraryNoise:
    """Third-party loggers are quieted outside DEBUG."""

    def test_noisy_loggers_held_at_warning(self):
        from scan2order.logging_config import NOISY_LOGGERS

        setup_logging(level="INFO")
        for name in ("slowapi", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine"):
            assert name in NOISY_LOGGERS
            assert logging.getLogger(name).level == logging.WARNING

    def test_debug_lets_library_logs_through(self):
        from scan2order.logging_config import NOISY_LOGGERS

        setup_logging(level="INFO")
        setup_logging(level="DEBUG")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.NOTSET

    def test_level_name_is_trimmed(self):
        assert setup_logging(level=" debug ") == "DEBUG"
        setup_logging(level="INFO")
