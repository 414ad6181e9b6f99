"""Unit tests for configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from megasquirt_logger.core.config import Settings, setup_logging


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self):
        """Test settings have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.serial_port == "/dev/ttyUSB0"
        assert settings.schema_file == "config/mainController.ini"
        assert settings.record_size == 212
        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 8080
        assert settings.log_level == "INFO"

    def test_env_override_serial_port(self):
        """Test serial port override from environment."""
        with patch.dict(os.environ, {"MSLOGGER_SERIAL_PORT": "/dev/ttyACM0"}):
            settings = Settings()

        assert settings.serial_port == "/dev/ttyACM0"

    def test_env_override_schema_file(self):
        """Test schema path override from environment."""
        with patch.dict(os.environ, {"MSLOGGER_SCHEMA_FILE": "/etc/ms3/mainController.ini"}):
            settings = Settings()

        assert settings.schema_file == "/etc/ms3/mainController.ini"

    def test_env_override_record_size(self):
        """Test record size override from environment."""
        with patch.dict(os.environ, {"MSLOGGER_RECORD_SIZE": "256"}):
            settings = Settings()

        assert settings.record_size == 256

    def test_record_size_must_be_positive(self):
        """Test zero record size is rejected."""
        with patch.dict(os.environ, {"MSLOGGER_RECORD_SIZE": "0"}):
            with pytest.raises(ValidationError):
                Settings()

    def test_record_size_fits_length_header(self):
        """Test record size above 65535 is rejected."""
        with pytest.raises(ValidationError):
            Settings(record_size=0x10000)

    def test_env_override_api_port(self):
        """Test API port override from environment."""
        with patch.dict(os.environ, {"MSLOGGER_API_PORT": "9000"}):
            settings = Settings()

        assert settings.api_port == 9000

    def test_env_override_log_level(self):
        """Test log level override from environment."""
        with patch.dict(os.environ, {"MSLOGGER_LOG_LEVEL": "DEBUG"}):
            settings = Settings()

        assert settings.log_level == "DEBUG"

    def test_env_prefix(self):
        """Test that non-prefixed env vars are ignored."""
        with patch.dict(os.environ, {"SERIAL_PORT": "/dev/other"}, clear=True):
            settings = Settings()

        assert settings.serial_port == "/dev/ttyUSB0"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_info(self):
        """Test setting up INFO logging."""
        setup_logging("INFO")

    def test_setup_logging_case_insensitive(self):
        """Test log level is case insensitive."""
        setup_logging("debug")

    def test_setup_logging_invalid_defaults_to_info(self):
        """Test invalid level defaults to INFO."""
        setup_logging("INVALID")
