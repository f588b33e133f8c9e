"""Tests for mailbox configuration.

Tests cover:
- Default values
- Environment variable loading
- Field normalization and validation
- Logging setup
- validate_settings warnings
"""

from __future__ import annotations

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.inbox.config import (
    LOG_FORMAT,
    MailboxSettings,
    configure_logging,
    validate_settings,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clean_env():
    """Fixture that clears INBOX_ environment variables before and after tests."""
    saved_env = {k: v for k, v in os.environ.items() if k.upper().startswith("INBOX_")}

    for key in list(os.environ.keys()):
        if key.upper().startswith("INBOX_"):
            del os.environ[key]

    yield

    for key in list(os.environ.keys()):
        if key.upper().startswith("INBOX_"):
            del os.environ[key]
    os.environ.update(saved_env)


# =============================================================================
# MailboxSettings Tests
# =============================================================================


class TestMailboxSettings:
    """Tests for MailboxSettings."""

    def test_defaults(self, clean_env) -> None:
        """Settings default to promoting orphans and INFO logging."""
        settings = MailboxSettings()
        assert settings.orphan_policy == "promote"
        assert settings.log_level == "INFO"

    def test_explicit_values(self, clean_env) -> None:
        """Constructor arguments are used as given."""
        settings = MailboxSettings(orphan_policy="strict", log_level="WARNING")
        assert settings.orphan_policy == "strict"
        assert settings.log_level == "WARNING"

    def test_normalizes_orphan_policy(self, clean_env) -> None:
        """Orphan policy is case-insensitive."""
        assert MailboxSettings(orphan_policy="STRICT").orphan_policy == "strict"

    def test_normalizes_log_level(self, clean_env) -> None:
        """Log level is case-insensitive."""
        assert MailboxSettings(log_level="debug").log_level == "DEBUG"

    def test_rejects_unknown_orphan_policy(self, clean_env) -> None:
        """Only known orphan policies are accepted."""
        with pytest.raises(ValidationError):
            MailboxSettings(orphan_policy="ignore")

    def test_rejects_unknown_log_level(self, clean_env) -> None:
        """Only standard log levels are accepted."""
        with pytest.raises(ValidationError):
            MailboxSettings(log_level="VERBOSE")

    def test_loads_from_environment(self, clean_env) -> None:
        """INBOX_ environment variables populate the settings."""
        os.environ["INBOX_ORPHAN_POLICY"] = "strict"
        os.environ["INBOX_LOG_LEVEL"] = "error"
        settings = MailboxSettings()
        assert settings.orphan_policy == "strict"
        assert settings.log_level == "ERROR"

    def test_constructor_overrides_environment(self, clean_env) -> None:
        """Explicit arguments take precedence over the environment."""
        os.environ["INBOX_ORPHAN_POLICY"] = "strict"
        settings = MailboxSettings(orphan_policy="promote")
        assert settings.orphan_policy == "promote"

    def test_ignores_unrelated_variables(self, clean_env) -> None:
        """Unknown INBOX_ variables are ignored."""
        os.environ["INBOX_UNKNOWN_FIELD"] = "value"
        settings = MailboxSettings()
        assert not hasattr(settings, "unknown_field")


# =============================================================================
# Logging Tests
# =============================================================================


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_uses_settings_level(self) -> None:
        """basicConfig receives the configured level and format."""
        settings = MailboxSettings(log_level="DEBUG")
        with patch("src.inbox.config.logging.basicConfig") as basic_config:
            configure_logging(settings)
        basic_config.assert_called_once_with(level=logging.DEBUG, format=LOG_FORMAT)

    def test_defaults_to_environment(self, clean_env) -> None:
        """Without settings, the level comes from the environment."""
        os.environ["INBOX_LOG_LEVEL"] = "warning"
        with patch("src.inbox.config.logging.basicConfig") as basic_config:
            configure_logging()
        basic_config.assert_called_once_with(level=logging.WARNING, format=LOG_FORMAT)


# =============================================================================
# validate_settings Tests
# =============================================================================


class TestValidateSettings:
    """Tests for validate_settings."""

    def test_no_warnings_for_defaults(self, clean_env) -> None:
        """Default settings produce no warnings."""
        assert validate_settings(MailboxSettings()) == []

    def test_warns_on_strict_policy(self) -> None:
        """Strict orphan policy is flagged."""
        warnings = validate_settings(
            MailboxSettings(orphan_policy="strict", log_level="INFO")
        )
        assert len(warnings) == 1
        assert "OrphanedMessageError" in warnings[0]

    def test_warns_on_debug_logging(self) -> None:
        """DEBUG logging is flagged."""
        warnings = validate_settings(
            MailboxSettings(orphan_policy="promote", log_level="DEBUG")
        )
        assert len(warnings) == 1
        assert "DEBUG" in warnings[0]
