"""Mailbox configuration.

This module provides the Pydantic-based settings model for mailboxes and the
logging setup shared by applications that embed them.

Configuration Sources (in order of precedence, highest first):
    1. Explicit constructor arguments
    2. Environment variables (automatic via pydantic-settings)
    3. Default values

Environment Variables:
    Environment variables are prefixed with "INBOX_". Variable names are
    derived from field names in SCREAMING_SNAKE_CASE.

    Examples:
        INBOX_ORPHAN_POLICY=strict
        INBOX_LOG_LEVEL=debug

Orphan Policy:
    A reply whose parent is no longer in the mailbox (or whose ancestor chain
    loops back on itself) cannot be traced to a real thread root.
    - "promote": treat the orphan as the root of its own thread
    - "strict": raise OrphanedMessageError from thread operations

Example:
    >>> from src.inbox.config import MailboxSettings
    >>> settings = MailboxSettings()
    >>> settings.orphan_policy
    'promote'
    >>> settings = MailboxSettings(orphan_policy="strict", log_level="debug")
    >>> settings.log_level
    'DEBUG'
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


OrphanPolicy = Literal["promote", "strict"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class MailboxSettings(BaseSettings):
    """Settings controlling mailbox behavior.

    Attributes:
        orphan_policy: How thread reconstruction treats a reply whose
            ancestor chain cannot be followed to a root.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Example:
        >>> settings = MailboxSettings(orphan_policy="STRICT")
        >>> settings.orphan_policy
        'strict'
    """

    model_config = SettingsConfigDict(
        env_prefix="INBOX_",
        case_sensitive=False,
        extra="ignore",
    )

    orphan_policy: OrphanPolicy = Field(
        default="promote",
        description="Handling of replies whose parent is missing",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("orphan_policy", mode="before")
    @classmethod
    def normalize_orphan_policy(cls, v: Any) -> str:
        """Normalize orphan policy to lowercase."""
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v


def configure_logging(settings: MailboxSettings | None = None) -> None:
    """Configure root logging from mailbox settings.

    Args:
        settings: Settings to read the level from. Defaults to a fresh
            `MailboxSettings()`, which picks up `INBOX_LOG_LEVEL`.
    """
    settings = settings or MailboxSettings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=LOG_FORMAT,
    )


def validate_settings(settings: MailboxSettings) -> list[str]:
    """Validate settings and return any warnings.

    Performs checks beyond Pydantic's built-in validation for values that are
    legal but likely to surprise.

    Args:
        settings: The settings to validate.

    Returns:
        A list of warning messages. Empty if no issues found.

    Example:
        >>> warnings = validate_settings(MailboxSettings(orphan_policy="strict"))
        >>> "orphan" in warnings[0].lower()
        True
    """
    warnings: list[str] = []

    if settings.orphan_policy == "strict":
        warnings.append(
            "Strict orphan policy is enabled: deleting a message that has "
            "replies makes thread operations and the threaded view raise "
            "OrphanedMessageError"
        )

    if settings.log_level == "DEBUG":
        warnings.append(
            "DEBUG logging records every mailbox mutation and may be noisy "
            "for large mailboxes"
        )

    return warnings
