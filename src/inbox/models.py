"""Mailbox data models.

This module defines the value types the mailbox operates on: the `Email`
message model, the `ReadState` flag stored per message, and the `Thread`
container used to surface reconstructed reply chains.

Models:
    - Email: Immutable email message with identifier, timestamp and parent
      reference
    - ReadState: Per-message read/unread flag
    - Thread: A thread root together with all of its descendants

Threading Note:
    Emails reference the message they reply to through `response_to`. Thread
    roots carry the `NO_PARENT_ID` sentinel (the nil UUID) instead of a real
    identifier.

Example:
    >>> from src.inbox.models import Email, NO_PARENT_ID
    >>> root = Email(timestamp=100, subject="Quarterly report")
    >>> reply = Email(timestamp=150, response_to=root.id)
    >>> root.is_root, reply.is_root
    (True, False)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Parent reference carried by thread roots
NO_PARENT_ID = UUID(int=0)


class ReadState(Enum):
    """Read state of a message stored in a mailbox.

    Attributes:
        READ: The message has been read.
        UNREAD: The message has not been read yet.
    """

    READ = "read"
    UNREAD = "unread"


# =============================================================================
# Email Model
# =============================================================================


class Email(BaseModel):
    """An email message as consumed by the mailbox.

    Emails are immutable once created. The mailbox only relies on `id`,
    `timestamp` and `response_to`; the remaining fields are descriptive.

    Attributes:
        id: Stable unique identifier of the message.
        timestamp: Integer timestamp, not necessarily unique.
        response_to: Identifier of the message this one replies to, or
            `NO_PARENT_ID` for a thread root.
        sender: Sender address.
        recipients: Recipient addresses.
        subject: Subject line.
        body: Plain text body.

    Example:
        >>> email = Email(timestamp=42, sender="alice@example.com")
        >>> email.response_to == NO_PARENT_ID
        True
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique message identifier")
    timestamp: int = Field(..., ge=0, description="Message timestamp")
    response_to: UUID = Field(
        default=NO_PARENT_ID,
        description="Identifier of the parent message, or NO_PARENT_ID",
    )
    sender: str = Field(default="", description="Sender address")
    recipients: tuple[str, ...] = Field(default=(), description="Recipient addresses")
    subject: str = Field(default="", description="Subject line")
    body: str = Field(default="", description="Plain text body")

    @model_validator(mode="after")
    def validate_references(self) -> "Email":
        """Reject sentinel identifiers and self-replies."""
        if self.id == NO_PARENT_ID:
            raise ValueError("id cannot be the NO_PARENT_ID sentinel")
        if self.response_to == self.id:
            raise ValueError(f"email {self.id} cannot reply to itself")
        return self

    @property
    def is_root(self) -> bool:
        """Return whether this email starts a thread.

        Returns:
            True if `response_to` is the `NO_PARENT_ID` sentinel.
        """
        return self.response_to == NO_PARENT_ID


# =============================================================================
# Thread Container
# =============================================================================


@dataclass
class Thread:
    """A reconstructed thread: its root and every descendant.

    Threads are derived on demand and never stored by the mailbox. Message
    order is whatever the producer chose; the threaded views sort members by
    timestamp, most recent first.

    Attributes:
        root: The email the thread starts from.
        messages: The root and all of its descendants.

    Example:
        >>> root = Email(timestamp=10)
        >>> thread = Thread(root=root, messages=[root])
        >>> thread.latest_timestamp
        10
        >>> root.id in thread
        True
    """

    root: Email
    messages: list[Email] = field(default_factory=list)

    @property
    def latest_timestamp(self) -> int:
        """Return the most recent timestamp among the thread's messages.

        Returns:
            The maximum member timestamp, or the root's timestamp when the
            thread has no messages recorded.
        """
        if not self.messages:
            return self.root.timestamp
        return max(email.timestamp for email in self.messages)

    @property
    def message_ids(self) -> frozenset[UUID]:
        """Return the identifiers of all messages in the thread."""
        return frozenset(email.id for email in self.messages)

    def __contains__(self, message_id: object) -> bool:
        return any(email.id == message_id for email in self.messages)

    def __len__(self) -> int:
        return len(self.messages)

    def __repr__(self) -> str:
        return (
            f"Thread(root={self.root.id}, messages={len(self.messages)}, "
            f"latest={self.latest_timestamp})"
        )
