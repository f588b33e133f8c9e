"""Exceptions raised by mailbox operations.

Most mailbox operations report a missing message by returning False. The
exceptions here cover the cases that are caller errors: querying the read
state of a message that is not stored, and (under the strict orphan policy)
reconstructing a thread whose ancestor chain is broken.
"""

from __future__ import annotations

from uuid import UUID


class MailboxError(Exception):
    """Base exception for mailbox errors.

    Attributes:
        message: Human-readable error message.
    """

    pass


class MessageNotFoundError(MailboxError, ValueError):
    """Raised when a read-state query references a message that is not stored.

    Subclasses ValueError because the caller passed an invalid argument.

    Attributes:
        message: Human-readable error message.
        message_id: The identifier that was not found.
    """

    def __init__(self, message_id: UUID) -> None:
        """Initialize the error.

        Args:
            message_id: The identifier that was not found.
        """
        super().__init__(f"Message {message_id} is not in the mailbox")
        self.message_id = message_id


class OrphanedMessageError(MailboxError):
    """Raised when a reply cannot be traced back to a thread root.

    Only raised under the "strict" orphan policy. This happens when:
    - a message replies to a parent that is not in the mailbox
    - a chain of replies loops back on itself

    Attributes:
        message: Human-readable error message.
        message_id: The message whose parent reference could not be followed.
        missing_parent_id: The parent identifier that was not found, or None
            when the chain loops.
    """

    def __init__(
        self,
        message: str,
        message_id: UUID,
        missing_parent_id: UUID | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            message_id: The message whose parent reference could not be
                followed.
            missing_parent_id: The parent identifier that was not found.
        """
        super().__init__(message)
        self.message_id = message_id
        self.missing_parent_id = missing_parent_id
