"""In-memory mailbox with read tracking and threaded views.

This module provides the `Mailbox` class, a collection of emails where each
stored message carries a read/unread flag. On top of plain membership the
mailbox offers chronological views and thread-based grouping, reconstructing
reply chains from each message's parent reference.

Error Handling:
    - Operations on a missing message id (delete, mark read/unread, mark
      thread read/unread) return False instead of raising.
    - `add_msg` returns False for None or for a duplicate identifier.
    - `is_read` raises MessageNotFoundError for a missing id; the read state
      of a message that does not exist is a caller error.

The mailbox is not thread-safe. Callers sharing one across threads must
serialize access to it as a whole.

Classes:
    Mailbox: Collection of emails with read state and views.

Example:
    >>> from src.inbox.mailbox import Mailbox
    >>> from src.inbox.models import Email
    >>>
    >>> mailbox = Mailbox()
    >>> root = Email(timestamp=100)
    >>> reply = Email(timestamp=200, response_to=root.id)
    >>> mailbox.add_msg(root), mailbox.add_msg(reply)
    (True, True)
    >>> mailbox.mark_thread_as_read(reply.id)
    True
    >>> mailbox.get_unread_msg_count()
    0
    >>> [email.timestamp for email in mailbox.get_threaded_view()]
    [200, 100]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator
from uuid import UUID

from src.inbox.config import MailboxSettings
from src.inbox.errors import MessageNotFoundError
from src.inbox.models import Email, ReadState, Thread
from src.inbox.threads import (
    build_reply_index,
    collect_thread,
    find_thread_root,
    partition_threads,
)

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    """A stored message and its read flag."""

    email: Email
    state: ReadState = ReadState.UNREAD


def _most_recent_first(emails: Iterable[Email]) -> list[Email]:
    return sorted(emails, key=lambda email: email.timestamp, reverse=True)


class Mailbox:
    """A collection of emails, each tagged as read or unread.

    Messages are keyed by their identifier; at most one message per
    identifier is stored. A newly added message starts out unread.

    Attributes:
        settings: Settings controlling orphan handling.

    Example:
        >>> mailbox = Mailbox()
        >>> email = Email(timestamp=5)
        >>> mailbox.add_msg(email)
        True
        >>> mailbox.add_msg(email)
        False
        >>> mailbox.is_read(email.id)
        False
    """

    def __init__(self, settings: MailboxSettings | None = None) -> None:
        """Initialize an empty mailbox.

        Args:
            settings: Mailbox settings. Defaults to `MailboxSettings()`,
                which reads `INBOX_*` environment variables.
        """
        self._settings = settings or MailboxSettings()
        self._entries: dict[UUID, _Entry] = {}

    @property
    def settings(self) -> MailboxSettings:
        """Return the settings this mailbox was created with."""
        return self._settings

    # =========================================================================
    # Membership
    # =========================================================================

    def add_msg(self, email: Email | None) -> bool:
        """Add a message to the mailbox as unread.

        Args:
            email: The message to add.

        Returns:
            True if the message was added, False if it was None or a message
            with the same identifier is already stored.
        """
        if email is None or email.id in self._entries:
            return False
        self._entries[email.id] = _Entry(email=email)
        logger.debug("Added message %s (timestamp=%d)", email.id, email.timestamp)
        return True

    def get_msg(self, message_id: UUID) -> Email | None:
        """Return the message with the given identifier.

        Args:
            message_id: Identifier of the message to retrieve.

        Returns:
            The stored email, or None if no such message exists.
        """
        entry = self._entries.get(message_id)
        if entry is None:
            return None
        return entry.email

    def del_msg(self, message_id: UUID) -> bool:
        """Delete a message from the mailbox.

        Replies to the deleted message keep their parent reference; how they
        are threaded afterwards depends on the orphan policy.

        Args:
            message_id: Identifier of the message to delete.

        Returns:
            True if the message existed and was removed, False otherwise.
        """
        if self._entries.pop(message_id, None) is None:
            return False
        logger.debug("Deleted message %s", message_id)
        return True

    def get_msg_count(self) -> int:
        """Return the number of messages in the mailbox."""
        return len(self._entries)

    def get_unread_msg_count(self) -> int:
        """Return the number of unread messages in the mailbox."""
        return sum(
            1 for entry in self._entries.values() if entry.state is ReadState.UNREAD
        )

    def clear(self) -> None:
        """Remove every message from the mailbox."""
        self._entries.clear()

    # =========================================================================
    # Read State
    # =========================================================================

    def mark_read(self, message_id: UUID) -> bool:
        """Mark a message as read.

        Args:
            message_id: Identifier of the message.

        Returns:
            True if the message exists, False otherwise.
        """
        return self._set_state(message_id, ReadState.READ)

    def mark_unread(self, message_id: UUID) -> bool:
        """Mark a message as unread.

        Args:
            message_id: Identifier of the message.

        Returns:
            True if the message exists, False otherwise.
        """
        return self._set_state(message_id, ReadState.UNREAD)

    def get_read_state(self, message_id: UUID) -> ReadState:
        """Return the read state of a message.

        Args:
            message_id: Identifier of the message.

        Returns:
            The message's ReadState.

        Raises:
            MessageNotFoundError: If the message is not in the mailbox.
        """
        entry = self._entries.get(message_id)
        if entry is None:
            raise MessageNotFoundError(message_id)
        return entry.state

    def is_read(self, message_id: UUID) -> bool:
        """Determine whether a message has been read.

        Unlike the mark operations, a missing message is an error here.

        Args:
            message_id: Identifier of the message.

        Returns:
            True if the message is read, False if unread.

        Raises:
            MessageNotFoundError: If the message is not in the mailbox.
        """
        return self.get_read_state(message_id) is ReadState.READ

    def mark_thread_as_read(self, message_id: UUID) -> bool:
        """Mark every message in the thread containing a message as read.

        Args:
            message_id: Identifier of any message in the thread.

        Returns:
            True if the message exists, False otherwise.

        Raises:
            OrphanedMessageError: If the thread cannot be reconstructed under
                the strict orphan policy. No flags are changed in that case.
        """
        return self._set_thread_state(message_id, ReadState.READ)

    def mark_thread_as_unread(self, message_id: UUID) -> bool:
        """Mark every message in the thread containing a message as unread.

        Args:
            message_id: Identifier of any message in the thread.

        Returns:
            True if the message exists, False otherwise.

        Raises:
            OrphanedMessageError: If the thread cannot be reconstructed under
                the strict orphan policy. No flags are changed in that case.
        """
        return self._set_thread_state(message_id, ReadState.UNREAD)

    def _set_state(self, message_id: UUID, state: ReadState) -> bool:
        entry = self._entries.get(message_id)
        if entry is None:
            return False
        entry.state = state
        logger.debug("Marked message %s as %s", message_id, state.value)
        return True

    def _set_thread_state(self, message_id: UUID, state: ReadState) -> bool:
        # Reconstruct fully before touching any flag
        thread = self.get_thread(message_id)
        if thread is None:
            return False
        for email in thread.messages:
            self._entries[email.id].state = state
        logger.debug(
            "Marked thread rooted at %s (%d messages) as %s",
            thread.root.id,
            len(thread),
            state.value,
        )
        return True

    # =========================================================================
    # Threads
    # =========================================================================

    def get_thread(self, message_id: UUID) -> Thread | None:
        """Reconstruct the thread containing a message.

        Args:
            message_id: Identifier of any message in the thread.

        Returns:
            The thread (messages in no particular order), or None if the
            message is not in the mailbox.

        Raises:
            OrphanedMessageError: If the chain is broken and the orphan policy
                is "strict".
        """
        email = self.get_msg(message_id)
        if email is None:
            return None
        lookup = {entry_id: entry.email for entry_id, entry in self._entries.items()}
        root = find_thread_root(email, lookup, self._settings.orphan_policy)
        return collect_thread(root, build_reply_index(lookup.values()))

    def get_threads(self) -> list[Thread]:
        """Return all threads, most recently active first.

        Messages inside each thread are ordered most recent first. Ties at
        either level are ordered arbitrarily.

        Returns:
            List of threads covering every message in the mailbox.

        Raises:
            OrphanedMessageError: If a chain is broken and the orphan policy
                is "strict".
        """
        threads = partition_threads(
            (entry.email for entry in self._entries.values()),
            self._settings.orphan_policy,
        )
        for thread in threads:
            thread.messages = _most_recent_first(thread.messages)
        return sorted(threads, key=lambda thread: thread.latest_timestamp, reverse=True)

    # =========================================================================
    # Views
    # =========================================================================

    def get_timestamp_view(self) -> list[Email]:
        """Return all messages sorted by timestamp, most recent first.

        Messages with equal timestamps are ordered arbitrarily.
        """
        return _most_recent_first(entry.email for entry in self._entries.values())

    def get_msgs_in_range(self, start_time: int, end_time: int) -> list[Email]:
        """Return messages with start_time <= timestamp <= end_time.

        Args:
            start_time: Start of the range, >= 0.
            end_time: End of the range, >= start_time.

        Returns:
            Matching messages, earliest first. Ties are ordered arbitrarily.
        """
        return [
            email
            for email in reversed(self.get_timestamp_view())
            if start_time <= email.timestamp <= end_time
        ]

    def get_threaded_view(self) -> list[Email]:
        """Return all messages grouped by thread.

        The thread with the most recent activity comes first, and within a
        thread more recent messages come first. Ties are ordered arbitrarily.

        Raises:
            OrphanedMessageError: If a chain is broken and the orphan policy
                is "strict".
        """
        return [email for thread in self.get_threads() for email in thread.messages]

    # =========================================================================
    # Container Protocol
    # =========================================================================

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._entries

    def __iter__(self) -> Iterator[Email]:
        return iter([entry.email for entry in self._entries.values()])

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        """Return a string representation of the mailbox.

        Example:
            >>> repr(Mailbox())
            'Mailbox(messages=0, unread=0)'
        """
        return (
            f"Mailbox(messages={len(self._entries)}, "
            f"unread={self.get_unread_msg_count()})"
        )
