"""In-memory mailbox with read tracking and reply threading.

This package provides a mailbox that stores emails with a read/unread flag,
offers chronological and threaded views, and reconstructs reply threads from
each email's parent reference.

Modules:
    models: Email model, read state and thread container
    config: Settings model and logging setup
    errors: Exception hierarchy
    threads: Thread reconstruction
    mailbox: The Mailbox class
"""

from src.inbox.config import (
    MailboxSettings,
    OrphanPolicy,
    configure_logging,
    validate_settings,
)
from src.inbox.errors import (
    MailboxError,
    MessageNotFoundError,
    OrphanedMessageError,
)
from src.inbox.mailbox import Mailbox
from src.inbox.models import NO_PARENT_ID, Email, ReadState, Thread
from src.inbox.threads import (
    build_reply_index,
    collect_thread,
    find_thread_root,
    partition_threads,
)

__all__ = [
    # Models
    "NO_PARENT_ID",
    "Email",
    "ReadState",
    "Thread",
    # Configuration
    "MailboxSettings",
    "OrphanPolicy",
    "configure_logging",
    "validate_settings",
    # Errors
    "MailboxError",
    "MessageNotFoundError",
    "OrphanedMessageError",
    # Thread reconstruction
    "build_reply_index",
    "collect_thread",
    "find_thread_root",
    "partition_threads",
    # Mailbox
    "Mailbox",
]
