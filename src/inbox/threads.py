"""Thread reconstruction for mailbox messages.

A thread is the set of messages reachable from a root message (one whose
`response_to` is `NO_PARENT_ID`) by following reply edges forward. This
module rebuilds threads from the flat parent references stored on each email.

Reconstruction runs in two steps:
1. Walk parent references upward from a message until reaching its root.
2. Collect the root and all of its descendants using a reply index built once
   up front, with an explicit work queue instead of recursion so deep reply
   chains cannot exhaust the call stack.

Broken chains (a parent that is not present, or a loop of replies) are
handled according to the orphan policy; see `src.inbox.config`.

Functions:
    build_reply_index: Map each parent identifier to its direct replies.
    find_thread_root: Walk parent references up to the thread root.
    collect_thread: Gather a root and all of its descendants.
    partition_threads: Split a collection of emails into disjoint threads.

Example:
    >>> from src.inbox.models import Email
    >>> from src.inbox.threads import partition_threads
    >>> root = Email(timestamp=1)
    >>> reply = Email(timestamp=2, response_to=root.id)
    >>> other = Email(timestamp=3)
    >>> threads = partition_threads([root, reply, other])
    >>> sorted(len(thread) for thread in threads)
    [1, 2]
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Iterable, Mapping
from uuid import UUID

from src.inbox.config import OrphanPolicy
from src.inbox.errors import OrphanedMessageError
from src.inbox.models import Email, Thread

logger = logging.getLogger(__name__)


def build_reply_index(emails: Iterable[Email]) -> dict[UUID, list[Email]]:
    """Build an index from parent identifier to the emails replying to it.

    Roots are not indexed under the `NO_PARENT_ID` sentinel.

    Args:
        emails: The emails to index.

    Returns:
        Dictionary mapping a message identifier to its direct replies.
    """
    index: dict[UUID, list[Email]] = defaultdict(list)
    for email in emails:
        if not email.is_root:
            index[email.response_to].append(email)
    return dict(index)


def find_thread_root(
    email: Email,
    lookup: Mapping[UUID, Email],
    orphan_policy: OrphanPolicy = "promote",
) -> Email:
    """Walk parent references upward from an email to its thread root.

    Args:
        email: The email to start from.
        lookup: All emails available for the walk, keyed by identifier.
        orphan_policy: What to do when the chain cannot be followed. Under
            "promote", the last reachable message becomes the root; if the
            chain loops, the loop member with the smallest identifier does.

    Returns:
        The root email of the thread containing `email`.

    Raises:
        OrphanedMessageError: If the chain is broken and `orphan_policy` is
            "strict".
    """
    path: list[Email] = [email]
    positions: dict[UUID, int] = {email.id: 0}
    current = email

    while not current.is_root:
        parent = lookup.get(current.response_to)

        if parent is None:
            if orphan_policy == "strict":
                raise OrphanedMessageError(
                    f"Message {current.id} replies to {current.response_to}, "
                    "which is not in the mailbox",
                    message_id=current.id,
                    missing_parent_id=current.response_to,
                )
            logger.warning(
                "Message %s replies to missing message %s; treating it as a "
                "thread root",
                current.id,
                current.response_to,
            )
            return current

        if parent.id in positions:
            cycle = path[positions[parent.id]:]
            if orphan_policy == "strict":
                raise OrphanedMessageError(
                    f"Reply chain starting at {email.id} loops back to "
                    f"{parent.id}",
                    message_id=current.id,
                )
            root = min(cycle, key=lambda member: member.id.int)
            logger.warning(
                "Reply chain of %d messages loops; treating %s as the thread root",
                len(cycle),
                root.id,
            )
            return root

        positions[parent.id] = len(path)
        path.append(parent)
        current = parent

    return current


def collect_thread(root: Email, reply_index: Mapping[UUID, list[Email]]) -> Thread:
    """Collect a root email and all of its descendants.

    Messages are gathered breadth-first and deduplicated by identifier.

    Args:
        root: The thread root to start from.
        reply_index: Index produced by `build_reply_index`.

    Returns:
        A Thread holding the root and every descendant.
    """
    seen: set[UUID] = {root.id}
    queue: deque[Email] = deque([root])
    messages: list[Email] = []

    while queue:
        email = queue.popleft()
        messages.append(email)
        for reply in reply_index.get(email.id, ()):
            if reply.id not in seen:
                seen.add(reply.id)
                queue.append(reply)

    return Thread(root=root, messages=messages)


def partition_threads(
    emails: Iterable[Email],
    orphan_policy: OrphanPolicy = "promote",
) -> list[Thread]:
    """Split a collection of emails into disjoint threads.

    Each thread is reconstructed once: an email that already belongs to a
    discovered thread never starts another one.

    Args:
        emails: The emails to group. Identifiers must be unique.
        orphan_policy: Passed through to `find_thread_root`.

    Returns:
        List of threads in discovery order.

    Raises:
        OrphanedMessageError: If a chain is broken and `orphan_policy` is
            "strict".
    """
    emails = list(emails)
    lookup = {email.id: email for email in emails}
    reply_index = build_reply_index(emails)

    placed: set[UUID] = set()
    threads: list[Thread] = []
    for email in emails:
        if email.id in placed:
            continue
        root = find_thread_root(email, lookup, orphan_policy)
        thread = collect_thread(root, reply_index)
        placed.update(thread.message_ids)
        threads.append(thread)

    logger.debug("Partitioned %d messages into %d threads", len(emails), len(threads))
    return threads
