"""
Journal entry lifecycle rules.

    DRAFT --post--> POSTED --void--> VOID

Status only moves forward.  Each guard raises the StateError subclass that
names the rule the caller broke; the service calls the guard after loading
(and, for post/void, locking) the entry.
"""

from ledger_kernel.domain.enums import JournalEntryStatus
from ledger_kernel.exceptions import (
    EntryAlreadyVoidedError,
    EntryNotDraftError,
    EntryNotPostedError,
)

ALLOWED_TRANSITIONS: dict[JournalEntryStatus, frozenset[JournalEntryStatus]] = {
    JournalEntryStatus.DRAFT: frozenset({JournalEntryStatus.POSTED}),
    JournalEntryStatus.POSTED: frozenset({JournalEntryStatus.VOID}),
    JournalEntryStatus.VOID: frozenset(),
}


def can_transition(
    current: JournalEntryStatus | str,
    target: JournalEntryStatus | str,
) -> bool:
    return JournalEntryStatus(target) in ALLOWED_TRANSITIONS[JournalEntryStatus(current)]


def require_draft(entry_id, status: JournalEntryStatus | str, operation: str) -> None:
    """update, delete and post need a DRAFT entry."""
    if JournalEntryStatus(status) != JournalEntryStatus.DRAFT:
        raise EntryNotDraftError(str(entry_id), JournalEntryStatus(status).value, operation)


def require_voidable(entry_id, status: JournalEntryStatus | str) -> None:
    status = JournalEntryStatus(status)
    if status == JournalEntryStatus.VOID:
        raise EntryAlreadyVoidedError(str(entry_id))
    if status != JournalEntryStatus.POSTED:
        raise EntryNotPostedError(str(entry_id), status.value, "voided")


def require_reversible(entry_id, status: JournalEntryStatus | str) -> None:
    status = JournalEntryStatus(status)
    if status != JournalEntryStatus.POSTED:
        raise EntryNotPostedError(str(entry_id), status.value, "reversed")
