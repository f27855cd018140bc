"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

A posted journal entry is the record every account balance was derived
from.  If its lines or amounts could be edited after posting, the stored
balances would silently stop matching the journal.  The JournalEntryService
refuses such edits; these listeners refuse them again at flush time, so
code that bypasses the service (scripts, admin shells, new features) cannot
do it either.

===============================================================================
HOW IT WORKS
===============================================================================

    session.flush()
         |
         v
    [before_update] --> _check_*_immutability() --> ImmutabilityViolationError
         |
    [before_delete] --> _check_*_delete() --------> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Bulk ``UPDATE`` statements (AccountStore.increment_balance) do not fire
mapper events; they are the sanctioned path for balance changes.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity            | Rule
------------------|--------------------------------------------------------------
JournalEntry      | DRAFT: anything.  DRAFT->POSTED: allowed.
                  | POSTED: only next_recurring_date may change, or the
                  |   POSTED->VOID transition with voided_at/void_reason.
                  | VOID: nothing.  Delete: DRAFT only.
JournalEntryLine  | Update/delete only while the parent entry is DRAFT.
Account           | normal_balance and company_id never change after insert;
                  | current_balance is never assigned through the ORM.

updated_at/updated_by_id are audit metadata and always allowed to change.

===============================================================================
USAGE
===============================================================================

    from ledger_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

    unregister_immutability_listeners()  # TESTS ONLY
"""

from sqlalchemy import event, inspect, select
from sqlalchemy.orm.attributes import get_history

from ledger_kernel.domain.enums import JournalEntryStatus
from ledger_kernel.domain.lifecycle import can_transition
from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})

_POSTED_MUTABLE_FIELDS = frozenset({"next_recurring_date"})

_VOID_TRANSITION_FIELDS = frozenset({"status", "voided_at", "void_reason"})

_ACCOUNT_FROZEN_FIELDS = frozenset({"normal_balance", "company_id", "current_balance"})


def _blocked(entity_type: str, entity_id, operation: str, reason: str, field: str | None = None):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
            "field": field,
        },
    )
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _changed_fields(target) -> set[str]:
    changed = set()
    for attr in inspect(target).attrs:
        if attr.key in _AUDIT_FIELDS:
            continue
        if attr.history.has_changes():
            changed.add(attr.key)
    return changed


def _committed_status(target) -> JournalEntryStatus:
    """Status as it was when loaded (before this flush's changes)."""
    history = get_history(target, "status")
    if history.deleted:
        return JournalEntryStatus(history.deleted[0])
    return JournalEntryStatus(target.status)


def _check_journal_entry_immutability(mapper, connection, target):
    """
    Prevent updates to posted and voided JournalEntry records.

    Allows the posting workflow itself (DRAFT -> POSTED, with any field
    changes made in the same flush) and the void transition.
    """
    old_status = _committed_status(target)
    new_status = JournalEntryStatus(target.status)

    if old_status == JournalEntryStatus.DRAFT:
        if new_status != old_status and not can_transition(old_status, new_status):
            raise _blocked(
                "JournalEntry", target.id, "UPDATE",
                f"Cannot move a DRAFT entry to {new_status.value}",
                field="status",
            )
        return

    changed = _changed_fields(target)

    if old_status == JournalEntryStatus.POSTED:
        if new_status == JournalEntryStatus.POSTED:
            forbidden = changed - _POSTED_MUTABLE_FIELDS
        elif new_status == JournalEntryStatus.VOID:
            forbidden = changed - _VOID_TRANSITION_FIELDS - _POSTED_MUTABLE_FIELDS
        else:
            forbidden = {"status"}
    else:
        forbidden = changed

    if forbidden:
        field = sorted(forbidden)[0]
        raise _blocked(
            "JournalEntry", target.id, "UPDATE",
            f"Cannot modify field '{field}' on {old_status.value} journal entry",
            field=field,
        )


def _check_journal_entry_delete(mapper, connection, target):
    """Only DRAFT entries may be deleted."""
    if _committed_status(target) != JournalEntryStatus.DRAFT:
        raise _blocked(
            "JournalEntry", target.id, "DELETE",
            "Only DRAFT journal entries can be deleted",
        )


def _parent_status(connection, journal_entry_id) -> JournalEntryStatus | None:
    from ledger_kernel.models.journal import JournalEntry

    status = connection.execute(
        select(JournalEntry.status).where(JournalEntry.id == journal_entry_id)
    ).scalar_one_or_none()
    return JournalEntryStatus(status) if status is not None else None


def _check_journal_line_immutability(mapper, connection, target):
    """Lines are frozen once the parent entry has left DRAFT."""
    status = _parent_status(connection, target.journal_entry_id)
    if status is not None and status != JournalEntryStatus.DRAFT:
        raise _blocked(
            "JournalEntryLine", target.id, "UPDATE",
            f"Cannot modify a line of a {status.value} journal entry",
        )


def _check_journal_line_delete(mapper, connection, target):
    status = _parent_status(connection, target.journal_entry_id)
    if status is not None and status != JournalEntryStatus.DRAFT:
        raise _blocked(
            "JournalEntryLine", target.id, "DELETE",
            f"Cannot delete a line of a {status.value} journal entry",
        )


def _check_account_structural_immutability(mapper, connection, target):
    """normal_balance/company_id are fixed; balances move only by increment."""
    for field in _ACCOUNT_FROZEN_FIELDS:
        if get_history(target, field).has_changes():
            raise _blocked(
                "Account", target.id, "UPDATE",
                f"Field '{field}' cannot be changed through the ORM",
                field=field,
            )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Call after the models are importable and before any flush.  Calling it
    twice is harmless.
    """
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.journal import JournalEntry, JournalEntryLine

    for target, name, fn in _listeners(Account, JournalEntry, JournalEntryLine):
        if not event.contains(target, name, fn):
            event.listen(target, name, fn)


def _listeners(Account, JournalEntry, JournalEntryLine):
    return (
        (JournalEntry, "before_update", _check_journal_entry_immutability),
        (JournalEntry, "before_delete", _check_journal_entry_delete),
        (JournalEntryLine, "before_update", _check_journal_line_immutability),
        (JournalEntryLine, "before_delete", _check_journal_line_delete),
        (Account, "before_update", _check_account_structural_immutability),
    )


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if it was never registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests that deliberately corrupt data to
    verify detection (e.g. balance drift).
    """
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.journal import JournalEntry, JournalEntryLine

    for target, name, fn in _listeners(Account, JournalEntry, JournalEntryLine):
        _safe_remove_listener(target, name, fn)
