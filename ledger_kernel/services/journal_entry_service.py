"""
JournalEntryService -- the journal entry lifecycle state machine.

Responsibility:
    create, update, delete, post, void, reverse and duplicate journal
    entries.  Posting and voiding move account balances through the
    AccountStore; posting also spawns auto-reversal and recurrence drafts
    through the EntryGenerator.

Architecture position:
    Kernel > Services.  The only kernel service that may own a transaction
    boundary: with ``auto_commit=True`` (default) each public operation
    commits on success and rolls back on failure.  With
    ``auto_commit=False`` it only flushes and the caller owns the boundary
    (e.g. inside ``session_scope()``).

Invariants enforced:
    - Status moves DRAFT -> POSTED -> VOID only (domain/lifecycle.py).
    - An entry is posted only if |total_debit - total_credit| <= tolerance,
      with totals recomputed from its current lines.
    - Posting header, line effects, balance increments and generated drafts
      are one transaction; so are voiding header and inverse increments.
    - post and void lock the entry row (SELECT ... FOR UPDATE) and re-read
      its status after the lock, so a concurrent second post/void fails
      with a StateError instead of applying twice.
    - Row locks are always taken entry, then number counter, then accounts
      (sorted), the same order the auto-journal bridge uses.
    - Validation, state and balance errors are raised before anything is
      flushed.

Failure modes:
    - ValidationError subclasses for bad input or unknown ids.
    - StateError subclasses for operations not allowed in the current status.
    - BalanceError for an unbalanced entry at posting.
    - InfrastructureError wrapping a SQLAlchemyError; the transaction has
      been rolled back (auto_commit) or must be rolled back by the caller.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_kernel.domain.balance import assert_balanced, entry_totals
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import UNSET, EntryDraft, EntryPatch, LineSpec
from ledger_kernel.domain.enums import EntryType, JournalEntryStatus, RecurringFrequency
from ledger_kernel.domain.lifecycle import (
    require_draft,
    require_reversible,
    require_voidable,
)
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.recurrence import next_occurrence
from ledger_kernel.domain.validation import validate_header_fields, validate_lines
from ledger_kernel.exceptions import (
    EntryNotFoundError,
    InfrastructureError,
    InvalidFieldError,
    LedgerKernelError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.journal import JournalEntry, JournalEntryLine
from ledger_kernel.services.account_store import AccountStore
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.entry_generator import EntryGenerator
from ledger_kernel.services.entry_numbering import EntryNumberAllocator

logger = get_logger("services.journal_entry")

T = TypeVar("T")

_REQUIRED_PATCH_FIELDS = frozenset(
    {"entry_number", "entry_date", "entry_type", "is_recurring", "is_auto_reversing"}
)


@dataclass(frozen=True)
class PostResult:
    """Outcome of a successful post.

    ``auto_reversal`` and ``recurrence`` are the DRAFT entries spawned in
    the same transaction, or None when the entry asked for neither.
    """

    entry: JournalEntry
    auto_reversal: JournalEntry | None = None
    recurrence: JournalEntry | None = None


def build_lines(specs: Sequence[LineSpec], actor_id: UUID) -> list[JournalEntryLine]:
    """ORM lines for validated specs; sort_order defaults to position."""
    return [
        JournalEntryLine(
            account_id=spec.account_id,
            debit=spec.debit,
            credit=spec.credit,
            description=spec.description,
            contact_type=spec.contact_type,
            contact_id=spec.contact_id,
            sort_order=spec.sort_order if spec.sort_order is not None else index,
            created_by_id=actor_id,
        )
        for index, spec in enumerate(specs)
    ]


class JournalEntryService(BaseService[JournalEntry]):
    """
    Contract:
        Every public method takes the company id alongside the entry id; an
        entry of another company is reported as not found.

    Guarantees:
        - Returned entities are flushed (and committed when auto_commit).
        - Derived drafts (reverse, duplicate, auto-reversal, recurrence)
          never touch balances.

    Non-goals:
        - No period locking, approvals or permissions.
        - No automatic retries on conflicts.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PostingPolicy = DEFAULT_POLICY,
        auto_commit: bool = True,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._policy = policy
        self._auto_commit = auto_commit
        self._accounts = AccountStore(session)
        self._numbers = EntryNumberAllocator(session, policy)
        self._generator = EntryGenerator(session, self._numbers)

    # -------------------------------------------------------------------------
    # Transaction handling
    # -------------------------------------------------------------------------

    def _run(self, operation: str, work: Callable[[], T]) -> T:
        t0 = time.monotonic()
        try:
            result = work()
            self.session.flush()
            if self._auto_commit:
                self.session.commit()
        except LedgerKernelError:
            if self._auto_commit:
                self.session.rollback()
            logger.warning(
                "journal_entry_operation_rejected",
                extra={"operation": operation},
                exc_info=True,
            )
            raise
        except SQLAlchemyError as exc:
            if self._auto_commit:
                self.session.rollback()
            logger.error(
                "journal_entry_operation_failed",
                extra={"operation": operation},
                exc_info=True,
            )
            raise InfrastructureError(operation, str(exc.__class__.__name__)) from exc
        except Exception:
            if self._auto_commit:
                self.session.rollback()
            logger.error(
                "journal_entry_operation_failed",
                extra={"operation": operation},
                exc_info=True,
            )
            raise

        logger.debug(
            "journal_entry_operation_completed",
            extra={
                "operation": operation,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return result

    def _load(self, entry_id: UUID, company_id: UUID, *, lock: bool = False) -> JournalEntry:
        query = select(JournalEntry).where(
            JournalEntry.id == entry_id,
            JournalEntry.company_id == company_id,
        )
        if lock:
            query = query.with_for_update(of=JournalEntry).execution_options(
                populate_existing=True
            )
        entry = self.session.execute(query).scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(str(entry_id))
        return entry

    def _validate_lines(self, lines: Sequence[LineSpec], company_id: UUID) -> None:
        validate_lines(lines)
        for index, line in enumerate(lines):
            if line.account_id is None:
                raise InvalidFieldError(f"lines[{index}].account_id", "is required")
        self._accounts.require_active_accounts(
            (line.account_id for line in lines), company_id
        )

    # -------------------------------------------------------------------------
    # create
    # -------------------------------------------------------------------------

    def create(self, draft: EntryDraft, created_by_id: UUID) -> JournalEntry:
        """
        Create a DRAFT entry.

        Totals are computed from the submitted lines; balance is NOT checked
        until posting.  When no entry_number is given the company's next
        number is assigned.

        Raises:
            InsufficientLinesError, InvalidLineError, InvalidAccountError,
            InvalidFieldError, DuplicateEntryNumberError.
        """

        def _create() -> JournalEntry:
            validate_header_fields(
                entry_number=draft.entry_number,
                reference_number=draft.reference_number,
                description=draft.description,
                notes=draft.notes,
                source_type=draft.source_type,
            )
            self._validate_lines(draft.lines, draft.company_id)

            if draft.entry_number:
                self._numbers.claim(draft.company_id, draft.entry_number)
                entry_number = draft.entry_number
            else:
                entry_number = self._numbers.next_number(draft.company_id)

            total_debit, total_credit = entry_totals(draft.lines)
            next_recurring_date = None
            if draft.is_recurring and draft.recurring_frequency is not None:
                next_recurring_date = next_occurrence(
                    draft.entry_date, draft.recurring_frequency
                )

            entry = JournalEntry(
                company_id=draft.company_id,
                entry_number=entry_number,
                entry_date=draft.entry_date,
                reference_number=draft.reference_number,
                description=draft.description,
                notes=draft.notes,
                status=JournalEntryStatus.DRAFT,
                entry_type=draft.entry_type,
                total_debit=total_debit,
                total_credit=total_credit,
                is_recurring=draft.is_recurring,
                recurring_frequency=draft.recurring_frequency,
                next_recurring_date=next_recurring_date,
                recurring_end_date=draft.recurring_end_date,
                is_auto_reversing=draft.is_auto_reversing,
                reversal_date=draft.reversal_date,
                source_type=draft.source_type,
                source_id=draft.source_id,
                created_by_id=created_by_id,
                lines=build_lines(draft.lines, created_by_id),
            )
            self.session.add(entry)
            self.session.flush()

            logger.info(
                "journal_entry_created",
                extra={
                    "entry_id": str(entry.id),
                    "entry_number": entry.entry_number,
                    "entry_type": entry.entry_type,
                    "line_count": len(draft.lines),
                    "total_debit": total_debit,
                    "total_credit": total_credit,
                },
            )
            return entry

        with LogContext.bind(company_id=draft.company_id, actor_id=created_by_id):
            return self._run("create", _create)

    # -------------------------------------------------------------------------
    # update
    # -------------------------------------------------------------------------

    def update(
        self,
        entry_id: UUID,
        company_id: UUID,
        patch: EntryPatch,
        updated_by_id: UUID,
    ) -> JournalEntry:
        """
        Patch a DRAFT entry.

        Supplying ``lines`` deletes every existing line and inserts the new
        set (no diffing) and recomputes totals.  Changing is_recurring or
        recurring_frequency recomputes next_recurring_date from the entry
        date.

        Raises:
            EntryNotFoundError, EntryNotDraftError, plus the create errors.
        """

        def _update() -> JournalEntry:
            entry = self._load(entry_id, company_id)
            require_draft(entry.id, entry.status, "updated")

            fields = patch.supplied()
            for name in _REQUIRED_PATCH_FIELDS & fields.keys():
                if fields[name] is None:
                    raise InvalidFieldError(name, "cannot be empty")
            validate_header_fields(
                **{
                    name: fields[name]
                    for name in ("entry_number", "reference_number", "description", "notes")
                    if name in fields
                }
            )

            if patch.lines is not UNSET:
                self._validate_lines(patch.lines, company_id)

            new_number = fields.get("entry_number")
            if new_number is not None and new_number != entry.entry_number:
                self._numbers.claim(company_id, new_number, entry_id=entry.id)

            for name, value in fields.items():
                if name == "entry_type":
                    value = EntryType(value)
                elif name == "recurring_frequency" and value is not None:
                    value = RecurringFrequency(value)
                setattr(entry, name, value)

            if patch.lines is not UNSET:
                entry.lines = build_lines(patch.lines, updated_by_id)
                entry.total_debit, entry.total_credit = entry_totals(patch.lines)

            if patch.touches_recurrence:
                if entry.is_recurring and entry.recurring_frequency is not None:
                    entry.next_recurring_date = next_occurrence(
                        entry.entry_date, entry.recurring_frequency
                    )
                else:
                    entry.next_recurring_date = None

            entry.updated_by_id = updated_by_id
            self.session.flush()

            logger.info(
                "journal_entry_updated",
                extra={
                    "fields": sorted(fields),
                    "lines_replaced": patch.lines is not UNSET,
                },
            )
            return entry

        with LogContext.bind(company_id=company_id, actor_id=updated_by_id, entry_id=entry_id):
            return self._run("update", _update)

    # -------------------------------------------------------------------------
    # delete
    # -------------------------------------------------------------------------

    def delete(self, entry_id: UUID, company_id: UUID) -> None:
        """
        Hard-delete a DRAFT entry and its lines.

        Entries whose reversed_from_id points here are left untouched.

        Raises:
            EntryNotFoundError, EntryNotDraftError.
        """

        def _delete() -> None:
            entry = self._load(entry_id, company_id)
            require_draft(entry.id, entry.status, "deleted")
            entry_number = entry.entry_number
            self.session.delete(entry)
            self.session.flush()
            logger.info("journal_entry_deleted", extra={"entry_number": entry_number})

        with LogContext.bind(company_id=company_id, entry_id=entry_id):
            self._run("delete", _delete)

    # -------------------------------------------------------------------------
    # post
    # -------------------------------------------------------------------------

    def post(self, entry_id: UUID, company_id: UUID, posted_by_id: UUID) -> PostResult:
        """
        Post a DRAFT entry: check balance, move balances, spawn drafts.

        Preconditions:
            Entry exists for the company and is DRAFT.
        Postconditions:
            Entry is POSTED with posted_at/posted_by_id set; every line's
            balance_change has been added to its account; an auto-reversal
            draft and/or a recurrence successor exist if configured; the
            entry's next_recurring_date is cleared.

        Raises:
            EntryNotFoundError, EntryNotDraftError, BalanceError.
        """

        def _post() -> PostResult:
            entry = self._load(entry_id, company_id, lock=True)
            require_draft(entry.id, entry.status, "posted")

            total_debit, total_credit = entry_totals(entry.lines)
            assert_balanced(total_debit, total_credit, self._policy.balance_tolerance)
            entry.total_debit = total_debit
            entry.total_credit = total_credit

            # Derived drafts take the counter lock; it must be held before
            # any account row, the same order post_auto_entry uses.
            auto_reversal = self._generator.auto_reversal(entry, posted_by_id)
            recurrence = self._generator.recurrence_successor(entry, posted_by_id)

            self._accounts.apply_lines(entry.lines, entry_id=entry.id)

            entry.status = JournalEntryStatus.POSTED
            entry.posted_at = self._clock.now()
            entry.posted_by_id = posted_by_id
            self.session.flush()

            logger.info(
                "journal_entry_posted",
                extra={
                    "entry_number": entry.entry_number,
                    "total_debit": total_debit,
                    "total_credit": total_credit,
                    "line_count": len(entry.lines),
                    "auto_reversal_id": str(auto_reversal.id) if auto_reversal else None,
                    "recurrence_id": str(recurrence.id) if recurrence else None,
                },
            )
            return PostResult(entry=entry, auto_reversal=auto_reversal, recurrence=recurrence)

        with LogContext.bind(company_id=company_id, actor_id=posted_by_id, entry_id=entry_id):
            return self._run("post", _post)

    # -------------------------------------------------------------------------
    # void
    # -------------------------------------------------------------------------

    def void(
        self,
        entry_id: UUID,
        company_id: UUID,
        voided_by_id: UUID,
        reason: str | None = None,
    ) -> JournalEntry:
        """
        Void a POSTED entry by applying the exact inverse of its lines.

        Raises:
            EntryNotFoundError, EntryAlreadyVoidedError, EntryNotPostedError.
        """

        def _void() -> JournalEntry:
            entry = self._load(entry_id, company_id, lock=True)
            require_voidable(entry.id, entry.status)
            validate_header_fields(void_reason=reason)

            self._accounts.apply_lines(entry.lines, reverse=True, entry_id=entry.id)

            entry.status = JournalEntryStatus.VOID
            entry.voided_at = self._clock.now()
            entry.void_reason = reason
            entry.updated_by_id = voided_by_id
            self.session.flush()

            logger.info(
                "journal_entry_voided",
                extra={"entry_number": entry.entry_number, "reason": reason},
            )
            return entry

        with LogContext.bind(company_id=company_id, actor_id=voided_by_id, entry_id=entry_id):
            return self._run("void", _void)

    # -------------------------------------------------------------------------
    # reverse / duplicate
    # -------------------------------------------------------------------------

    def reverse(self, entry_id: UUID, company_id: UUID, created_by_id: UUID) -> JournalEntry:
        """
        New DRAFT REVERSING entry with debit/credit swapped, dated today.

        The source entry is not modified.

        Raises:
            EntryNotFoundError, EntryNotPostedError.
        """

        def _reverse() -> JournalEntry:
            entry = self._load(entry_id, company_id)
            require_reversible(entry.id, entry.status)
            reversal = self._generator.reversal(entry, created_by_id, self._clock.today())
            self.session.flush()
            logger.info(
                "journal_entry_reversed",
                extra={
                    "entry_number": entry.entry_number,
                    "reversal_id": str(reversal.id),
                    "reversal_number": reversal.entry_number,
                },
            )
            return reversal

        with LogContext.bind(company_id=company_id, actor_id=created_by_id, entry_id=entry_id):
            return self._run("reverse", _reverse)

    def duplicate(self, entry_id: UUID, company_id: UUID, created_by_id: UUID) -> JournalEntry:
        """
        Copy any entry as a new DRAFT dated today.

        Raises:
            EntryNotFoundError.
        """

        def _duplicate() -> JournalEntry:
            entry = self._load(entry_id, company_id)
            clone = self._generator.duplicate(entry, created_by_id, self._clock.today())
            self.session.flush()
            logger.info(
                "journal_entry_duplicated",
                extra={
                    "entry_number": entry.entry_number,
                    "duplicate_id": str(clone.id),
                    "duplicate_number": clone.entry_number,
                },
            )
            return clone

        with LogContext.bind(company_id=company_id, actor_id=created_by_id, entry_id=entry_id):
            return self._run("duplicate", _duplicate)
