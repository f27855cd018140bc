"""
EntryGenerator -- builds derived DRAFT entries from an existing entry.

Responsibility:
    Constructs the four kinds of derived drafts: auto-reversal and
    recurrence successor (both spawned inside post), manual reversal, and
    duplicate.  Every derived entry is a DRAFT and has no balance effect
    until someone posts it.

Architecture position:
    Kernel > Services.  Called only by JournalEntryService.  Flush-only.

Invariants enforced:
    - Line order (sort_order) is preserved by every clone.
    - Reversals swap debit/credit per line and swap the header totals.
    - A recurrence successor is created only while next_recurring_date is
      on or before recurring_end_date (or there is no end date), and the
      source's next_recurring_date is cleared either way, so posting the
      same template twice cannot spawn two successors.
"""

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.enums import EntryType, JournalEntryStatus
from ledger_kernel.domain.recurrence import next_occurrence
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry, JournalEntryLine
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.entry_numbering import EntryNumberAllocator

logger = get_logger("services.entry_generator")


def _clone_lines(source: JournalEntry, actor_id: UUID, *, swap: bool) -> list[JournalEntryLine]:
    return [
        JournalEntryLine(
            account_id=line.account_id,
            debit=line.credit if swap else line.debit,
            credit=line.debit if swap else line.credit,
            description=line.description,
            contact_type=line.contact_type,
            contact_id=line.contact_id,
            sort_order=line.sort_order,
            created_by_id=actor_id,
        )
        for line in sorted(source.lines, key=lambda l: l.sort_order)
    ]


class EntryGenerator(BaseService[JournalEntry]):
    def __init__(self, session: Session, numbers: EntryNumberAllocator):
        super().__init__(session)
        self._numbers = numbers

    def _new_draft(self, source: JournalEntry, actor_id: UUID, **fields) -> JournalEntry:
        entry = JournalEntry(
            company_id=source.company_id,
            entry_number=self._numbers.next_number(source.company_id),
            status=JournalEntryStatus.DRAFT,
            created_by_id=actor_id,
            **fields,
        )
        self.session.add(entry)
        return entry

    def auto_reversal(self, source: JournalEntry, actor_id: UUID) -> JournalEntry | None:
        """Reversing draft dated ``source.reversal_date``, if configured."""
        if not source.is_auto_reversing or source.reversal_date is None:
            return None

        reversal = self._new_draft(
            source,
            actor_id,
            entry_date=source.reversal_date,
            description=f"Auto-reversal of {source.entry_number}",
            entry_type=EntryType.REVERSING,
            total_debit=source.total_credit,
            total_credit=source.total_debit,
            reversed_from_id=source.id,
            lines=_clone_lines(source, actor_id, swap=True),
        )
        logger.info(
            "auto_reversal_generated",
            extra={
                "source_entry_id": str(source.id),
                "entry_number": reversal.entry_number,
                "entry_date": reversal.entry_date,
            },
        )
        return reversal

    def recurrence_successor(self, source: JournalEntry, actor_id: UUID) -> JournalEntry | None:
        """
        Next occurrence of a recurring entry; clears the source's pointer.

        The successor is dated ``source.next_recurring_date`` and carries the
        frequency and end date forward with its own next date pre-computed.
        """
        next_date: date | None = source.next_recurring_date
        if not source.is_recurring or source.recurring_frequency is None or next_date is None:
            return None

        successor = None
        end_date = source.recurring_end_date
        if end_date is None or next_date <= end_date:
            successor = self._new_draft(
                source,
                actor_id,
                entry_date=next_date,
                reference_number=source.reference_number,
                description=source.description,
                notes=source.notes,
                entry_type=source.entry_type,
                total_debit=source.total_debit,
                total_credit=source.total_credit,
                is_recurring=True,
                recurring_frequency=source.recurring_frequency,
                next_recurring_date=next_occurrence(next_date, source.recurring_frequency),
                recurring_end_date=end_date,
                lines=_clone_lines(source, actor_id, swap=False),
            )
            logger.info(
                "recurring_entry_generated",
                extra={
                    "source_entry_id": str(source.id),
                    "entry_number": successor.entry_number,
                    "entry_date": next_date,
                    "next_recurring_date": successor.next_recurring_date,
                },
            )
        else:
            logger.info(
                "recurring_schedule_ended",
                extra={
                    "source_entry_id": str(source.id),
                    "next_recurring_date": next_date,
                    "recurring_end_date": end_date,
                },
            )

        source.next_recurring_date = None
        return successor

    def reversal(self, source: JournalEntry, actor_id: UUID, today: date) -> JournalEntry:
        """Manual reversal draft of a POSTED entry, dated today."""
        return self._new_draft(
            source,
            actor_id,
            entry_date=today,
            description=f"Reversal of {source.entry_number}",
            entry_type=EntryType.REVERSING,
            total_debit=source.total_credit,
            total_credit=source.total_debit,
            reversed_from_id=source.id,
            lines=_clone_lines(source, actor_id, swap=True),
        )

    def duplicate(self, source: JournalEntry, actor_id: UUID, today: date) -> JournalEntry:
        """Verbatim copy as a fresh DRAFT; REVERSING becomes STANDARD."""
        entry_type = EntryType(source.entry_type)
        if entry_type == EntryType.REVERSING:
            entry_type = EntryType.STANDARD
        return self._new_draft(
            source,
            actor_id,
            entry_date=today,
            reference_number=source.reference_number,
            description=source.description,
            notes=source.notes,
            entry_type=entry_type,
            total_debit=source.total_debit,
            total_credit=source.total_credit,
            lines=_clone_lines(source, actor_id, swap=False),
        )
