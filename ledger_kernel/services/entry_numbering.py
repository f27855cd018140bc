"""
EntryNumberAllocator -- per-company journal entry numbers.

Responsibility:
    Produces ``JE-0001``-style numbers from the company's locked sequence
    counter and registers caller-supplied numbers so the two never collide.

Architecture position:
    Kernel > Services.  Used by JournalEntryService, EntryGenerator and
    AutoJournalService.  Flush-only.

Invariants enforced:
    - Numbers are unique per company.  Two concurrent creators are
      serialized on the counter row instead of both reading the same max.
    - A counter created for a company that already has entries starts past
      the highest existing number in the configured format.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.exceptions import DuplicateEntryNumberError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.services.sequence_service import (
    SequenceService,
    journal_entry_sequence,
)

logger = get_logger("services.entry_numbering")


class EntryNumberAllocator:
    def __init__(self, session: Session, policy: PostingPolicy = DEFAULT_POLICY):
        self._session = session
        self._policy = policy
        self._sequences = SequenceService(session)

    def _highest_existing(self, company_id: UUID) -> int:
        numbers = self._session.execute(
            select(JournalEntry.entry_number).where(
                JournalEntry.company_id == company_id,
                JournalEntry.entry_number.startswith(
                    self._policy.entry_number_prefix, autoescape=True
                ),
            )
        ).scalars()
        parsed = (self._policy.parse_entry_number(n) for n in numbers)
        return max((n for n in parsed if n is not None), default=0)

    def next_number(self, company_id: UUID) -> str:
        value = self._sequences.next_value(
            journal_entry_sequence(company_id),
            seed=lambda: self._highest_existing(company_id),
        )
        return self._policy.format_entry_number(value)

    def claim(self, company_id: UUID, entry_number: str, entry_id: UUID | None = None) -> None:
        """
        Reserve a caller-supplied number.

        Raises:
            DuplicateEntryNumberError: another entry of the company uses it.
        """
        query = select(JournalEntry.id).where(
            JournalEntry.company_id == company_id,
            JournalEntry.entry_number == entry_number,
        )
        if entry_id is not None:
            query = query.where(JournalEntry.id != entry_id)
        if self._session.execute(query).first() is not None:
            raise DuplicateEntryNumberError(entry_number, str(company_id))

        value = self._policy.parse_entry_number(entry_number)
        if value is not None:
            self._sequences.advance_to(
                journal_entry_sequence(company_id),
                value,
                seed=lambda: self._highest_existing(company_id),
            )
            logger.debug(
                "entry_number_claimed",
                extra={"company_id": str(company_id), "entry_number": entry_number},
            )
