"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Hands out strictly increasing numbers per named sequence.  Journal entry
    numbers use one sequence per company (``journal_entry:<company_id>``).
    A dedicated counter row locked with ``SELECT ... FOR UPDATE`` makes
    allocation safe under concurrent posting.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.  Called by
    JournalEntryService and AutoJournalService when they assign numbers.

Invariants enforced:
    - The scan-for-max-then-add-one pattern is never used for allocation.
      It is used exactly once per sequence, to seed a new counter row from
      numbers already present (legacy or imported data).
    - Transactional: an allocated value is only visible once the caller's
      transaction commits; rollback returns it.

Failure modes:
    - IntegrityError: concurrent creation of the same counter row (handled
      by savepoint rollback and retry).
"""

from collections.abc import Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


def journal_entry_sequence(company_id: UUID) -> str:
    """Name of the per-company journal entry number sequence."""
    return f"journal_entry:{company_id}"


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Contract:
        Accepts a sequence name and returns the next strictly increasing
        integer.  The increment commits with the caller's transaction.

    Guarantees:
        - ``SELECT ... FOR UPDATE`` serializes concurrent allocations for
          the same sequence (PostgreSQL; SQLite serializes writers anyway).
        - ``advance_to`` never moves a counter backwards.

    Non-goals:
        - Does NOT call ``session.commit()``.
        - Gap-free numbering across rolled-back transactions is not
          guaranteed by PostgreSQL row locks alone and is not promised.
    """

    def __init__(self, session: Session):
        self._session = session

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _create_counter(self, sequence_name: str, value: int) -> SequenceCounter | None:
        """Insert a counter row inside a savepoint; None if another writer won."""
        savepoint = self._session.begin_nested()
        try:
            counter = SequenceCounter(name=sequence_name, current_value=value)
            self._session.add(counter)
            self._session.flush()
            savepoint.commit()
            return counter
        except IntegrityError:
            logger.debug(
                "sequence_counter_race_retry",
                extra={"sequence_name": sequence_name},
            )
            savepoint.rollback()
            return None

    def next_value(
        self,
        sequence_name: str,
        seed: Callable[[], int] | None = None,
    ) -> int:
        """
        Get the next value for a named sequence.

        Preconditions:
            - The caller is inside an active transaction.
        Postconditions:
            - Returns an integer > 0, strictly greater than any value
              previously returned for this name in committed transactions.
            - The counter row stays locked until the transaction ends.

        Args:
            sequence_name: Name of the sequence.
            seed: Called once when the counter does not exist yet; returns
                the highest value already in use (0 when nothing is).
        """
        counter = self._locked_counter(sequence_name)

        if counter is None:
            start = (seed() if seed is not None else 0) + 1
            counter = self._create_counter(sequence_name, start)
            if counter is not None:
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": start},
                )
                return start
            counter = self._locked_counter(sequence_name)
            assert counter is not None

        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def advance_to(
        self,
        sequence_name: str,
        value: int,
        seed: Callable[[], int] | None = None,
    ) -> None:
        """
        Make sure the next allocation is greater than ``value``.

        Used when a caller supplies its own number so generated numbers do
        not collide with it later.  ``seed`` has the same meaning as in
        ``next_value``.
        """
        counter = self._locked_counter(sequence_name)
        if counter is None:
            start = max(value, seed() if seed is not None else 0)
            if self._create_counter(sequence_name, start) is not None:
                return
            counter = self._locked_counter(sequence_name)
            assert counter is not None
        if value > counter.current_value:
            counter.current_value = value
            self._session.flush()
            logger.debug(
                "sequence_advanced",
                extra={"sequence_name": sequence_name, "value": value},
            )

    def current_value(self, sequence_name: str) -> int | None:
        """Current value of a sequence without incrementing, or None."""
        counter = self._session.execute(
            select(SequenceCounter).where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()
        return counter.current_value if counter else None
