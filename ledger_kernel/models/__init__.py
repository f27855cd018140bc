"""ORM models for the ledger kernel."""

from ledger_kernel.domain.enums import (
    ContactType,
    EntryType,
    JournalEntryStatus,
    NormalBalance,
    RecurringFrequency,
)
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalEntryLine
from ledger_kernel.models.sequence import SequenceCounter

__all__ = [
    "Account",
    "ContactType",
    "EntryType",
    "JournalEntry",
    "JournalEntryLine",
    "JournalEntryStatus",
    "NormalBalance",
    "RecurringFrequency",
    "SequenceCounter",
]
