"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.account_store import AccountStore
from ledger_kernel.services.auto_journal import AutoJournalService
from ledger_kernel.services.entry_generator import EntryGenerator
from ledger_kernel.services.entry_numbering import EntryNumberAllocator
from ledger_kernel.services.journal_entry_service import JournalEntryService, PostResult
from ledger_kernel.services.sequence_service import SequenceService

__all__ = [
    "AccountStore",
    "AutoJournalService",
    "EntryGenerator",
    "EntryNumberAllocator",
    "JournalEntryService",
    "PostResult",
    "SequenceService",
]
