"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.journal_selector import (
    JournalEntryDTO,
    JournalLineDTO,
    JournalQuery,
    JournalSelector,
    JournalSummary,
    Page,
)
from ledger_kernel.selectors.ledger_selector import AccountBalance, LedgerSelector

__all__ = [
    "AccountBalance",
    "BaseSelector",
    "JournalEntryDTO",
    "JournalLineDTO",
    "JournalQuery",
    "JournalSelector",
    "JournalSummary",
    "LedgerSelector",
    "Page",
]
