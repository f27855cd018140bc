"""
Accounts Payable Module.

Posting rules for vendor bills and debit notes.
"""

from ledger_modules.ap.config import APConfig
from ledger_modules.ap.models import Bill, DebitNote
from ledger_modules.ap.service import APPostingService

__all__ = [
    "APConfig",
    "APPostingService",
    "Bill",
    "DebitNote",
]
