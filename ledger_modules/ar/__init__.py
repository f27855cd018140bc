"""
Accounts Receivable Module.

Posting rules for customer invoices and credit notes.
"""

from ledger_modules.ar.config import ARConfig
from ledger_modules.ar.models import CreditNote, Invoice
from ledger_modules.ar.service import ARPostingService

__all__ = [
    "ARConfig",
    "ARPostingService",
    "CreditNote",
    "Invoice",
]
