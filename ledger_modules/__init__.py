"""
Ledger Modules.

Thin document posting rules over the ledger kernel.  Each module turns a
business document event (invoice sent, bill received, credit note opened,
expense recorded, ...) into an AutoEntryRequest and hands it to the
auto-journal bridge inside the caller's session.

Modules:
- AR: customer invoices and credit notes
- AP: vendor bills and debit notes
- Expense: expenses paid from a bank or card account
- GL: chart-of-accounts seeding

Amounts arrive pre-computed (tax and discount math belongs to the
documents).  Balance rules live in the kernel.
"""

from ledger_modules import ap, ar, expense, gl

__all__ = ["ap", "ar", "expense", "gl"]
