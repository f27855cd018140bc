"""
Ledger Kernel - double-entry posting engine

A transactional general-ledger core with:
- Journal entry lifecycle (draft, posted, void)
- Running account balances under the debit/credit normal-balance calculus
- Reversal, auto-reversal and recurring entry generation
- An auto-journal bridge for business documents
"""

__version__ = "0.1.0"
