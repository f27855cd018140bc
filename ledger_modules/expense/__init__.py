"""Expense Module -- posting rule for paid expenses."""

from ledger_modules.expense.config import ExpenseConfig
from ledger_modules.expense.models import Expense
from ledger_modules.expense.service import ExpensePostingService

__all__ = ["Expense", "ExpenseConfig", "ExpensePostingService"]
