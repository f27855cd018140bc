"""Expense Configuration Schema."""

from dataclasses import dataclass
from uuid import UUID

from ledger_kernel.domain.account_types import AccountType


@dataclass(frozen=True)
class ExpenseConfig:
    expense_account_type: str = AccountType.EXPENSES.value
    payment_account_type: str = AccountType.BANK.value
    tax_account_type: str = AccountType.OTHER_CURRENT_LIABILITIES.value
    tax_account_id: UUID | None = None
    source_type: str = "EXPENSE"
