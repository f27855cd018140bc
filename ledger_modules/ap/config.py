"""
Accounts Payable Configuration Schema.

Account types the AP posting rules resolve through the auto-journal bridge
when a document does not name an account directly.
"""

from dataclasses import dataclass
from uuid import UUID

from ledger_kernel.domain.account_types import AccountType


@dataclass(frozen=True)
class APConfig:
    payable_account_type: str = AccountType.ACCOUNTS_PAYABLE.value
    # Bill lines without an account are booked to operating expenses;
    # debit note lines without an account come back out of COGS.
    bill_expense_account_type: str = AccountType.EXPENSES.value
    debit_note_account_type: str = AccountType.COST_OF_GOODS_SOLD.value
    refund_account_type: str = AccountType.BANK.value
    tax_account_type: str = AccountType.OTHER_CURRENT_LIABILITIES.value
    tax_account_id: UUID | None = None
    source_type_bill: str = "BILL"
    source_type_debit_note: str = "DEBIT_NOTE"
