"""
Accounts Receivable Configuration Schema.

Account types the AR posting rules resolve through the auto-journal bridge
when a document does not name an account directly.
"""

from dataclasses import dataclass
from uuid import UUID

from ledger_kernel.domain.account_types import AccountType


@dataclass(frozen=True)
class ARConfig:
    """
    Override at instantiation with company-specific values:

        config = ARConfig(tax_account_id=sales_tax_payable.id)
    """

    receivable_account_type: str = AccountType.ACCOUNTS_RECEIVABLE.value
    income_account_type: str = AccountType.INCOME.value
    refund_account_type: str = AccountType.BANK.value
    tax_account_type: str = AccountType.OTHER_CURRENT_LIABILITIES.value
    tax_account_id: UUID | None = None
    source_type_invoice: str = "INVOICE"
    source_type_credit_note: str = "CREDIT_NOTE"
