"""
Expense Documents (``ledger_modules.expense.models``).

An expense paid immediately from a bank, card or cash account.  Itemized
expenses carry one DocumentLine per expense account.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.balance import ZERO, to_decimal
from ledger_modules._posting_helpers import DocumentLine, document_total


@dataclass(frozen=True)
class Expense:
    id: UUID
    number: str
    lines: tuple[DocumentLine, ...] = field(default_factory=tuple)
    tax_amount: Decimal = ZERO
    payment_account_id: UUID | None = None
    vendor_id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "tax_amount", to_decimal(self.tax_amount))

    @property
    def total(self) -> Decimal:
        return document_total(self.lines, self.tax_amount)
