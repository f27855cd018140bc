"""
Accounts Receivable Documents (``ledger_modules.ar.models``).

Frozen value objects carrying the pre-computed amounts of customer invoices
and credit notes.  Pure data, ZERO I/O.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.balance import ZERO, to_decimal
from ledger_modules._posting_helpers import DocumentLine, document_total


@dataclass(frozen=True)
class Invoice:
    """A customer invoice at the moment it is sent."""

    id: UUID
    number: str
    customer_id: UUID
    lines: tuple[DocumentLine, ...] = field(default_factory=tuple)
    tax_amount: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "tax_amount", to_decimal(self.tax_amount))

    @property
    def total(self) -> Decimal:
        return document_total(self.lines, self.tax_amount)


@dataclass(frozen=True)
class CreditNote:
    """
    A credit note issued to a customer.

    remaining_credit = total - amount_applied - amount_refunded.
    """

    id: UUID
    number: str
    customer_id: UUID
    lines: tuple[DocumentLine, ...] = field(default_factory=tuple)
    tax_amount: Decimal = ZERO
    amount_applied: Decimal = ZERO
    amount_refunded: Decimal = ZERO
    refund_account_id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        for name in ("tax_amount", "amount_applied", "amount_refunded"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))

    @property
    def total(self) -> Decimal:
        return document_total(self.lines, self.tax_amount)

    @property
    def remaining_credit(self) -> Decimal:
        return max(self.total - self.amount_applied - self.amount_refunded, ZERO)
