"""
Accounts Payable Documents (``ledger_modules.ap.models``).

Frozen value objects carrying the pre-computed amounts of vendor bills and
debit notes.  Pure data, ZERO I/O.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.balance import ZERO, to_decimal
from ledger_modules._posting_helpers import DocumentLine, document_total


@dataclass(frozen=True)
class Bill:
    """A vendor bill at the moment it is received."""

    id: UUID
    number: str
    vendor_id: UUID
    lines: tuple[DocumentLine, ...] = field(default_factory=tuple)
    tax_amount: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "tax_amount", to_decimal(self.tax_amount))

    @property
    def total(self) -> Decimal:
        return document_total(self.lines, self.tax_amount)


@dataclass(frozen=True)
class DebitNote:
    """A debit note raised against a vendor."""

    id: UUID
    number: str
    vendor_id: UUID
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
