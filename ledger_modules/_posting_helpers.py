"""
Shared helpers for document posting rules.

Used by ledger_modules/*/service.py to build AutoEntryLines and to split a
remaining amount across a document's lines without losing a cent.

Architecture: Modules layer.  Imports only from ledger_kernel.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from uuid import UUID

from ledger_kernel.domain.balance import ZERO, to_decimal
from ledger_kernel.domain.dtos import AutoEntryLine
from ledger_kernel.domain.enums import ContactType

CENT = Decimal("0.01")


@dataclass(frozen=True)
class DocumentLine:
    """One priced line of a business document.

    ``account_id`` is the line's own income/expense account; when absent
    the module falls back to its configured account type.
    """

    description: str
    amount: Decimal
    account_id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))


def document_total(lines: Sequence[DocumentLine], tax_amount: Decimal = ZERO) -> Decimal:
    return sum((line.amount for line in lines), ZERO) + to_decimal(tax_amount)


def entry_line(
    *,
    debit: Decimal = ZERO,
    credit: Decimal = ZERO,
    account_id: UUID | None = None,
    account_type: str | None = None,
    description: str | None = None,
    contact_type: ContactType | None = None,
    contact_id: UUID | None = None,
) -> AutoEntryLine:
    """AutoEntryLine naming the account directly when an id is known."""
    return AutoEntryLine(
        debit=debit,
        credit=credit,
        account_id=account_id,
        account_type=None if account_id is not None else account_type,
        description=description,
        contact_type=contact_type,
        contact_id=contact_id,
    )


def prorate(amounts: Sequence[Decimal], target: Decimal) -> list[Decimal]:
    """
    Scale ``amounts`` so they sum to ``target``, in whole cents.

    Each share is truncated to the cent, then the leftover cents go one at a
    time to the shares with the largest truncated remainder (later lines win
    ties).  Shares never go negative and always sum to exactly ``target``.
    """
    total = sum(amounts, ZERO)
    if total <= ZERO:
        return [ZERO for _ in amounts]
    exact = [a * target / total for a in amounts]
    shares = [value.quantize(CENT, rounding=ROUND_DOWN) for value in exact]
    leftover_cents = int((target - sum(shares, ZERO)) / CENT)
    by_remainder = sorted(
        range(len(shares)),
        key=lambda i: (exact[i] - shares[i], i),
        reverse=True,
    )
    for index in by_remainder[:leftover_cents]:
        shares[index] += CENT
    return shares
