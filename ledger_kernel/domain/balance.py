"""
Balance application algorithm -- the normal-balance calculus.

Responsibility:
    Pure functions that turn journal lines into signed balance deltas.
    Manual posting, voiding and the auto-journal bridge all go through
    ``balance_change``; there is exactly one formula in the system.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - A DEBIT-normal account grows by (debit - credit); a CREDIT-normal
      account grows by (credit - debit).
    - Voiding applies ``balance_change`` with debit and credit swapped,
      which is the exact arithmetic inverse of posting.
    - An entry is balanced when |total_debit - total_credit| <= tolerance.
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Protocol
from uuid import UUID

from ledger_kernel.domain.enums import NormalBalance
from ledger_kernel.exceptions import BalanceError, InvalidFieldError

ZERO = Decimal("0")
DEFAULT_BALANCE_TOLERANCE = Decimal("0.001")


class AmountLine(Protocol):
    """Anything carrying a debit and a credit amount."""

    debit: Decimal
    credit: Decimal


class AccountAmountLine(AmountLine, Protocol):
    account_id: UUID


def to_decimal(value: Decimal | int | str | float | None) -> Decimal:
    """
    Coerce a monetary input to Decimal (floats go through ``str``).

    Raises:
        InvalidFieldError: the value is not a number, or is NaN/Infinity.
    """
    if value is None:
        return ZERO
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(str(value))
        else:
            result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidFieldError("amount", f"{value!r} is not a number") from None
    if not result.is_finite():
        raise InvalidFieldError("amount", f"{value!r} is not a finite number")
    return result


def balance_change(
    debit: Decimal,
    credit: Decimal,
    normal_balance: NormalBalance | str,
) -> Decimal:
    """Signed change a line makes to an account with the given normal balance."""
    if NormalBalance(normal_balance) == NormalBalance.DEBIT:
        return debit - credit
    return credit - debit


def reversal_change(
    debit: Decimal,
    credit: Decimal,
    normal_balance: NormalBalance | str,
) -> Decimal:
    """Signed change that undoes ``balance_change(debit, credit, normal_balance)``."""
    return balance_change(credit, debit, normal_balance)


def entry_totals(lines: Iterable[AmountLine]) -> tuple[Decimal, Decimal]:
    """Return (total_debit, total_credit) over the given lines."""
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        total_debit += to_decimal(line.debit)
        total_credit += to_decimal(line.credit)
    return total_debit, total_credit


def is_balanced(
    total_debit: Decimal,
    total_credit: Decimal,
    tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE,
) -> bool:
    return abs(total_debit - total_credit) <= tolerance


def assert_balanced(
    total_debit: Decimal,
    total_credit: Decimal,
    tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE,
) -> None:
    """
    Raise BalanceError unless the totals agree within tolerance.

    Raises:
        BalanceError: |total_debit - total_credit| > tolerance.
    """
    if not is_balanced(total_debit, total_credit, tolerance):
        raise BalanceError(total_debit, total_credit, tolerance)


def account_deltas(
    lines: Iterable[AccountAmountLine],
    normal_balances: dict[UUID, NormalBalance | str],
    *,
    reverse: bool = False,
) -> dict[UUID, Decimal]:
    """
    Net signed delta per account for a set of lines.

    Summing per account before writing gives the same final balances as
    applying line by line, and lets the store lock accounts in a fixed order.

    Preconditions:
        Every line.account_id has an entry in ``normal_balances``.
    """
    change = reversal_change if reverse else balance_change
    deltas: dict[UUID, Decimal] = {}
    for line in lines:
        delta = change(
            to_decimal(line.debit),
            to_decimal(line.credit),
            normal_balances[line.account_id],
        )
        deltas[line.account_id] = deltas.get(line.account_id, ZERO) + delta
    return deltas
