"""
Structural validation of journal entry input.

Pure checks run before anything touches the session: line count, one
strictly positive side per line, and header field limits.  Account
existence is checked by the service against the store.
"""

from collections.abc import Sequence

from ledger_kernel.domain.balance import ZERO, AmountLine, to_decimal
from ledger_kernel.exceptions import (
    InsufficientLinesError,
    InvalidFieldError,
    InvalidLineError,
)

MIN_LINES = 2

FIELD_MAX_LENGTHS: dict[str, int] = {
    "entry_number": 50,
    "reference_number": 100,
    "description": 2000,
    "notes": 4000,
    "source_type": 50,
    "void_reason": 500,
}

LINE_DESCRIPTION_MAX_LENGTH = 1000


def validate_lines(lines: Sequence[AmountLine]) -> None:
    """
    Raise a ValidationError subclass for the first structural problem.

    Raises:
        InsufficientLinesError: fewer than two lines.
        InvalidLineError: non-finite or negative amount, both sides positive,
            or both zero.
    """
    if len(lines) < MIN_LINES:
        raise InsufficientLinesError(len(lines))

    for index, line in enumerate(lines):
        try:
            debit = to_decimal(line.debit)
            credit = to_decimal(line.credit)
        except InvalidFieldError:
            raise InvalidLineError(index, "amounts must be finite numbers") from None
        if debit < ZERO or credit < ZERO:
            raise InvalidLineError(index, "amounts cannot be negative")
        if debit > ZERO and credit > ZERO:
            raise InvalidLineError(
                index, "cannot have both debit and credit amounts"
            )
        if debit == ZERO and credit == ZERO:
            raise InvalidLineError(
                index, "must have either a debit or a credit amount"
            )
        description = getattr(line, "description", None)
        if description is not None and len(description) > LINE_DESCRIPTION_MAX_LENGTH:
            raise InvalidLineError(
                index,
                f"description cannot exceed {LINE_DESCRIPTION_MAX_LENGTH} characters",
            )


def validate_header_fields(**fields: str | None) -> None:
    """Check free-text header fields against their column limits."""
    for name, value in fields.items():
        limit = FIELD_MAX_LENGTHS.get(name)
        if value is not None and limit is not None and len(value) > limit:
            raise InvalidFieldError(name, f"cannot exceed {limit} characters")
