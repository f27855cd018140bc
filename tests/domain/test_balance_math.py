"""
Tests for the pure balance arithmetic (ledger_kernel/domain/balance.py).

Tests cover:
- balance_change sign per normal balance
- reversal_change undoes balance_change
- entry_totals and the tolerance check
- account_deltas aggregation per account
"""

from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from ledger_kernel.domain.balance import (
    DEFAULT_BALANCE_TOLERANCE,
    ZERO,
    account_deltas,
    assert_balanced,
    balance_change,
    entry_totals,
    is_balanced,
    reversal_change,
    to_decimal,
)
from ledger_kernel.domain.enums import NormalBalance
from ledger_kernel.exceptions import BalanceError


def _line(debit="0", credit="0", account_id=None):
    return SimpleNamespace(
        debit=Decimal(debit), credit=Decimal(credit), account_id=account_id
    )


class TestBalanceChange:
    def test_debit_normal_account_increases_on_debit(self):
        assert balance_change(Decimal("100"), ZERO, NormalBalance.DEBIT) == Decimal("100")

    def test_debit_normal_account_decreases_on_credit(self):
        assert balance_change(ZERO, Decimal("40"), NormalBalance.DEBIT) == Decimal("-40")

    def test_credit_normal_account_increases_on_credit(self):
        assert balance_change(ZERO, Decimal("100"), NormalBalance.CREDIT) == Decimal("100")

    def test_credit_normal_account_decreases_on_debit(self):
        assert balance_change(Decimal("25"), ZERO, NormalBalance.CREDIT) == Decimal("-25")

    def test_accepts_plain_string_normal_balance(self):
        assert balance_change(Decimal("10"), ZERO, "CREDIT") == Decimal("-10")

    def test_unknown_normal_balance_rejected(self):
        with pytest.raises(ValueError):
            balance_change(Decimal("10"), ZERO, "SIDEWAYS")

    @pytest.mark.parametrize("normal", [NormalBalance.DEBIT, NormalBalance.CREDIT])
    def test_reversal_is_exact_negation(self, normal):
        debit, credit = Decimal("12.345"), ZERO
        assert reversal_change(debit, credit, normal) == -balance_change(debit, credit, normal)


class TestTotals:
    def test_entry_totals_sums_each_side(self):
        lines = [_line(debit="60"), _line(debit="40"), _line(credit="100")]
        assert entry_totals(lines) == (Decimal("100"), Decimal("100"))

    def test_entry_totals_of_nothing_is_zero(self):
        assert entry_totals([]) == (ZERO, ZERO)

    def test_difference_within_tolerance_is_balanced(self):
        assert is_balanced(Decimal("100.000"), Decimal("100.001"))

    def test_difference_above_tolerance_is_not_balanced(self):
        assert not is_balanced(Decimal("100.000"), Decimal("100.002"))

    def test_assert_balanced_reports_totals(self):
        with pytest.raises(BalanceError) as exc_info:
            assert_balanced(Decimal("50"), Decimal("40"))
        err = exc_info.value
        assert err.total_debit == Decimal("50")
        assert err.total_credit == Decimal("40")
        assert err.difference == Decimal("10")
        assert err.tolerance == DEFAULT_BALANCE_TOLERANCE
        assert err.code == "UNBALANCED_ENTRY"

    def test_zero_tolerance_requires_exact_match(self):
        with pytest.raises(BalanceError):
            assert_balanced(Decimal("1.0001"), Decimal("1"), tolerance=ZERO)


class TestToDecimal:
    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_none_is_zero(self):
        assert to_decimal(None) == ZERO

    def test_int_and_str(self):
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("2.50") == Decimal("2.50")


class TestAccountDeltas:
    def test_lines_on_the_same_account_are_netted(self):
        cash, income = uuid4(), uuid4()
        lines = [
            _line(debit="100", account_id=cash),
            _line(credit="30", account_id=cash),
            _line(credit="70", account_id=income),
        ]
        normals = {cash: NormalBalance.DEBIT, income: NormalBalance.CREDIT}

        deltas = account_deltas(lines, normals)

        assert deltas == {cash: Decimal("70"), income: Decimal("70")}

    def test_reverse_flips_every_delta(self):
        cash, income = uuid4(), uuid4()
        lines = [_line(debit="100", account_id=cash), _line(credit="100", account_id=income)]
        normals = {cash: NormalBalance.DEBIT, income: NormalBalance.CREDIT}

        forward = account_deltas(lines, normals)
        backward = account_deltas(lines, normals, reverse=True)

        assert {k: -v for k, v in forward.items()} == backward
