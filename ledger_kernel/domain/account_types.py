"""
Chart-of-accounts type catalogue.

Fifteen account types in five groups.  Each type carries the normal balance
new accounts of that type get by default and its conventional number range.
An individual account may still override the default (contra accounts such
as Accumulated Depreciation are CREDIT-normal Fixed Assets).

The auto-journal bridge resolves accounts by these type names, so document
posting rules refer to them through the AccountType constants.
"""

from dataclasses import dataclass
from enum import Enum

from ledger_kernel.domain.enums import NormalBalance


class AccountTypeGroup(str, Enum):
    ASSETS = "Assets"
    LIABILITIES = "Liabilities"
    EQUITY = "Equity"
    INCOME = "Income"
    EXPENSES = "Expenses"


class AccountType(str, Enum):
    # Assets
    BANK = "Bank"
    ACCOUNTS_RECEIVABLE = "Accounts Receivable"
    OTHER_CURRENT_ASSETS = "Other Current Assets"
    FIXED_ASSETS = "Fixed Assets"
    OTHER_ASSETS = "Other Assets"
    # Liabilities
    ACCOUNTS_PAYABLE = "Accounts Payable"
    CREDIT_CARD = "Credit Card"
    OTHER_CURRENT_LIABILITIES = "Other Current Liabilities"
    LONG_TERM_LIABILITIES = "Long Term Liabilities"
    # Equity
    EQUITY = "Equity"
    # Income
    INCOME = "Income"
    OTHER_INCOME = "Other Income"
    # Expenses
    COST_OF_GOODS_SOLD = "Cost of Goods Sold"
    EXPENSES = "Expenses"
    OTHER_EXPENSE = "Other Expense"


@dataclass(frozen=True)
class AccountTypeInfo:
    account_type: AccountType
    group: AccountTypeGroup
    normal_balance: NormalBalance
    number_range: tuple[int, int]
    is_balance_sheet: bool
    description: str


def _info(account_type, group, normal_balance, start, end, balance_sheet, description):
    return AccountTypeInfo(
        account_type=account_type,
        group=group,
        normal_balance=normal_balance,
        number_range=(start, end),
        is_balance_sheet=balance_sheet,
        description=description,
    )


_D, _C = NormalBalance.DEBIT, NormalBalance.CREDIT
_G = AccountTypeGroup
_T = AccountType

ACCOUNT_TYPE_INFO: dict[AccountType, AccountTypeInfo] = {
    info.account_type: info
    for info in (
        _info(_T.BANK, _G.ASSETS, _D, 1000, 1099, True, "Bank and cash accounts"),
        _info(_T.ACCOUNTS_RECEIVABLE, _G.ASSETS, _D, 1100, 1199, True,
              "Money owed by customers"),
        _info(_T.OTHER_CURRENT_ASSETS, _G.ASSETS, _D, 1200, 1499, True,
              "Short-term assets like inventory and prepaid expenses"),
        _info(_T.FIXED_ASSETS, _G.ASSETS, _D, 1500, 1799, True,
              "Long-term physical assets like equipment and buildings"),
        _info(_T.OTHER_ASSETS, _G.ASSETS, _D, 1800, 1999, True,
              "Long-term non-physical assets"),
        _info(_T.ACCOUNTS_PAYABLE, _G.LIABILITIES, _C, 2000, 2099, True,
              "Money owed to vendors"),
        _info(_T.CREDIT_CARD, _G.LIABILITIES, _C, 2100, 2199, True,
              "Credit card accounts"),
        _info(_T.OTHER_CURRENT_LIABILITIES, _G.LIABILITIES, _C, 2200, 2499, True,
              "Short-term obligations like taxes and payroll"),
        _info(_T.LONG_TERM_LIABILITIES, _G.LIABILITIES, _C, 2500, 2999, True,
              "Long-term debts like loans and mortgages"),
        _info(_T.EQUITY, _G.EQUITY, _C, 3000, 3999, True,
              "Owner equity, retained earnings, and capital"),
        _info(_T.INCOME, _G.INCOME, _C, 4000, 4499, False,
              "Primary business revenue"),
        _info(_T.OTHER_INCOME, _G.INCOME, _C, 4500, 4999, False,
              "Non-primary income like interest and dividends"),
        _info(_T.COST_OF_GOODS_SOLD, _G.EXPENSES, _D, 5000, 5999, False,
              "Direct costs of products or services sold"),
        _info(_T.EXPENSES, _G.EXPENSES, _D, 6000, 6999, False,
              "Operating expenses"),
        _info(_T.OTHER_EXPENSE, _G.EXPENSES, _D, 7000, 7999, False,
              "Non-operating expenses"),
    )
}


def normal_balance_for(account_type: AccountType | str) -> NormalBalance:
    """Default normal balance of an account type.

    Unknown type names (free-form classifiers) default to DEBIT.
    """
    try:
        return ACCOUNT_TYPE_INFO[AccountType(account_type)].normal_balance
    except ValueError:
        return NormalBalance.DEBIT


def account_types_in_group(group: AccountTypeGroup | str) -> list[AccountType]:
    group = AccountTypeGroup(group)
    return [t for t, info in ACCOUNT_TYPE_INFO.items() if info.group == group]
