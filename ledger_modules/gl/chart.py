"""
Default chart of accounts created for every new company.

Normal balances follow the account type except for the contra accounts
(Accumulated Depreciation, Owner's Draw, Discounts Given), which name
theirs explicitly.
"""

from dataclasses import dataclass

from ledger_kernel.domain.account_types import AccountType
from ledger_kernel.domain.enums import NormalBalance

_T = AccountType


@dataclass(frozen=True)
class DefaultAccount:
    code: str
    name: str
    account_type: AccountType
    detail_type: str
    description: str
    normal_balance: NormalBalance | None = None


DEFAULT_ACCOUNTS: tuple[DefaultAccount, ...] = (
    # Assets
    DefaultAccount("1000", "Cash on Hand", _T.BANK, "Cash on Hand", "Physical cash and petty cash"),
    DefaultAccount("1010", "Business Checking", _T.BANK, "Checking", "Primary business checking account"),
    DefaultAccount("1020", "Business Savings", _T.BANK, "Savings", "Business savings account"),
    DefaultAccount("1100", "Accounts Receivable", _T.ACCOUNTS_RECEIVABLE, "Accounts Receivable",
                   "Money owed by customers"),
    DefaultAccount("1200", "Inventory Asset", _T.OTHER_CURRENT_ASSETS, "Inventory",
                   "Value of products held for sale"),
    DefaultAccount("1300", "Prepaid Expenses", _T.OTHER_CURRENT_ASSETS, "Prepaid Expenses",
                   "Expenses paid in advance"),
    DefaultAccount("1400", "Undeposited Funds", _T.OTHER_CURRENT_ASSETS, "Undeposited Funds",
                   "Payments received but not yet deposited"),
    DefaultAccount("1500", "Furniture and Equipment", _T.FIXED_ASSETS, "Furniture and Fixtures",
                   "Office furniture and equipment"),
    DefaultAccount("1510", "Accumulated Depreciation", _T.FIXED_ASSETS, "Accumulated Depreciation",
                   "Total depreciation on fixed assets", NormalBalance.CREDIT),
    # Liabilities
    DefaultAccount("2000", "Accounts Payable", _T.ACCOUNTS_PAYABLE, "Accounts Payable",
                   "Money owed to vendors and suppliers"),
    DefaultAccount("2100", "Sales Tax Payable", _T.OTHER_CURRENT_LIABILITIES, "Sales Tax Payable",
                   "Sales tax collected and owed to government"),
    DefaultAccount("2200", "Payroll Liabilities", _T.OTHER_CURRENT_LIABILITIES, "Payroll Tax Payable",
                   "Payroll taxes and withholdings owed"),
    DefaultAccount("2300", "Income Tax Payable", _T.OTHER_CURRENT_LIABILITIES, "Income Tax Payable",
                   "Income taxes owed"),
    # Equity
    DefaultAccount("3000", "Opening Balance Equity", _T.EQUITY, "Opening Balance Equity",
                   "Used to offset opening balance entries"),
    DefaultAccount("3100", "Owner's Equity", _T.EQUITY, "Owner's Equity",
                   "Owner's investment in the business"),
    DefaultAccount("3200", "Owner's Draw", _T.EQUITY, "Partner Distributions",
                   "Owner's withdrawals from the business", NormalBalance.DEBIT),
    DefaultAccount("3300", "Retained Earnings", _T.EQUITY, "Retained Earnings",
                   "Cumulative net income retained in the business"),
    # Income
    DefaultAccount("4000", "Sales Income", _T.INCOME, "Sales of Product Income",
                   "Revenue from product sales"),
    DefaultAccount("4100", "Service Income", _T.INCOME, "Service/Fee Income",
                   "Revenue from services rendered"),
    DefaultAccount("4200", "Discounts Given", _T.INCOME, "Discounts/Refunds Given",
                   "Discounts and refunds given to customers", NormalBalance.DEBIT),
    DefaultAccount("4500", "Interest Income", _T.OTHER_INCOME, "Interest Earned",
                   "Interest earned on bank accounts and investments"),
    DefaultAccount("4600", "Other Income", _T.OTHER_INCOME, "Other Miscellaneous Income",
                   "Miscellaneous non-operating income"),
    # Cost of goods sold
    DefaultAccount("5000", "Cost of Goods Sold", _T.COST_OF_GOODS_SOLD, "Supplies and Materials - COGS",
                   "Direct cost of products sold"),
    DefaultAccount("5100", "Cost of Labor", _T.COST_OF_GOODS_SOLD, "Cost of Labor - COGS",
                   "Direct labor costs for products/services"),
    DefaultAccount("5200", "Shipping and Delivery", _T.COST_OF_GOODS_SOLD, "Freight and Delivery - COGS",
                   "Shipping costs for goods sold"),
    # Expenses
    DefaultAccount("6000", "Advertising & Marketing", _T.EXPENSES, "Advertising/Promotional",
                   "Marketing and advertising expenses"),
    DefaultAccount("6010", "Bank Charges & Fees", _T.EXPENSES, "Bank Charges",
                   "Bank service charges and fees"),
    DefaultAccount("6020", "Insurance", _T.EXPENSES, "Insurance", "Business insurance premiums"),
    DefaultAccount("6030", "Office Supplies", _T.EXPENSES, "Supplies", "Office supplies and consumables"),
    DefaultAccount("6040", "Payroll Expenses", _T.EXPENSES, "Payroll Expenses",
                   "Salaries, wages, and payroll costs"),
    DefaultAccount("6050", "Professional Fees", _T.EXPENSES, "Legal and Professional Fees",
                   "Legal, accounting, and consulting fees"),
    DefaultAccount("6060", "Rent Expense", _T.EXPENSES, "Rent or Lease of Buildings",
                   "Office and building rent"),
    DefaultAccount("6070", "Repairs & Maintenance", _T.EXPENSES, "Repair and Maintenance",
                   "Repairs and maintenance costs"),
    DefaultAccount("6080", "Travel Expense", _T.EXPENSES, "Travel", "Business travel expenses"),
    DefaultAccount("6090", "Utilities", _T.EXPENSES, "Utilities", "Electricity, water, internet, and phone"),
    DefaultAccount("6100", "Meals & Entertainment", _T.EXPENSES, "Entertainment Meals",
                   "Business meals and entertainment"),
    DefaultAccount("6110", "Dues & Subscriptions", _T.EXPENSES, "Dues and Subscriptions",
                   "Memberships and subscriptions"),
    DefaultAccount("6120", "Auto Expense", _T.EXPENSES, "Auto", "Vehicle expenses for business"),
    # Other expense
    DefaultAccount("7000", "Depreciation Expense", _T.OTHER_EXPENSE, "Depreciation",
                   "Periodic depreciation of fixed assets"),
    DefaultAccount("7010", "Penalties & Settlements", _T.OTHER_EXPENSE, "Penalties and Settlements",
                   "Fines, penalties, and legal settlements"),
)
