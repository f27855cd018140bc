"""General Ledger Module -- default chart of accounts."""

from ledger_modules.gl.chart import DEFAULT_ACCOUNTS, DefaultAccount
from ledger_modules.gl.service import seed_default_accounts

__all__ = ["DEFAULT_ACCOUNTS", "DefaultAccount", "seed_default_accounts"]
