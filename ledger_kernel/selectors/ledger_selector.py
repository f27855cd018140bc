"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Read-only balance integrity queries.  Recomputes account
    balances from POSTED journal lines and compares them with the stored
    running balance on each account.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/ and selectors/base.py.

Invariants enforced:
    - The recomputation uses domain.balance.balance_change, the same formula
      posting and voiding use, so a healthy ledger has zero drift.
    - VOID entries contribute nothing; DRAFT entries contribute nothing.

Failure modes:
    - Returns zero / an empty list when there is nothing posted.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger_kernel.domain.balance import ZERO, balance_change, to_decimal
from ledger_kernel.domain.enums import JournalEntryStatus, NormalBalance
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import JournalEntry, JournalEntryLine
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AccountBalance:
    """Stored and recomputed balance of one account."""

    account_id: UUID
    code: str
    name: str
    account_type: str
    normal_balance: NormalBalance
    stored_balance: Decimal
    computed_balance: Decimal

    @property
    def drift(self) -> Decimal:
        return self.stored_balance - self.computed_balance


class LedgerSelector(BaseSelector[JournalEntryLine]):
    """
    Selector for account balance queries.

    Contract:
        ``computed_balance`` is the sum of balance_change over every line of
        every POSTED entry that references the account.

    Non-goals:
        - No trial balance or financial statements.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _posted_totals(self, company_id: UUID | None = None, account_id: UUID | None = None):
        query = (
            select(
                JournalEntryLine.account_id,
                func.coalesce(func.sum(JournalEntryLine.debit), 0),
                func.coalesce(func.sum(JournalEntryLine.credit), 0),
            )
            .join(JournalEntry, JournalEntryLine.journal_entry_id == JournalEntry.id)
            .where(JournalEntry.status == JournalEntryStatus.POSTED)
            .group_by(JournalEntryLine.account_id)
        )
        if company_id is not None:
            query = query.where(JournalEntry.company_id == company_id)
        if account_id is not None:
            query = query.where(JournalEntryLine.account_id == account_id)
        return {
            row[0]: (to_decimal(row[1]), to_decimal(row[2]))
            for row in self.session.execute(query).all()
        }

    def recompute_balance(self, account_id: UUID) -> Decimal:
        """Balance of the account derived from POSTED lines only."""
        normal_balance = self.session.execute(
            select(Account.normal_balance).where(Account.id == account_id)
        ).scalar_one()
        debit, credit = self._posted_totals(account_id=account_id).get(
            account_id, (ZERO, ZERO)
        )
        return balance_change(debit, credit, normal_balance)

    def account_balances(self, company_id: UUID) -> list[AccountBalance]:
        """Stored vs recomputed balance for every account, ordered by code."""
        totals = self._posted_totals(company_id=company_id)
        accounts = self.session.execute(
            select(Account)
            .where(Account.company_id == company_id)
            .order_by(Account.code)
            .execution_options(populate_existing=True)
        ).scalars().all()

        balances = []
        for account in accounts:
            debit, credit = totals.get(account.id, (ZERO, ZERO))
            balances.append(
                AccountBalance(
                    account_id=account.id,
                    code=account.code,
                    name=account.name,
                    account_type=account.account_type,
                    normal_balance=NormalBalance(account.normal_balance),
                    stored_balance=to_decimal(account.current_balance),
                    computed_balance=balance_change(debit, credit, account.normal_balance),
                )
            )
        return balances

    def find_balance_drift(
        self,
        company_id: UUID,
        tolerance: Decimal = ZERO,
    ) -> list[AccountBalance]:
        """Accounts whose stored balance disagrees with the journal."""
        return [
            balance
            for balance in self.account_balances(company_id)
            if abs(balance.drift) > tolerance
        ]
