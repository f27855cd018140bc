"""
AccountStore -- the Account Ledger Store.

Responsibility:
    Account lookup for the posting engine and the one write path for
    running balances.  Lifecycle posting, voiding and the auto-journal
    bridge all call ``apply_lines``; nothing else changes current_balance.

Architecture position:
    Kernel > Services.  Flush-only; never commits.

Invariants enforced:
    - Balance mutation is a single SQL statement per account,
      ``UPDATE accounts SET current_balance = current_balance + :delta``.
      Concurrent posts touching the same account both land; there is no
      read-modify-write in Python.
    - Accounts are updated in ascending id order so two transactions
      touching the same accounts cannot deadlock on each other.
    - Every delta comes from domain.balance (one formula for everything).

Failure modes:
    - InvalidAccountError if an account is missing, inactive or belongs to
      another company, or vanishes between validation and increment.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from ledger_kernel.domain.account_types import normal_balance_for
from ledger_kernel.domain.balance import AccountAmountLine, account_deltas
from ledger_kernel.domain.enums import NormalBalance
from ledger_kernel.exceptions import InvalidAccountError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.services.base import BaseService

logger = get_logger("services.account_store")


class AccountStore(BaseService[Account]):
    """
    Contract:
        ``find_active*`` return None rather than raising;
        ``require_active_accounts`` raises for the first bad id.

    Non-goals:
        - No chart-of-accounts editing beyond ``create_account`` (see
          ledger_modules.gl for seeding).
    """

    def __init__(self, session: Session):
        super().__init__(session)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def find_active(self, account_id: UUID, company_id: UUID) -> Account | None:
        """Active account with this id owned by the company."""
        return self.session.execute(
            select(Account).where(
                Account.id == account_id,
                Account.company_id == company_id,
                Account.is_active.is_(True),
            )
        ).scalar_one_or_none()

    def find_active_by_type(self, account_type: str, company_id: UUID) -> Account | None:
        """
        Active account of the given type for the company.

        When several accounts share the type, the one with the lowest code
        wins, so resolution is deterministic.
        """
        return self.session.execute(
            select(Account)
            .where(
                Account.account_type == account_type,
                Account.company_id == company_id,
                Account.is_active.is_(True),
            )
            .order_by(Account.code, Account.id)
            .limit(1)
        ).scalar_one_or_none()

    def require_active_accounts(
        self,
        account_ids: Iterable[UUID],
        company_id: UUID,
    ) -> dict[UUID, Account]:
        """
        Load every referenced account, raising on the first unusable one.

        Raises:
            InvalidAccountError: missing, inactive or foreign account.
        """
        wanted = set(account_ids)
        rows = self.session.execute(
            select(Account).where(Account.id.in_(wanted))
        ).scalars().all()
        found = {account.id: account for account in rows}

        for account_id in sorted(wanted, key=str):
            account = found.get(account_id)
            if account is None:
                raise InvalidAccountError(str(account_id), "account not found")
            if account.company_id != company_id:
                raise InvalidAccountError(
                    str(account_id), "account belongs to another company"
                )
            if not account.is_active:
                raise InvalidAccountError(str(account_id), "account is inactive")
        return found

    def normal_balances(self, account_ids: Iterable[UUID]) -> dict[UUID, NormalBalance]:
        rows = self.session.execute(
            select(Account.id, Account.normal_balance).where(
                Account.id.in_(set(account_ids))
            )
        ).all()
        return {row.id: NormalBalance(row.normal_balance) for row in rows}

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def create_account(
        self,
        company_id: UUID,
        code: str,
        name: str,
        account_type: str,
        created_by_id: UUID,
        normal_balance: NormalBalance | str | None = None,
        detail_type: str | None = None,
        description: str | None = None,
        is_active: bool = True,
    ) -> Account:
        """Insert an account; normal balance defaults from its type."""
        account = Account(
            company_id=company_id,
            code=code,
            name=name,
            account_type=account_type,
            detail_type=detail_type,
            description=description,
            normal_balance=NormalBalance(normal_balance or normal_balance_for(account_type)),
            current_balance=Decimal("0"),
            is_active=is_active,
            created_by_id=created_by_id,
        )
        self.session.add(account)
        self.session.flush()
        logger.info(
            "account_created",
            extra={
                "account_id": str(account.id),
                "code": code,
                "account_type": account_type,
                "normal_balance": account.normal_balance,
            },
        )
        return account

    def increment_balance(self, account_id: UUID, delta: Decimal) -> None:
        """
        Atomically add ``delta`` to the account's current_balance.

        Raises:
            InvalidAccountError: no row with this id.
        """
        result = self.session.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(current_balance=Account.current_balance + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidAccountError(str(account_id), "account not found")

        # The in-memory copy is stale now; reload on next access.
        cached = self.session.identity_map.get(identity_key(Account, account_id))
        if cached is not None:
            self.session.expire(cached, ["current_balance"])

    def apply_lines(
        self,
        lines: Sequence[AccountAmountLine],
        *,
        reverse: bool = False,
        entry_id: UUID | None = None,
    ) -> dict[UUID, Decimal]:
        """
        Apply the balance effect of ``lines`` (or its inverse).

        Postconditions:
            Each referenced account's current_balance has moved by the sum of
            ``balance_change`` over its lines (``reversal_change`` when
            ``reverse``).  Returns the per-account deltas applied.
        """
        normal_balances = self.normal_balances(line.account_id for line in lines)
        missing = {line.account_id for line in lines} - normal_balances.keys()
        if missing:
            raise InvalidAccountError(str(sorted(missing, key=str)[0]), "account not found")

        deltas = account_deltas(lines, normal_balances, reverse=reverse)
        for account_id in sorted(deltas, key=str):
            delta = deltas[account_id]
            if delta == 0:
                continue
            self.increment_balance(account_id, delta)
            logger.debug(
                "balance_applied",
                extra={
                    "entry_id": str(entry_id) if entry_id else None,
                    "account_id": str(account_id),
                    "delta": delta,
                    "reverse": reverse,
                },
            )
        return deltas
