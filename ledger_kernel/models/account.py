"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the chart of accounts and the running
    balance of each account.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/enums.py only.

Invariants enforced:
    - (company_id, code) is unique.
    - normal_balance is fixed at creation (ORM listener in db/immutability.py).
    - current_balance changes only through AccountStore.apply_lines, which
      issues an atomic ``SET current_balance = current_balance + :delta``.
      Direct ORM assignment after insert is blocked by the same listener.

Audit relevance:
    current_balance is a cache of the sum of POSTED line effects; the
    LedgerSelector can recompute it from journal lines and report drift.
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.domain.enums import NormalBalance

if TYPE_CHECKING:
    from ledger_kernel.models.journal import JournalEntryLine


class Account(TrackedBase):
    """
    Chart of Accounts entry for one company.

    Contract:
        account_type is the classifier the auto-journal bridge resolves by
        (e.g. "Accounts Receivable").  normal_balance decides the sign of
        every line posted to the account.

    Non-goals:
        - No account hierarchy or sub-accounts.
        - No reporting categories beyond account_type.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("company_id", "code", name="uq_account_company_code"),
        Index("idx_account_company_type", "company_id", "account_type", "is_active"),
    )

    company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    # Account number, e.g. "1100"
    code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    account_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    detail_type: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    normal_balance: Mapped[NormalBalance] = mapped_column(
        String(10),
        nullable=False,
    )

    current_balance: Mapped[Decimal] = mapped_column(
        default=Decimal("0"),
        nullable=False,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    journal_lines: Mapped[list["JournalEntryLine"]] = relationship(
        back_populates="account",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == NormalBalance.DEBIT

    @property
    def is_credit_normal(self) -> bool:
        return self.normal_balance == NormalBalance.CREDIT
