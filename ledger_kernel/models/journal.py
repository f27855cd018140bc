"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journal entries and their lines -- the
    source of truth every account balance is derived from.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/enums.py only.

Invariants enforced:
    - entry_number is unique per company (uq_journal_company_number).
    - Lines are owned by their entry (cascade delete-orphan); deleting a
      DRAFT entry deletes its lines.
    - reversed_from_id and source_id are weak references with no foreign key:
      deleting the referenced row never cascades and never blocks.
    - Posted and voided entries are frozen except for the POSTED -> VOID
      transition and posting-time recurrence bookkeeping (ORM listeners in
      db/immutability.py).

Failure modes:
    - IntegrityError on duplicate (company_id, entry_number); the service
      checks first and raises DuplicateEntryNumberError.
    - ImmutabilityViolationError on forbidden UPDATE/DELETE.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.domain.enums import (
    ContactType,
    EntryType,
    JournalEntryStatus,
    RecurringFrequency,
)

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account


class JournalEntry(TrackedBase):
    """
    Journal entry header -- the atomic unit of double-entry accounting.

    Contract:
        total_debit/total_credit are recomputed from the lines on create,
        update and post.  The balance check runs once, at posting.

    Non-goals:
        - The model does not enforce balance or status rules itself; the
          JournalEntryService does, and the immutability listeners back it up.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("company_id", "entry_number", name="uq_journal_company_number"),
        Index("idx_journal_company_status", "company_id", "status"),
        Index("idx_journal_entry_date", "company_id", "entry_date"),
        Index("idx_journal_source", "source_type", "source_id"),
        Index("idx_journal_reversed_from", "reversed_from_id"),
    )

    company_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    entry_number: Mapped[str] = mapped_column(String(50), nullable=False)

    entry_date: Mapped[date] = mapped_column(Date, nullable=False)

    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[JournalEntryStatus] = mapped_column(
        String(10),
        default=JournalEntryStatus.DRAFT,
        nullable=False,
    )

    entry_type: Mapped[EntryType] = mapped_column(
        String(20),
        default=EntryType.STANDARD,
        nullable=False,
    )

    total_debit: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    total_credit: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    # Recurrence
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    recurring_frequency: Mapped[RecurringFrequency | None] = mapped_column(
        String(20),
        nullable=True,
    )

    next_recurring_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    recurring_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Auto-reversal
    is_auto_reversing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    reversal_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Weak back-reference to the entry this one reverses (no FK)
    reversed_from_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    # Weak reference to the originating business document (no FK)
    source_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    source_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    # Posting / voiding bookkeeping
    posted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    posted_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    voided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    void_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    lines: Mapped[list["JournalEntryLine"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="JournalEntryLine.sort_order",
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.entry_number} status={self.status}>"

    @property
    def is_draft(self) -> bool:
        return self.status == JournalEntryStatus.DRAFT

    @property
    def is_posted(self) -> bool:
        return self.status == JournalEntryStatus.POSTED

    @property
    def is_void(self) -> bool:
        return self.status == JournalEntryStatus.VOID

    @property
    def is_balanced(self) -> bool:
        """Exact equality of the stored totals (read-side convenience)."""
        return self.total_debit == self.total_credit


class JournalEntryLine(TrackedBase):
    """
    One debit or credit line of a journal entry.

    Contract:
        Exactly one of debit/credit is strictly positive and the other is
        zero.  sort_order is the display and application order and is
        preserved by every clone (reversal, recurrence, duplicate).
    """

    __tablename__ = "journal_entry_lines"

    __table_args__ = (
        Index("idx_line_entry", "journal_entry_id"),
        Index("idx_line_account", "account_id"),
    )

    journal_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    debit: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    credit: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    contact_type: Mapped[ContactType | None] = mapped_column(String(20), nullable=True)

    contact_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")

    account: Mapped["Account"] = relationship(back_populates="journal_lines")

    def __repr__(self) -> str:
        return (
            f"<JournalEntryLine {self.account_id} "
            f"Dr {self.debit} Cr {self.credit}>"
        )
