"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only query access to journal entries and their lines:
    single-entry lookup, filtered and paginated listing, and the status
    summary.  Converts ORM models to frozen DTOs.
Architecture position: Kernel > Selectors.  May import from models/,
    domain/enums.py and selectors/base.py.

Invariants enforced:
    - Read-only: no mutations performed on any queried data.
    - Every query is scoped to one company.
    - Lines are sorted by sort_order; listings break sort ties by id so
      pagination is stable.

Failure modes:
    - ``get`` returns None when the entry does not exist for the company.
    - InvalidFieldError from JournalQuery for an unknown sort field or an
      out-of-range page/limit.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from ledger_kernel.domain.enums import (
    ContactType,
    EntryType,
    JournalEntryStatus,
    RecurringFrequency,
)
from ledger_kernel.exceptions import InvalidFieldError
from ledger_kernel.models.journal import JournalEntry, JournalEntryLine
from ledger_kernel.selectors.base import BaseSelector

SORT_FIELDS = {
    "entry_date": JournalEntry.entry_date,
    "total_debit": JournalEntry.total_debit,
    "entry_number": JournalEntry.entry_number,
    "created_at": JournalEntry.created_at,
}

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class JournalLineDTO:
    """Data transfer object for a journal line."""

    id: UUID
    account_id: UUID
    account_code: str | None
    account_name: str | None
    debit: Decimal
    credit: Decimal
    description: str | None
    contact_type: ContactType | None
    contact_id: UUID | None
    sort_order: int


@dataclass(frozen=True)
class JournalEntryDTO:
    """Data transfer object for a journal entry."""

    id: UUID
    company_id: UUID
    entry_number: str
    entry_date: date
    reference_number: str | None
    description: str | None
    notes: str | None
    status: JournalEntryStatus
    entry_type: EntryType
    total_debit: Decimal
    total_credit: Decimal
    is_recurring: bool
    recurring_frequency: RecurringFrequency | None
    next_recurring_date: date | None
    recurring_end_date: date | None
    is_auto_reversing: bool
    reversal_date: date | None
    reversed_from_id: UUID | None
    source_type: str | None
    source_id: UUID | None
    posted_at: datetime | None
    posted_by_id: UUID | None
    voided_at: datetime | None
    void_reason: str | None
    created_at: datetime | None
    lines: tuple[JournalLineDTO, ...]

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class JournalQuery:
    """
    Filters, sort and pagination for ``JournalSelector.list_entries``.

    ``amount_min``/``amount_max`` filter on total_debit.  ``search`` matches
    description, entry number, reference number and notes, case-insensitive.
    """

    status: JournalEntryStatus | None = None
    entry_type: EntryType | None = None
    account_id: UUID | None = None
    date_from: date | None = None
    date_to: date | None = None
    amount_min: Decimal | None = None
    amount_max: Decimal | None = None
    search: str | None = None
    sort_by: str = "entry_date"
    sort_order: str = "desc"
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.sort_by not in SORT_FIELDS:
            raise InvalidFieldError(
                "sort_by", f"must be one of: {', '.join(SORT_FIELDS)}"
            )
        if self.sort_order not in ("asc", "desc"):
            raise InvalidFieldError("sort_order", "must be asc or desc")
        if self.page < 1:
            raise InvalidFieldError("page", "must be at least 1")
        if self.limit < 1:
            raise InvalidFieldError("limit", "must be at least 1")


@dataclass(frozen=True)
class Page:
    items: tuple[JournalEntryDTO, ...]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


@dataclass(frozen=True)
class JournalSummary:
    """Entry counts per status and the total debit of posted entries."""

    draft_count: int
    posted_count: int
    posted_total_debit: Decimal
    void_count: int
    total_entries: int
    by_status: dict[str, int] = field(default_factory=dict)


class JournalSelector(BaseSelector[JournalEntry]):
    """
    Selector for journal entry queries.

    Guarantees:
        - Read-only: no mutations are performed.
        - Lines and their accounts are eager loaded (no N+1 queries).

    Non-goals:
        - Does NOT compute account balances; use LedgerSelector for that.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def _to_dto(self, entry: JournalEntry) -> JournalEntryDTO:
        lines = tuple(
            JournalLineDTO(
                id=line.id,
                account_id=line.account_id,
                account_code=line.account.code if line.account else None,
                account_name=line.account.name if line.account else None,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
                contact_type=ContactType(line.contact_type) if line.contact_type else None,
                contact_id=line.contact_id,
                sort_order=line.sort_order,
            )
            for line in sorted(entry.lines, key=lambda x: x.sort_order)
        )
        return JournalEntryDTO(
            id=entry.id,
            company_id=entry.company_id,
            entry_number=entry.entry_number,
            entry_date=entry.entry_date,
            reference_number=entry.reference_number,
            description=entry.description,
            notes=entry.notes,
            status=JournalEntryStatus(entry.status),
            entry_type=EntryType(entry.entry_type),
            total_debit=entry.total_debit,
            total_credit=entry.total_credit,
            is_recurring=entry.is_recurring,
            recurring_frequency=(
                RecurringFrequency(entry.recurring_frequency)
                if entry.recurring_frequency
                else None
            ),
            next_recurring_date=entry.next_recurring_date,
            recurring_end_date=entry.recurring_end_date,
            is_auto_reversing=entry.is_auto_reversing,
            reversal_date=entry.reversal_date,
            reversed_from_id=entry.reversed_from_id,
            source_type=entry.source_type,
            source_id=entry.source_id,
            posted_at=entry.posted_at,
            posted_by_id=entry.posted_by_id,
            voided_at=entry.voided_at,
            void_reason=entry.void_reason,
            created_at=entry.created_at,
            lines=lines,
        )

    def _with_lines(self):
        return select(JournalEntry).options(
            selectinload(JournalEntry.lines).selectinload(JournalEntryLine.account)
        )

    def get(self, entry_id: UUID, company_id: UUID) -> JournalEntryDTO | None:
        """Entry with its lines, or None if it does not exist for the company."""
        entry = self.session.execute(
            self._with_lines().where(
                JournalEntry.id == entry_id,
                JournalEntry.company_id == company_id,
            )
        ).scalar_one_or_none()
        if entry is None:
            return None
        return self._to_dto(entry)

    def get_by_number(self, entry_number: str, company_id: UUID) -> JournalEntryDTO | None:
        entry = self.session.execute(
            self._with_lines().where(
                JournalEntry.entry_number == entry_number,
                JournalEntry.company_id == company_id,
            )
        ).scalar_one_or_none()
        if entry is None:
            return None
        return self._to_dto(entry)

    def get_by_source(self, source_type: str, source_id: UUID) -> list[JournalEntryDTO]:
        """Entries produced by a business document, oldest number first."""
        entries = self.session.execute(
            self._with_lines()
            .where(
                JournalEntry.source_type == source_type,
                JournalEntry.source_id == source_id,
            )
            .order_by(JournalEntry.created_at, JournalEntry.entry_number)
        ).scalars().all()
        return [self._to_dto(e) for e in entries]

    def get_reversals_of(self, entry_id: UUID) -> list[JournalEntryDTO]:
        """Entries whose reversed_from_id points at ``entry_id``."""
        entries = self.session.execute(
            self._with_lines()
            .where(JournalEntry.reversed_from_id == entry_id)
            .order_by(JournalEntry.entry_number)
        ).scalars().all()
        return [self._to_dto(e) for e in entries]

    def _filters(self, company_id: UUID, query: JournalQuery) -> list:
        conditions = [JournalEntry.company_id == company_id]
        if query.status is not None:
            conditions.append(JournalEntry.status == JournalEntryStatus(query.status))
        if query.entry_type is not None:
            conditions.append(JournalEntry.entry_type == EntryType(query.entry_type))
        if query.date_from is not None:
            conditions.append(JournalEntry.entry_date >= query.date_from)
        if query.date_to is not None:
            conditions.append(JournalEntry.entry_date <= query.date_to)
        if query.amount_min is not None:
            conditions.append(JournalEntry.total_debit >= query.amount_min)
        if query.amount_max is not None:
            conditions.append(JournalEntry.total_debit <= query.amount_max)
        if query.account_id is not None:
            conditions.append(
                JournalEntry.id.in_(
                    select(JournalEntryLine.journal_entry_id).where(
                        JournalEntryLine.account_id == query.account_id
                    )
                )
            )
        if query.search:
            pattern = f"%{query.search}%"
            conditions.append(
                or_(
                    JournalEntry.description.ilike(pattern),
                    JournalEntry.entry_number.ilike(pattern),
                    JournalEntry.reference_number.ilike(pattern),
                    JournalEntry.notes.ilike(pattern),
                )
            )
        return conditions

    def list_entries(self, company_id: UUID, query: JournalQuery | None = None) -> Page:
        """
        Filtered, sorted page of entries for a company.

        Defaults: newest entry_date first, 20 per page.
        """
        query = query or JournalQuery()
        conditions = self._filters(company_id, query)

        total = self.session.execute(
            select(func.count()).select_from(JournalEntry).where(*conditions)
        ).scalar_one()

        column = SORT_FIELDS[query.sort_by]
        order = column.asc() if query.sort_order == "asc" else column.desc()
        entries = self.session.execute(
            self._with_lines()
            .where(*conditions)
            .order_by(order, JournalEntry.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        ).scalars().all()

        return Page(
            items=tuple(self._to_dto(e) for e in entries),
            total=total,
            page=query.page,
            limit=query.limit,
        )

    def summary(self, company_id: UUID) -> JournalSummary:
        """Counts per status plus the summed total_debit of POSTED entries."""
        rows = self.session.execute(
            select(
                JournalEntry.status,
                func.count(JournalEntry.id),
                func.coalesce(func.sum(JournalEntry.total_debit), 0),
            )
            .where(JournalEntry.company_id == company_id)
            .group_by(JournalEntry.status)
        ).all()

        counts = {status.value: 0 for status in JournalEntryStatus}
        posted_total = Decimal("0")
        for status, count, total_debit in rows:
            key = JournalEntryStatus(status).value
            counts[key] = count
            if key == JournalEntryStatus.POSTED.value:
                posted_total = Decimal(str(total_debit))

        return JournalSummary(
            draft_count=counts[JournalEntryStatus.DRAFT.value],
            posted_count=counts[JournalEntryStatus.POSTED.value],
            posted_total_debit=posted_total,
            void_count=counts[JournalEntryStatus.VOID.value],
            total_entries=sum(counts.values()),
            by_status=counts,
        )
