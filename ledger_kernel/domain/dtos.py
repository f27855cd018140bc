"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable inputs accepted by the lifecycle service and the auto-journal
    bridge: LineSpec / EntryDraft (create), EntryPatch (update),
    AutoEntryLine / AutoEntryRequest (bridge).

Architecture position:
    Kernel > Domain -- pure, zero I/O, no ORM imports.

Invariants enforced:
    - Monetary fields are coerced to Decimal on construction.
    - Line collections are stored as tuples so a draft cannot be mutated
      after it has been validated.

Failure modes:
    - None here.  Structural validation (line count, one positive side,
      negative amounts) lives in domain/validation.py so it can report the
      offending line index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from ledger_kernel.domain.balance import ZERO, to_decimal
from ledger_kernel.domain.enums import ContactType, EntryType, RecurringFrequency


class _Unset:
    """Marker for "field not supplied" in a patch (distinct from None)."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class LineSpec:
    """One journal line as submitted by a caller."""

    account_id: UUID
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str | None = None
    contact_type: ContactType | None = None
    contact_id: UUID | None = None
    sort_order: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "debit", to_decimal(self.debit))
        object.__setattr__(self, "credit", to_decimal(self.credit))
        if self.contact_type is not None:
            object.__setattr__(self, "contact_type", ContactType(self.contact_type))


@dataclass(frozen=True)
class EntryDraft:
    """Everything needed to create a DRAFT journal entry."""

    company_id: UUID
    entry_date: date
    lines: tuple[LineSpec, ...]
    entry_number: str | None = None
    reference_number: str | None = None
    description: str | None = None
    notes: str | None = None
    entry_type: EntryType = EntryType.STANDARD
    is_recurring: bool = False
    recurring_frequency: RecurringFrequency | None = None
    recurring_end_date: date | None = None
    is_auto_reversing: bool = False
    reversal_date: date | None = None
    source_type: str | None = None
    source_id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "entry_type", EntryType(self.entry_type))
        if self.recurring_frequency is not None:
            object.__setattr__(
                self,
                "recurring_frequency",
                RecurringFrequency(self.recurring_frequency),
            )


@dataclass(frozen=True)
class EntryPatch:
    """
    Partial update of a DRAFT entry.

    Fields left as UNSET are not touched.  Passing ``lines`` replaces the
    whole line set.
    """

    entry_number: Any = UNSET
    entry_date: Any = UNSET
    reference_number: Any = UNSET
    description: Any = UNSET
    notes: Any = UNSET
    entry_type: Any = UNSET
    is_recurring: Any = UNSET
    recurring_frequency: Any = UNSET
    recurring_end_date: Any = UNSET
    is_auto_reversing: Any = UNSET
    reversal_date: Any = UNSET
    lines: Any = UNSET

    def __post_init__(self) -> None:
        if self.lines is not UNSET:
            object.__setattr__(self, "lines", tuple(self.lines))
        if self.entry_type is not UNSET:
            object.__setattr__(self, "entry_type", EntryType(self.entry_type))
        if self.recurring_frequency not in (UNSET, None):
            object.__setattr__(
                self,
                "recurring_frequency",
                RecurringFrequency(self.recurring_frequency),
            )

    def supplied(self) -> dict[str, Any]:
        """Header fields explicitly supplied (lines excluded)."""
        return {
            name: getattr(self, name)
            for name in self.__dataclass_fields__
            if name != "lines" and getattr(self, name) is not UNSET
        }

    @property
    def touches_recurrence(self) -> bool:
        return (
            self.is_recurring is not UNSET
            or self.recurring_frequency is not UNSET
        )


@dataclass(frozen=True)
class AutoEntryLine:
    """
    One line of a document-driven entry.

    The account is given either directly (``account_id``) or by its
    classifier (``account_type``, e.g. "Accounts Receivable").
    ``account_id`` wins when both are given.
    """

    debit: Decimal = ZERO
    credit: Decimal = ZERO
    account_id: UUID | None = None
    account_type: str | None = None
    description: str | None = None
    contact_type: ContactType | None = None
    contact_id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "debit", to_decimal(self.debit))
        object.__setattr__(self, "credit", to_decimal(self.credit))
        if self.contact_type is not None:
            object.__setattr__(self, "contact_type", ContactType(self.contact_type))

    @property
    def account_ref(self) -> str:
        """Human-readable reference used in logs and errors."""
        if self.account_id is not None:
            return str(self.account_id)
        return self.account_type or "<none>"


@dataclass(frozen=True)
class AutoEntryRequest:
    """Input of AutoJournalService.post_auto_entry."""

    company_id: UUID
    user_id: UUID
    entry_date: date
    description: str
    source_type: str
    source_id: UUID
    lines: tuple[AutoEntryLine, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
