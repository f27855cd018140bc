"""
Pure domain layer.

This package contains immutable DTOs and ledger rules with NO dependencies
on:
- ORM (SQLAlchemy)
- Database
- I/O

Time comes in through the injectable Clock.
"""

from ledger_kernel.domain.account_types import (
    ACCOUNT_TYPE_INFO,
    AccountType,
    AccountTypeGroup,
    AccountTypeInfo,
    normal_balance_for,
)
from ledger_kernel.domain.balance import (
    assert_balanced,
    balance_change,
    entry_totals,
    is_balanced,
    reversal_change,
)
from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.dtos import (
    UNSET,
    AutoEntryLine,
    AutoEntryRequest,
    EntryDraft,
    EntryPatch,
    LineSpec,
)
from ledger_kernel.domain.enums import (
    ENTRY_STATUSES,
    ENTRY_TYPES,
    ContactType,
    EntryType,
    JournalEntryStatus,
    NormalBalance,
    RecurringFrequency,
)
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.recurrence import next_occurrence

__all__ = [
    # Catalogues
    "ACCOUNT_TYPE_INFO",
    "ENTRY_STATUSES",
    "ENTRY_TYPES",
    # Enums
    "AccountType",
    "AccountTypeGroup",
    "AccountTypeInfo",
    "ContactType",
    "EntryType",
    "JournalEntryStatus",
    "NormalBalance",
    "RecurringFrequency",
    # DTOs
    "UNSET",
    "AutoEntryLine",
    "AutoEntryRequest",
    "EntryDraft",
    "EntryPatch",
    "LineSpec",
    # Rules
    "DEFAULT_POLICY",
    "PostingPolicy",
    "assert_balanced",
    "balance_change",
    "entry_totals",
    "is_balanced",
    "next_occurrence",
    "normal_balance_for",
    "reversal_change",
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
]
