"""
Enumerations shared by the ledger domain, models and selectors.

Every enum is a ``str`` Enum so values round-trip through String columns and
JSON logs unchanged.  Stored values are the upper-case keys used by the rest
of the ERP (``"POSTED"``, ``"MONTHLY"``, ...).
"""

from enum import Enum


class NormalBalance(str, Enum):
    """Side on which an account's balance naturally increases."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class JournalEntryStatus(str, Enum):
    """Lifecycle status of a journal entry.

    Transitions are one-way: DRAFT -> POSTED -> VOID.
    """

    DRAFT = "DRAFT"
    POSTED = "POSTED"
    VOID = "VOID"


class EntryType(str, Enum):
    """Classifier of a journal entry.  Does not change posting behaviour."""

    STANDARD = "STANDARD"
    ADJUSTING = "ADJUSTING"
    CLOSING = "CLOSING"
    REVERSING = "REVERSING"
    RECURRING = "RECURRING"


class RecurringFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ContactType(str, Enum):
    """Counterparty kind a journal line may be tagged with."""

    CUSTOMER = "CUSTOMER"
    VENDOR = "VENDOR"


ENTRY_TYPES: tuple[dict[str, str], ...] = (
    {
        "key": EntryType.STANDARD.value,
        "label": "Standard",
        "description": "Regular manual journal entry",
    },
    {
        "key": EntryType.ADJUSTING.value,
        "label": "Adjusting",
        "description": "End-of-period adjustment (accruals, deferrals, depreciation)",
    },
    {
        "key": EntryType.CLOSING.value,
        "label": "Closing",
        "description": "Year-end closing entry (close revenue/expense to retained earnings)",
    },
    {
        "key": EntryType.REVERSING.value,
        "label": "Reversing",
        "description": "Auto-generated reversal of a previous entry",
    },
    {
        "key": EntryType.RECURRING.value,
        "label": "Recurring",
        "description": "Template-based recurring journal entry",
    },
)

ENTRY_STATUSES: tuple[dict[str, str], ...] = (
    {"key": JournalEntryStatus.DRAFT.value, "label": "Draft"},
    {"key": JournalEntryStatus.POSTED.value, "label": "Posted"},
    {"key": JournalEntryStatus.VOID.value, "label": "Void"},
)

RECURRING_FREQUENCY_INFO: dict[RecurringFrequency, dict[str, str]] = {
    RecurringFrequency.DAILY: {"label": "Daily", "description": "Recurs every day"},
    RecurringFrequency.WEEKLY: {"label": "Weekly", "description": "Recurs every week"},
    RecurringFrequency.BIWEEKLY: {
        "label": "Biweekly",
        "description": "Recurs every two weeks",
    },
    RecurringFrequency.MONTHLY: {"label": "Monthly", "description": "Recurs every month"},
    RecurringFrequency.QUARTERLY: {
        "label": "Quarterly",
        "description": "Recurs every three months",
    },
    RecurringFrequency.YEARLY: {"label": "Yearly", "description": "Recurs every year"},
}
