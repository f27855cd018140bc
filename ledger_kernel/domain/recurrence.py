"""
Recurrence date arithmetic.

``next_occurrence`` advances a date by one period of a recurring frequency.
Day-based frequencies add a fixed number of days.  Month and year based
frequencies use ``dateutil.relativedelta``, which clamps to the last valid
day of the target month:

    2024-01-31 + MONTHLY   -> 2024-02-29
    2023-01-31 + MONTHLY   -> 2023-02-28
    2024-02-29 + YEARLY    -> 2025-02-28
    2024-11-30 + QUARTERLY -> 2025-02-28

Clamping does not remember the original day of month, so chaining
2024-01-31 -> 2024-02-29 -> 2024-03-29.
"""

from datetime import date

from dateutil.relativedelta import relativedelta

from ledger_kernel.domain.enums import RecurringFrequency

_STEPS: dict[RecurringFrequency, relativedelta] = {
    RecurringFrequency.DAILY: relativedelta(days=1),
    RecurringFrequency.WEEKLY: relativedelta(days=7),
    RecurringFrequency.BIWEEKLY: relativedelta(days=14),
    RecurringFrequency.MONTHLY: relativedelta(months=1),
    RecurringFrequency.QUARTERLY: relativedelta(months=3),
    RecurringFrequency.YEARLY: relativedelta(years=1),
}


def next_occurrence(current: date, frequency: RecurringFrequency | str) -> date:
    """Return the date one ``frequency`` period after ``current``.

    Raises:
        ValueError: ``frequency`` is not a RecurringFrequency value.
    """
    return current + _STEPS[RecurringFrequency(frequency)]


def occurrences(
    start: date,
    frequency: RecurringFrequency | str,
    end: date | None = None,
    limit: int = 12,
) -> list[date]:
    """
    Upcoming occurrence dates after ``start``, stopping past ``end``.

    Mirrors how posting walks a recurring schedule one step at a time, so
    the month-end clamping compounds exactly as it does for generated drafts.
    """
    dates: list[date] = []
    current = start
    while len(dates) < limit:
        current = next_occurrence(current, frequency)
        if end is not None and current > end:
            break
        dates.append(current)
    return dates
