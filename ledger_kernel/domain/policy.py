"""
PostingPolicy -- the tunable knobs of the posting engine.

The kernel never reads configuration files.  ledger_config builds a
PostingPolicy from settings and hands it to the services; tests construct
one directly.
"""

import re
from dataclasses import dataclass
from decimal import Decimal

from ledger_kernel.domain.balance import DEFAULT_BALANCE_TOLERANCE


@dataclass(frozen=True)
class PostingPolicy:
    """
    Guarantees:
        - ``format_entry_number(7)`` with the defaults yields ``"JE-0007"``.
        - ``parse_entry_number`` is the inverse for numbers in this format
          and returns None for anything else.
    """

    balance_tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE
    entry_number_prefix: str = "JE-"
    entry_number_width: int = 4
    strict_account_resolution: bool = False

    def __post_init__(self) -> None:
        if self.balance_tolerance < 0:
            raise ValueError("balance_tolerance cannot be negative")
        if self.entry_number_width < 1:
            raise ValueError("entry_number_width must be at least 1")
        if not self.entry_number_prefix:
            raise ValueError("entry_number_prefix cannot be empty")

    @property
    def _number_pattern(self) -> re.Pattern[str]:
        return re.compile(rf"^{re.escape(self.entry_number_prefix)}(\d+)$")

    def format_entry_number(self, value: int) -> str:
        return f"{self.entry_number_prefix}{value:0{self.entry_number_width}d}"

    def parse_entry_number(self, entry_number: str | None) -> int | None:
        if not entry_number:
            return None
        match = self._number_pattern.match(entry_number)
        return int(match.group(1)) if match else None


DEFAULT_POLICY = PostingPolicy()
