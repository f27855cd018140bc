"""
Expense posting rule.

    expense recorded   Dr expense account per line [+ Dr tax] /
                       Cr payment account (Bank by default)

Runs inside the caller's session and never commits.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.balance import ZERO
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import AutoEntryRequest
from ledger_kernel.domain.enums import ContactType
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.services.auto_journal import AutoJournalService
from ledger_modules._posting_helpers import entry_line
from ledger_modules.expense.config import ExpenseConfig
from ledger_modules.expense.models import Expense

logger = get_logger("modules.expense.service")


class ExpensePostingService:
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PostingPolicy = DEFAULT_POLICY,
        config: ExpenseConfig | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or ExpenseConfig()
        self._bridge = AutoJournalService(session, clock=self._clock, policy=policy)

    def record_expense(
        self,
        expense: Expense,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date | None = None,
    ) -> JournalEntry | None:
        contact = (
            {"contact_type": ContactType.VENDOR, "contact_id": expense.vendor_id}
            if expense.vendor_id is not None
            else {}
        )
        debit_lines = [
            entry_line(
                debit=line.amount,
                account_id=line.account_id,
                account_type=self._config.expense_account_type,
                description=f"{line.description} - {expense.number}",
                **contact,
            )
            for line in expense.lines
            if line.amount > ZERO
        ]
        if expense.tax_amount > ZERO:
            debit_lines.append(
                entry_line(
                    debit=expense.tax_amount,
                    account_id=self._config.tax_account_id,
                    account_type=self._config.tax_account_type,
                    description=f"Tax - {expense.number}",
                    **contact,
                )
            )

        entry = self._bridge.post_auto_entry(
            AutoEntryRequest(
                company_id=company_id,
                user_id=actor_id,
                entry_date=entry_date or self._clock.today(),
                description=f"Expense {expense.number}",
                source_type=self._config.source_type,
                source_id=expense.id,
                lines=[
                    *debit_lines,
                    entry_line(
                        credit=expense.total,
                        account_id=expense.payment_account_id,
                        account_type=self._config.payment_account_type,
                        description=f"Paid - {expense.number}",
                    ),
                ],
            )
        )
        logger.info(
            "expense_posted" if entry is not None else "expense_not_posted",
            extra={
                "source_id": str(expense.id),
                "entry_number": entry.entry_number if entry is not None else None,
            },
        )
        return entry
