"""
Accounts Payable posting rules.

    bill received        Dr expense per line [+ Dr tax] / Cr Accounts Payable
    debit note opened    Dr Accounts Payable / Cr COGS per line [+ Cr tax]
    debit note refunded  Dr refund account (or Bank) / Cr Accounts Payable
    debit note voided    Dr COGS, proportional to the credit still unused /
                         Cr Accounts Payable

Runs inside the caller's session and never commits.  Every method returns
the POSTED entry, or None when the bridge skipped it.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.balance import ZERO, to_decimal
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import AutoEntryLine, AutoEntryRequest
from ledger_kernel.domain.enums import ContactType
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.exceptions import InvalidFieldError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import JournalEntry
from ledger_kernel.services.auto_journal import AutoJournalService
from ledger_modules._posting_helpers import entry_line, prorate
from ledger_modules.ap.config import APConfig
from ledger_modules.ap.models import Bill, DebitNote

logger = get_logger("modules.ap.service")


class APPostingService:
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PostingPolicy = DEFAULT_POLICY,
        config: APConfig | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or APConfig()
        self._bridge = AutoJournalService(session, clock=self._clock, policy=policy)

    def _vendor_line(self, vendor_id: UUID, **fields) -> AutoEntryLine:
        return entry_line(contact_type=ContactType.VENDOR, contact_id=vendor_id, **fields)

    def _payable_line(self, vendor_id: UUID, description: str, **amounts) -> AutoEntryLine:
        return self._vendor_line(
            vendor_id,
            account_type=self._config.payable_account_type,
            description=description,
            **amounts,
        )

    def _post(self, company_id, actor_id, entry_date, description, source_type, source_id, lines):
        entry = self._bridge.post_auto_entry(
            AutoEntryRequest(
                company_id=company_id,
                user_id=actor_id,
                entry_date=entry_date,
                description=description,
                source_type=source_type,
                source_id=source_id,
                lines=lines,
            )
        )
        logger.info(
            "ap_document_posted" if entry is not None else "ap_document_not_posted",
            extra={
                "source_type": source_type,
                "source_id": str(source_id),
                "entry_number": entry.entry_number if entry is not None else None,
            },
        )
        return entry

    # =========================================================================
    # Bills
    # =========================================================================

    def record_bill_received(
        self,
        bill: Bill,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date | None = None,
    ) -> JournalEntry | None:
        debit_lines = [
            self._vendor_line(
                bill.vendor_id,
                debit=line.amount,
                account_id=line.account_id,
                account_type=self._config.bill_expense_account_type,
                description=f"{line.description} - {bill.number}",
            )
            for line in bill.lines
            if line.amount > ZERO
        ]
        if bill.tax_amount > ZERO:
            debit_lines.append(
                self._vendor_line(
                    bill.vendor_id,
                    debit=bill.tax_amount,
                    account_id=self._config.tax_account_id,
                    account_type=self._config.tax_account_type,
                    description=f"Tax - {bill.number}",
                )
            )

        return self._post(
            company_id,
            actor_id,
            entry_date or self._clock.today(),
            f"Bill {bill.number} received",
            self._config.source_type_bill,
            bill.id,
            [
                *debit_lines,
                self._payable_line(bill.vendor_id, f"AP - {bill.number}", credit=bill.total),
            ],
        )

    # =========================================================================
    # Debit notes
    # =========================================================================

    def _debit_note_components(self, debit_note: DebitNote):
        components = [
            (line.amount, line.account_id, self._config.debit_note_account_type, line.description)
            for line in debit_note.lines
            if line.amount > ZERO
        ]
        if debit_note.tax_amount > ZERO:
            components.append(
                (
                    debit_note.tax_amount,
                    self._config.tax_account_id,
                    self._config.tax_account_type,
                    "Tax",
                )
            )
        return components

    def record_debit_note_opened(
        self,
        debit_note: DebitNote,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date | None = None,
    ) -> JournalEntry | None:
        credit_lines = [
            self._vendor_line(
                debit_note.vendor_id,
                credit=amount,
                account_id=account_id,
                account_type=account_type,
                description=f"{description} - {debit_note.number}",
            )
            for amount, account_id, account_type, description in self._debit_note_components(
                debit_note
            )
        ]

        return self._post(
            company_id,
            actor_id,
            entry_date or self._clock.today(),
            f"Debit note {debit_note.number} issued",
            self._config.source_type_debit_note,
            debit_note.id,
            [
                self._payable_line(
                    debit_note.vendor_id,
                    f"AP reduction - {debit_note.number}",
                    debit=debit_note.total,
                ),
                *credit_lines,
            ],
        )

    def record_debit_note_refund(
        self,
        debit_note: DebitNote,
        amount: Decimal,
        company_id: UUID,
        actor_id: UUID,
        refund_date: date | None = None,
        refund_account_id: UUID | None = None,
    ) -> JournalEntry | None:
        """Cash comes back from the vendor: Dr Bank / Cr Accounts Payable."""
        amount = to_decimal(amount)
        if amount <= ZERO:
            raise InvalidFieldError("amount", "refund amount must be positive")

        return self._post(
            company_id,
            actor_id,
            refund_date or self._clock.today(),
            f"Refund for debit note {debit_note.number}",
            self._config.source_type_debit_note,
            debit_note.id,
            [
                entry_line(
                    debit=amount,
                    account_id=refund_account_id or debit_note.refund_account_id,
                    account_type=self._config.refund_account_type,
                    description=f"Bank - refund {debit_note.number}",
                ),
                self._payable_line(
                    debit_note.vendor_id,
                    f"AP - refund {debit_note.number}",
                    credit=amount,
                ),
            ],
        )

    def record_debit_note_void(
        self,
        debit_note: DebitNote,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date | None = None,
    ) -> JournalEntry | None:
        remaining = debit_note.remaining_credit
        if remaining <= ZERO:
            logger.info(
                "ap_debit_note_void_no_remaining_credit",
                extra={"source_id": str(debit_note.id)},
            )
            return None

        components = self._debit_note_components(debit_note)
        shares = prorate([c[0] for c in components], remaining)
        debit_lines = [
            self._vendor_line(
                debit_note.vendor_id,
                debit=share,
                account_id=account_id,
                account_type=account_type,
                description=f"Void reversal - {description}",
            )
            for share, (_, account_id, account_type, description) in zip(shares, components)
            if share > ZERO
        ]

        return self._post(
            company_id,
            actor_id,
            entry_date or self._clock.today(),
            f"Void debit note {debit_note.number}",
            self._config.source_type_debit_note,
            debit_note.id,
            [
                *debit_lines,
                self._payable_line(
                    debit_note.vendor_id,
                    f"AP restored - void {debit_note.number}",
                    credit=remaining,
                ),
            ],
        )
