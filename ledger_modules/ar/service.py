"""
Accounts Receivable posting rules.

Thin glue that turns AR document events into auto-journal entries:

    invoice sent          Dr Accounts Receivable / Cr Income per line [+ Cr tax]
    credit note opened    Dr Income per line [+ Dr tax] / Cr Accounts Receivable
    credit note refunded  Dr Accounts Receivable / Cr refund account (or Bank)
    credit note voided    Dr Accounts Receivable / Cr Income, proportional to
                          the credit still unused

Runs inside the caller's session and never commits: the document's status
change and its ledger effect share one transaction.  Every method returns
the POSTED entry, or None when the bridge skipped it.

Usage:
    service = ARPostingService(session, clock=clock)
    entry = service.record_invoice_sent(invoice, company_id, actor_id)
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
from ledger_modules.ar.config import ARConfig
from ledger_modules.ar.models import CreditNote, Invoice

logger = get_logger("modules.ar.service")


class ARPostingService:
    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PostingPolicy = DEFAULT_POLICY,
        config: ARConfig | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or ARConfig()
        self._bridge = AutoJournalService(session, clock=self._clock, policy=policy)

    def _customer_line(self, customer_id: UUID, **amounts) -> AutoEntryLine:
        return entry_line(
            contact_type=ContactType.CUSTOMER,
            contact_id=customer_id,
            **amounts,
        )

    def _tax_line(self, customer_id: UUID, description: str, **amounts) -> AutoEntryLine:
        return self._customer_line(
            customer_id,
            account_id=self._config.tax_account_id,
            account_type=self._config.tax_account_type,
            description=description,
            **amounts,
        )

    def _post(
        self,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date,
        description: str,
        source_type: str,
        source_id: UUID,
        lines: list[AutoEntryLine],
    ) -> JournalEntry | None:
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
            "ar_document_posted" if entry is not None else "ar_document_not_posted",
            extra={
                "source_type": source_type,
                "source_id": str(source_id),
                "entry_number": entry.entry_number if entry is not None else None,
            },
        )
        return entry

    # =========================================================================
    # Invoices
    # =========================================================================

    def record_invoice_sent(
        self,
        invoice: Invoice,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date | None = None,
    ) -> JournalEntry | None:
        """Dr Accounts Receivable (total) / Cr Income per line [+ Cr tax]."""
        credit_lines = [
            self._customer_line(
                invoice.customer_id,
                credit=line.amount,
                account_id=line.account_id,
                account_type=self._config.income_account_type,
                description=f"{line.description} - {invoice.number}",
            )
            for line in invoice.lines
            if line.amount > ZERO
        ]
        if invoice.tax_amount > ZERO:
            credit_lines.append(
                self._tax_line(
                    invoice.customer_id,
                    f"Sales tax - {invoice.number}",
                    credit=invoice.tax_amount,
                )
            )

        return self._post(
            company_id,
            actor_id,
            entry_date or self._clock.today(),
            f"Invoice {invoice.number} sent",
            self._config.source_type_invoice,
            invoice.id,
            [
                self._customer_line(
                    invoice.customer_id,
                    debit=invoice.total,
                    account_type=self._config.receivable_account_type,
                    description=f"AR - {invoice.number}",
                ),
                *credit_lines,
            ],
        )

    # =========================================================================
    # Credit notes
    # =========================================================================

    def record_credit_note_opened(
        self,
        credit_note: CreditNote,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date | None = None,
    ) -> JournalEntry | None:
        """Dr Income per line [+ Dr tax] / Cr Accounts Receivable (total)."""
        debit_lines = [
            self._customer_line(
                credit_note.customer_id,
                debit=line.amount,
                account_id=line.account_id,
                account_type=self._config.income_account_type,
                description=f"{line.description} - {credit_note.number}",
            )
            for line in credit_note.lines
            if line.amount > ZERO
        ]
        if credit_note.tax_amount > ZERO:
            debit_lines.append(
                self._tax_line(
                    credit_note.customer_id,
                    f"Sales tax - {credit_note.number}",
                    debit=credit_note.tax_amount,
                )
            )

        return self._post(
            company_id,
            actor_id,
            entry_date or self._clock.today(),
            f"Credit note {credit_note.number} issued",
            self._config.source_type_credit_note,
            credit_note.id,
            [
                *debit_lines,
                self._customer_line(
                    credit_note.customer_id,
                    credit=credit_note.total,
                    account_type=self._config.receivable_account_type,
                    description=f"AR reduction - {credit_note.number}",
                ),
            ],
        )

    def record_credit_note_refund(
        self,
        credit_note: CreditNote,
        amount: Decimal,
        company_id: UUID,
        actor_id: UUID,
        refund_date: date | None = None,
        refund_account_id: UUID | None = None,
    ) -> JournalEntry | None:
        """Dr Accounts Receivable / Cr refund account (Bank by default)."""
        amount = to_decimal(amount)
        if amount <= ZERO:
            raise InvalidFieldError("amount", "refund amount must be positive")

        return self._post(
            company_id,
            actor_id,
            refund_date or self._clock.today(),
            f"Refund for credit note {credit_note.number}",
            self._config.source_type_credit_note,
            credit_note.id,
            [
                self._customer_line(
                    credit_note.customer_id,
                    debit=amount,
                    account_type=self._config.receivable_account_type,
                    description=f"AR - refund {credit_note.number}",
                ),
                entry_line(
                    credit=amount,
                    account_id=refund_account_id or credit_note.refund_account_id,
                    account_type=self._config.refund_account_type,
                    description=f"Bank - refund {credit_note.number}",
                ),
            ],
        )

    def record_credit_note_void(
        self,
        credit_note: CreditNote,
        company_id: UUID,
        actor_id: UUID,
        entry_date: date | None = None,
    ) -> JournalEntry | None:
        """
        Restore AR for the credit still unused when the note is voided.

        Income lines (and tax) are credited in proportion to the remaining
        credit.  Nothing is posted when the note has been fully used.
        """
        remaining = credit_note.remaining_credit
        if remaining <= ZERO:
            logger.info(
                "ar_credit_note_void_no_remaining_credit",
                extra={"source_id": str(credit_note.id)},
            )
            return None

        components = [
            (line.amount, line.account_id, self._config.income_account_type, line.description)
            for line in credit_note.lines
            if line.amount > ZERO
        ]
        if credit_note.tax_amount > ZERO:
            components.append(
                (
                    credit_note.tax_amount,
                    self._config.tax_account_id,
                    self._config.tax_account_type,
                    "Sales tax",
                )
            )
        shares = prorate([c[0] for c in components], remaining)

        credit_lines = [
            self._customer_line(
                credit_note.customer_id,
                credit=share,
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
            f"Void credit note {credit_note.number}",
            self._config.source_type_credit_note,
            credit_note.id,
            [
                self._customer_line(
                    credit_note.customer_id,
                    debit=remaining,
                    account_type=self._config.receivable_account_type,
                    description=f"AR restored - void {credit_note.number}",
                ),
                *credit_lines,
            ],
        )
