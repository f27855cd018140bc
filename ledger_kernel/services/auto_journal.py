"""
AutoJournalService -- the auto-journal-entry bridge.

Responsibility:
    Lets business documents (invoices, bills, credit/debit notes, expenses)
    register their ledger effect as a POSTED journal entry inside their own
    state transition.  Accounts are named either by id or by account type.

Architecture position:
    Kernel > Services.  Called by ledger_modules with the caller's session.
    Never commits or rolls back: the entry and its balance increments
    belong to the document's transaction.

Invariants enforced:
    - The entry is POSTED immediately with the same balance formula as a
      manual post (AccountStore.apply_lines).
    - Either every line resolves and the entry is written, or nothing is
      written at all.

Failure modes:
    - Unresolvable account (default policy): WARNING ``auto_journal_skipped``
      and None is returned; the caller's transaction continues.
    - Unresolvable account (strict policy): LedgerAccountUnresolvedError.
    - Structurally invalid lines: InsufficientLinesError / InvalidLineError.
    - Unbalanced request: BalanceError.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.domain.balance import assert_balanced, entry_totals
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import AutoEntryLine, AutoEntryRequest
from ledger_kernel.domain.enums import EntryType, JournalEntryStatus
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.validation import validate_header_fields, validate_lines
from ledger_kernel.exceptions import LedgerAccountUnresolvedError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.journal import JournalEntry, JournalEntryLine
from ledger_kernel.services.account_store import AccountStore
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.entry_numbering import EntryNumberAllocator

logger = get_logger("services.auto_journal")


class AutoJournalService(BaseService[JournalEntry]):
    """
    Contract:
        ``post_auto_entry`` returns the POSTED entry, or None when an
        account could not be resolved and the policy is lenient.

    Non-goals:
        - No tax or discount math; amounts arrive pre-computed.
        - No retries and no partial entries.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PostingPolicy = DEFAULT_POLICY,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._policy = policy
        self._accounts = AccountStore(session)
        self._numbers = EntryNumberAllocator(session, policy)

    def _resolve(self, line: AutoEntryLine, company_id: UUID) -> UUID | None:
        if line.account_id is not None:
            account = self._accounts.find_active(line.account_id, company_id)
        elif line.account_type:
            account = self._accounts.find_active_by_type(line.account_type, company_id)
        else:
            account = None
        return account.id if account is not None else None

    def post_auto_entry(self, request: AutoEntryRequest) -> JournalEntry | None:
        """
        Build, post and apply a document-driven journal entry.

        Preconditions:
            The request carries at least two lines, each with exactly one
            strictly positive side, and debits equal credits.
        Postconditions:
            On success a POSTED entry with source_type/source_id exists and
            every account balance reflects it; nothing is committed.
        """
        with LogContext.bind(
            company_id=request.company_id,
            actor_id=request.user_id,
            source=f"{request.source_type}:{request.source_id}",
        ):
            validate_lines(request.lines)
            validate_header_fields(
                description=request.description,
                source_type=request.source_type,
            )

            account_ids: list[UUID] = []
            for line in request.lines:
                account_id = self._resolve(line, request.company_id)
                if account_id is None:
                    return self._unresolved(request, line)
                account_ids.append(account_id)

            total_debit, total_credit = entry_totals(request.lines)
            assert_balanced(total_debit, total_credit, self._policy.balance_tolerance)

            entry = JournalEntry(
                company_id=request.company_id,
                entry_number=self._numbers.next_number(request.company_id),
                entry_date=request.entry_date,
                description=request.description,
                status=JournalEntryStatus.POSTED,
                entry_type=EntryType.STANDARD,
                total_debit=total_debit,
                total_credit=total_credit,
                source_type=request.source_type,
                source_id=request.source_id,
                posted_at=self._clock.now(),
                posted_by_id=request.user_id,
                created_by_id=request.user_id,
                lines=[
                    JournalEntryLine(
                        account_id=account_id,
                        debit=line.debit,
                        credit=line.credit,
                        description=line.description,
                        contact_type=line.contact_type,
                        contact_id=line.contact_id,
                        sort_order=index,
                        created_by_id=request.user_id,
                    )
                    for index, (line, account_id) in enumerate(
                        zip(request.lines, account_ids)
                    )
                ],
            )
            self.session.add(entry)
            self.session.flush()

            self._accounts.apply_lines(entry.lines, entry_id=entry.id)
            self.session.flush()

            logger.info(
                "auto_journal_posted",
                extra={
                    "entry_id": str(entry.id),
                    "entry_number": entry.entry_number,
                    "source_type": request.source_type,
                    "source_id": str(request.source_id),
                    "total_debit": total_debit,
                    "line_count": len(entry.lines),
                },
            )
            return entry

    def _unresolved(self, request: AutoEntryRequest, line: AutoEntryLine) -> None:
        if self._policy.strict_account_resolution:
            raise LedgerAccountUnresolvedError(
                request.source_type, str(request.source_id), line.account_ref
            )
        logger.warning(
            "auto_journal_skipped",
            extra={
                "source_type": request.source_type,
                "source_id": str(request.source_id),
                "account_ref": line.account_ref,
                "reason": "account_not_resolved",
            },
        )
        return None
