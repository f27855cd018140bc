"""
Tests for JournalEntryService lifecycle operations.

Tests cover:
- create: numbering, totals, account checks, no balance effect
- update: header patch, line replacement, recurrence recompute, DRAFT only
- delete: DRAFT only, lines removed
- post / void: balance effect and state guards
- reverse / duplicate: derived drafts that never touch balances
- company scoping of every lookup
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from ledger_kernel.domain.dtos import EntryDraft, EntryPatch, LineSpec
from ledger_kernel.domain.enums import EntryType, JournalEntryStatus, RecurringFrequency
from ledger_kernel.exceptions import (
    DuplicateEntryNumberError,
    EntryAlreadyVoidedError,
    EntryNotDraftError,
    EntryNotFoundError,
    EntryNotPostedError,
    InsufficientLinesError,
    InvalidAccountError,
    InvalidFieldError,
    InvalidLineError,
    ValidationError,
)
from ledger_kernel.models.journal import JournalEntry, JournalEntryLine
from ledger_kernel.services.account_store import AccountStore


class TestCreate:
    def test_creates_draft_with_generated_number(
        self, journal_service, make_draft, chart, test_actor_id, balance_of,
    ):
        entry = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)

        assert entry.status == JournalEntryStatus.DRAFT
        assert entry.entry_number == "JE-0001"
        assert entry.total_debit == Decimal("100.00")
        assert entry.total_credit == Decimal("100.00")
        assert entry.created_by_id == test_actor_id
        assert len(entry.lines) == 2
        assert balance_of(chart["1100"]) == Decimal("0")

    def test_numbers_increase_per_company(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        numbers = [
            journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id).entry_number
            for _ in range(3)
        ]
        assert numbers == ["JE-0001", "JE-0002", "JE-0003"]

    def test_unbalanced_draft_is_accepted(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        entry = journal_service.create(
            make_draft(chart["1100"], chart["4000"], amount=Decimal("50"), credit_amount=Decimal("40")),
            test_actor_id,
        )
        assert entry.total_debit == Decimal("50")
        assert entry.total_credit == Decimal("40")
        assert not entry.is_balanced

    def test_line_order_follows_input(
        self, journal_service, chart, company_id, test_actor_id,
    ):
        draft = EntryDraft(
            company_id=company_id,
            entry_date=date(2024, 1, 15),
            lines=[
                LineSpec(account_id=chart["6060"].id, debit=Decimal("70")),
                LineSpec(account_id=chart["6030"].id, debit=Decimal("30")),
                LineSpec(account_id=chart["1010"].id, credit=Decimal("100")),
            ],
        )
        entry = journal_service.create(draft, test_actor_id)

        assert [line.sort_order for line in entry.lines] == [0, 1, 2]
        assert [line.account_id for line in entry.lines] == [
            chart["6060"].id, chart["6030"].id, chart["1010"].id,
        ]

    def test_manual_number_is_kept_and_advances_counter(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        manual = journal_service.create(
            make_draft(chart["1100"], chart["4000"], entry_number="JE-0010"), test_actor_id
        )
        generated = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)

        assert manual.entry_number == "JE-0010"
        assert generated.entry_number == "JE-0011"

    def test_foreign_format_number_does_not_move_counter(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        journal_service.create(
            make_draft(chart["1100"], chart["4000"], entry_number="OPENING-2024"), test_actor_id
        )
        generated = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)
        assert generated.entry_number == "JE-0001"

    def test_duplicate_number_rejected(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        journal_service.create(make_draft(chart["1100"], chart["4000"], entry_number="ADJ-1"), test_actor_id)
        with pytest.raises(DuplicateEntryNumberError):
            journal_service.create(
                make_draft(chart["1100"], chart["4000"], entry_number="ADJ-1"), test_actor_id
            )

    def test_same_number_allowed_in_another_company(
        self, session, journal_service, make_draft, chart, test_actor_id,
    ):
        from ledger_modules.gl.service import seed_default_accounts

        other_company = uuid4()
        other_chart = seed_default_accounts(session, other_company, test_actor_id)
        session.commit()

        journal_service.create(make_draft(chart["1100"], chart["4000"], entry_number="ADJ-1"), test_actor_id)
        other = journal_service.create(
            EntryDraft(
                company_id=other_company,
                entry_date=date(2024, 1, 15),
                entry_number="ADJ-1",
                lines=[
                    LineSpec(account_id=other_chart["1100"].id, debit=Decimal("5")),
                    LineSpec(account_id=other_chart["4000"].id, credit=Decimal("5")),
                ],
            ),
            test_actor_id,
        )
        assert other.entry_number == "ADJ-1"

    def test_single_line_rejected(self, journal_service, chart, company_id, test_actor_id):
        draft = EntryDraft(
            company_id=company_id,
            entry_date=date(2024, 1, 15),
            lines=[LineSpec(account_id=chart["1100"].id, debit=Decimal("100"))],
        )
        with pytest.raises(InsufficientLinesError):
            journal_service.create(draft, test_actor_id)

    def test_line_with_both_sides_rejected(self, journal_service, chart, company_id, test_actor_id):
        draft = EntryDraft(
            company_id=company_id,
            entry_date=date(2024, 1, 15),
            lines=[
                LineSpec(account_id=chart["1100"].id, debit=Decimal("10"), credit=Decimal("10")),
                LineSpec(account_id=chart["4000"].id, credit=Decimal("10")),
            ],
        )
        with pytest.raises(InvalidLineError):
            journal_service.create(draft, test_actor_id)

    def test_unknown_account_rejected(self, journal_service, chart, company_id, test_actor_id):
        draft = EntryDraft(
            company_id=company_id,
            entry_date=date(2024, 1, 15),
            lines=[
                LineSpec(account_id=uuid4(), debit=Decimal("10")),
                LineSpec(account_id=chart["4000"].id, credit=Decimal("10")),
            ],
        )
        with pytest.raises(InvalidAccountError):
            journal_service.create(draft, test_actor_id)

    def test_inactive_account_rejected(
        self, session, journal_service, chart, company_id, test_actor_id,
    ):
        dormant = AccountStore(session).create_account(
            company_id=company_id,
            code="1999",
            name="Dormant",
            account_type="Bank",
            created_by_id=test_actor_id,
            is_active=False,
        )
        session.commit()
        draft = EntryDraft(
            company_id=company_id,
            entry_date=date(2024, 1, 15),
            lines=[
                LineSpec(account_id=dormant.id, debit=Decimal("10")),
                LineSpec(account_id=chart["4000"].id, credit=Decimal("10")),
            ],
        )
        with pytest.raises(InvalidAccountError) as exc_info:
            journal_service.create(draft, test_actor_id)
        assert "inactive" in exc_info.value.reason

    def test_other_company_account_rejected(
        self, session, journal_service, chart, company_id, test_actor_id,
    ):
        foreign = AccountStore(session).create_account(
            company_id=uuid4(),
            code="1000",
            name="Foreign Cash",
            account_type="Bank",
            created_by_id=test_actor_id,
        )
        session.commit()
        draft = EntryDraft(
            company_id=company_id,
            entry_date=date(2024, 1, 15),
            lines=[
                LineSpec(account_id=foreign.id, debit=Decimal("10")),
                LineSpec(account_id=chart["4000"].id, credit=Decimal("10")),
            ],
        )
        with pytest.raises(InvalidAccountError):
            journal_service.create(draft, test_actor_id)

    def test_rejected_create_leaves_nothing_behind(
        self, session, journal_service, chart, company_id, test_actor_id,
    ):
        draft = EntryDraft(
            company_id=company_id,
            entry_date=date(2024, 1, 15),
            lines=[
                LineSpec(account_id=uuid4(), debit=Decimal("10")),
                LineSpec(account_id=chart["4000"].id, credit=Decimal("10")),
            ],
        )
        with pytest.raises(InvalidAccountError):
            journal_service.create(draft, test_actor_id)

        count = session.execute(select(func.count()).select_from(JournalEntry)).scalar_one()
        assert count == 0

    def test_recurring_draft_gets_next_date(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        entry = journal_service.create(
            make_draft(
                chart["6060"], chart["1010"],
                is_recurring=True,
                recurring_frequency=RecurringFrequency.MONTHLY,
            ),
            test_actor_id,
        )
        assert entry.next_recurring_date == date(2024, 2, 15)

    def test_recurring_without_frequency_has_no_next_date(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        entry = journal_service.create(
            make_draft(chart["6060"], chart["1010"], is_recurring=True), test_actor_id
        )
        assert entry.next_recurring_date is None


class TestUpdate:
    @pytest.fixture
    def draft_entry(self, journal_service, make_draft, chart, test_actor_id):
        return journal_service.create(
            make_draft(chart["1100"], chart["4000"], description="Original"), test_actor_id
        )

    def test_patch_header_fields(
        self, journal_service, draft_entry, company_id, test_actor_id,
    ):
        updated = journal_service.update(
            draft_entry.id,
            company_id,
            EntryPatch(description="Changed", reference_number="REF-9", entry_type=EntryType.ADJUSTING),
            test_actor_id,
        )
        assert updated.description == "Changed"
        assert updated.reference_number == "REF-9"
        assert updated.entry_type == EntryType.ADJUSTING
        assert updated.updated_by_id == test_actor_id

    def test_optional_field_can_be_cleared(
        self, journal_service, draft_entry, company_id, test_actor_id,
    ):
        updated = journal_service.update(
            draft_entry.id, company_id, EntryPatch(description=None), test_actor_id
        )
        assert updated.description is None

    def test_required_field_cannot_be_cleared(
        self, journal_service, draft_entry, company_id, test_actor_id,
    ):
        with pytest.raises(InvalidFieldError) as exc_info:
            journal_service.update(
                draft_entry.id, company_id, EntryPatch(entry_date=None), test_actor_id
            )
        assert exc_info.value.field == "entry_date"

    def test_replacing_lines_recomputes_totals(
        self, session, journal_service, draft_entry, chart, company_id, test_actor_id,
    ):
        new_lines = [
            LineSpec(account_id=chart["1100"].id, debit=Decimal("250")),
            LineSpec(account_id=chart["4000"].id, credit=Decimal("200")),
            LineSpec(account_id=chart["2100"].id, credit=Decimal("50")),
        ]
        updated = journal_service.update(
            draft_entry.id, company_id, EntryPatch(lines=new_lines), test_actor_id
        )

        assert updated.total_debit == Decimal("250")
        assert updated.total_credit == Decimal("250")
        assert len(updated.lines) == 3
        stored = session.execute(
            select(func.count())
            .select_from(JournalEntryLine)
            .where(JournalEntryLine.journal_entry_id == draft_entry.id)
        ).scalar_one()
        assert stored == 3

    def test_invalid_replacement_lines_rejected(
        self, journal_service, draft_entry, chart, company_id, test_actor_id,
    ):
        with pytest.raises(InsufficientLinesError):
            journal_service.update(
                draft_entry.id,
                company_id,
                EntryPatch(lines=[LineSpec(account_id=chart["1100"].id, debit=Decimal("1"))]),
                test_actor_id,
            )

    def test_renumber_to_taken_number_rejected(
        self, journal_service, draft_entry, make_draft, chart, company_id, test_actor_id,
    ):
        other = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)
        with pytest.raises(DuplicateEntryNumberError):
            journal_service.update(
                draft_entry.id, company_id, EntryPatch(entry_number=other.entry_number), test_actor_id
            )

    def test_keeping_own_number_is_allowed(
        self, journal_service, draft_entry, company_id, test_actor_id,
    ):
        updated = journal_service.update(
            draft_entry.id, company_id, EntryPatch(entry_number=draft_entry.entry_number), test_actor_id
        )
        assert updated.entry_number == "JE-0001"

    def test_enabling_recurrence_sets_next_date(
        self, journal_service, draft_entry, company_id, test_actor_id,
    ):
        updated = journal_service.update(
            draft_entry.id,
            company_id,
            EntryPatch(is_recurring=True, recurring_frequency="WEEKLY"),
            test_actor_id,
        )
        assert updated.recurring_frequency == RecurringFrequency.WEEKLY
        assert updated.next_recurring_date == date(2024, 1, 22)

    def test_disabling_recurrence_clears_next_date(
        self, journal_service, draft_entry, company_id, test_actor_id,
    ):
        journal_service.update(
            draft_entry.id,
            company_id,
            EntryPatch(is_recurring=True, recurring_frequency="MONTHLY"),
            test_actor_id,
        )
        updated = journal_service.update(
            draft_entry.id, company_id, EntryPatch(is_recurring=False), test_actor_id
        )
        assert updated.next_recurring_date is None

    def test_posted_entry_cannot_be_updated(
        self, journal_service, posted_entry, company_id, test_actor_id,
    ):
        with pytest.raises(EntryNotDraftError):
            journal_service.update(
                posted_entry.id, company_id, EntryPatch(description="nope"), test_actor_id
            )

    def test_missing_entry(self, journal_service, chart, company_id, test_actor_id):
        with pytest.raises(EntryNotFoundError):
            journal_service.update(uuid4(), company_id, EntryPatch(description="x"), test_actor_id)


class TestDelete:
    def test_deletes_draft_and_lines(
        self, session, journal_service, make_draft, chart, company_id, test_actor_id,
    ):
        entry = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)
        journal_service.delete(entry.id, company_id)

        assert session.get(JournalEntry, entry.id) is None
        remaining = session.execute(
            select(func.count())
            .select_from(JournalEntryLine)
            .where(JournalEntryLine.journal_entry_id == entry.id)
        ).scalar_one()
        assert remaining == 0

    def test_posted_entry_cannot_be_deleted(
        self, session, journal_service, posted_entry, company_id,
    ):
        with pytest.raises(EntryNotDraftError):
            journal_service.delete(posted_entry.id, company_id)
        assert session.get(JournalEntry, posted_entry.id) is not None

    def test_deleting_reversal_draft_leaves_original(
        self, session, journal_service, posted_entry, company_id, test_actor_id,
    ):
        reversal = journal_service.reverse(posted_entry.id, company_id, test_actor_id)

        journal_service.delete(reversal.id, company_id)

        assert session.get(JournalEntry, reversal.id) is None
        original = session.get(JournalEntry, posted_entry.id)
        assert original.status == JournalEntryStatus.POSTED

    def test_missing_entry(self, journal_service, chart, company_id):
        with pytest.raises(EntryNotFoundError):
            journal_service.delete(uuid4(), company_id)


class TestPost:
    def test_post_moves_balances(
        self, journal_service, posted_entry, chart, test_actor_id, balance_of,
    ):
        assert posted_entry.status == JournalEntryStatus.POSTED
        assert posted_entry.posted_by_id == test_actor_id
        assert posted_entry.posted_at is not None
        assert balance_of(chart["1100"]) == Decimal("100.00")
        assert balance_of(chart["4000"]) == Decimal("100.00")

    def test_post_twice_rejected(
        self, journal_service, posted_entry, chart, company_id, test_actor_id, balance_of,
    ):
        with pytest.raises(EntryNotDraftError):
            journal_service.post(posted_entry.id, company_id, test_actor_id)
        assert balance_of(chart["1100"]) == Decimal("100.00")

    def test_post_with_other_company_not_found(
        self, journal_service, make_draft, chart, test_actor_id,
    ):
        entry = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)
        with pytest.raises(EntryNotFoundError):
            journal_service.post(entry.id, uuid4(), test_actor_id)

    def test_non_finite_amount_never_reaches_the_ledger(
        self, session, journal_service, make_draft, chart, test_actor_id,
    ):
        with pytest.raises(ValidationError):
            journal_service.create(
                make_draft(chart["1100"], chart["4000"], amount=Decimal("Infinity")),
                test_actor_id,
            )

        count = session.execute(select(func.count()).select_from(JournalEntry)).scalar_one()
        assert count == 0

    def test_unexpected_error_rolls_back(
        self, session, journal_service, make_draft, chart, company_id, test_actor_id,
        balance_of, captured_logs, monkeypatch,
    ):
        entry = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)

        def _boom(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(journal_service._accounts, "apply_lines", _boom)
        with pytest.raises(RuntimeError):
            journal_service.post(entry.id, company_id, test_actor_id)

        assert session.get(JournalEntry, entry.id).status == JournalEntryStatus.DRAFT
        assert balance_of(chart["1100"]) == Decimal("0")
        failed = [r for r in captured_logs() if r["message"] == "journal_entry_operation_failed"]
        assert failed[-1]["operation"] == "post"
        assert failed[-1]["exc_type"] == "RuntimeError"

    def test_derived_drafts_numbered_before_balances_move(
        self, journal_service, make_draft, chart, company_id, test_actor_id, captured_logs,
    ):
        entry = journal_service.create(
            make_draft(
                chart["6060"], chart["1010"],
                is_recurring=True,
                recurring_frequency=RecurringFrequency.MONTHLY,
            ),
            test_actor_id,
        )
        journal_service.post(entry.id, company_id, test_actor_id)

        messages = [r["message"] for r in captured_logs()]
        assert messages.index("recurring_entry_generated") < messages.index("balance_applied")


class TestVoid:
    def test_void_restores_balances(
        self, journal_service, posted_entry, chart, company_id, test_actor_id, balance_of,
    ):
        voided = journal_service.void(posted_entry.id, company_id, test_actor_id, reason="Typo")

        assert voided.status == JournalEntryStatus.VOID
        assert voided.void_reason == "Typo"
        assert voided.voided_at is not None
        assert balance_of(chart["1100"]) == Decimal("0")
        assert balance_of(chart["4000"]) == Decimal("0")

    def test_reason_is_optional(
        self, journal_service, posted_entry, company_id, test_actor_id,
    ):
        voided = journal_service.void(posted_entry.id, company_id, test_actor_id)
        assert voided.void_reason is None

    def test_void_twice_rejected(
        self, journal_service, posted_entry, chart, company_id, test_actor_id, balance_of,
    ):
        journal_service.void(posted_entry.id, company_id, test_actor_id)
        with pytest.raises(EntryAlreadyVoidedError):
            journal_service.void(posted_entry.id, company_id, test_actor_id)
        assert balance_of(chart["1100"]) == Decimal("0")

    def test_void_draft_rejected(
        self, journal_service, make_draft, chart, company_id, test_actor_id,
    ):
        entry = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)
        with pytest.raises(EntryNotPostedError):
            journal_service.void(entry.id, company_id, test_actor_id)

    def test_overlong_reason_rejected(
        self, journal_service, posted_entry, company_id, test_actor_id,
    ):
        with pytest.raises(InvalidFieldError):
            journal_service.void(posted_entry.id, company_id, test_actor_id, reason="r" * 501)
        assert posted_entry.status == JournalEntryStatus.POSTED


class TestReverse:
    def test_reversal_is_swapped_draft_dated_today(
        self, journal_service, posted_entry, chart, company_id, test_actor_id, balance_of,
    ):
        reversal = journal_service.reverse(posted_entry.id, company_id, test_actor_id)

        assert reversal.status == JournalEntryStatus.DRAFT
        assert reversal.entry_type == EntryType.REVERSING
        assert reversal.entry_date == date(2024, 1, 1)
        assert reversal.reversed_from_id == posted_entry.id
        assert reversal.description == f"Reversal of {posted_entry.entry_number}"
        assert reversal.entry_number == "JE-0002"
        by_account = {line.account_id: line for line in reversal.lines}
        assert by_account[chart["1100"].id].credit == Decimal("100.00")
        assert by_account[chart["4000"].id].debit == Decimal("100.00")
        assert balance_of(chart["1100"]) == Decimal("100.00")

    def test_posting_reversal_nets_to_zero(
        self, journal_service, posted_entry, chart, company_id, test_actor_id, balance_of,
    ):
        reversal = journal_service.reverse(posted_entry.id, company_id, test_actor_id)
        journal_service.post(reversal.id, company_id, test_actor_id)

        assert balance_of(chart["1100"]) == Decimal("0")
        assert balance_of(chart["4000"]) == Decimal("0")
        assert posted_entry.status == JournalEntryStatus.POSTED

    def test_draft_cannot_be_reversed(
        self, journal_service, make_draft, chart, company_id, test_actor_id,
    ):
        entry = journal_service.create(make_draft(chart["1100"], chart["4000"]), test_actor_id)
        with pytest.raises(EntryNotPostedError):
            journal_service.reverse(entry.id, company_id, test_actor_id)

    def test_void_entry_cannot_be_reversed(
        self, journal_service, posted_entry, company_id, test_actor_id,
    ):
        journal_service.void(posted_entry.id, company_id, test_actor_id)
        with pytest.raises(EntryNotPostedError):
            journal_service.reverse(posted_entry.id, company_id, test_actor_id)


class TestDuplicate:
    def test_duplicate_copies_lines_as_draft(
        self, journal_service, posted_entry, company_id, test_actor_id,
    ):
        clone = journal_service.duplicate(posted_entry.id, company_id, test_actor_id)

        assert clone.id != posted_entry.id
        assert clone.status == JournalEntryStatus.DRAFT
        assert clone.entry_number == "JE-0002"
        assert clone.entry_date == date(2024, 1, 1)
        assert clone.total_debit == posted_entry.total_debit
        assert [(l.account_id, l.debit, l.credit) for l in clone.lines] == [
            (l.account_id, l.debit, l.credit) for l in posted_entry.lines
        ]
        assert clone.reversed_from_id is None
        assert clone.posted_at is None

    def test_duplicate_of_reversing_entry_is_standard(
        self, journal_service, posted_entry, company_id, test_actor_id,
    ):
        reversal = journal_service.reverse(posted_entry.id, company_id, test_actor_id)
        clone = journal_service.duplicate(reversal.id, company_id, test_actor_id)
        assert clone.entry_type == EntryType.STANDARD

    def test_void_entry_can_be_duplicated(
        self, journal_service, posted_entry, company_id, test_actor_id,
    ):
        journal_service.void(posted_entry.id, company_id, test_actor_id)
        clone = journal_service.duplicate(posted_entry.id, company_id, test_actor_id)
        assert clone.status == JournalEntryStatus.DRAFT

    def test_missing_entry(self, journal_service, chart, company_id, test_actor_id):
        with pytest.raises(EntryNotFoundError):
            journal_service.duplicate(uuid4(), company_id, test_actor_id)
