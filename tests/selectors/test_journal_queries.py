"""
Tests for JournalSelector and LedgerSelector.

Tests cover:
- Single entry lookup as DTOs, scoped by company
- Filtering, search, sorting and pagination of the entry list
- Status summary
- Lookup by business document and by reversal source
- Stored vs recomputed account balances and drift detection
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import update

from ledger_kernel.domain.enums import EntryType, JournalEntryStatus
from ledger_kernel.exceptions import InvalidFieldError
from ledger_kernel.models.account import Account
from ledger_kernel.selectors.journal_selector import JournalQuery, JournalSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector


@pytest.fixture
def selector(session):
    return JournalSelector(session)


@pytest.fixture
def ledger(session):
    return LedgerSelector(session)


@pytest.fixture
def sample_entries(journal_service, make_draft, chart, company_id, test_actor_id):
    """Three posted entries, one draft and one void, on different dates."""
    specs = [
        (chart["1100"], chart["4000"], Decimal("100"), date(2024, 1, 10), "Consulting invoice"),
        (chart["6060"], chart["1010"], Decimal("1500"), date(2024, 1, 31), "January rent"),
        (chart["1010"], chart["1100"], Decimal("60"), date(2024, 2, 5), "Customer payment"),
        (chart["6030"], chart["1010"], Decimal("25"), date(2024, 2, 7), "Paper"),
        (chart["6030"], chart["1010"], Decimal("999"), date(2024, 2, 8), "Mistake"),
    ]
    entries = []
    for debit, credit, amount, entry_date, description in specs:
        entries.append(
            journal_service.create(
                make_draft(debit, credit, amount=amount, entry_date=entry_date, description=description),
                test_actor_id,
            )
        )
    for entry in (entries[0], entries[1], entries[2], entries[4]):
        journal_service.post(entry.id, company_id, test_actor_id)
    journal_service.void(entries[4].id, company_id, test_actor_id, reason="Entered twice")
    return entries


class TestGet:
    def test_returns_dto_with_ordered_lines(self, selector, sample_entries, chart, company_id):
        dto = selector.get(sample_entries[0].id, company_id)

        assert dto.entry_number == "JE-0001"
        assert dto.status == JournalEntryStatus.POSTED
        assert dto.is_balanced
        assert [line.account_code for line in dto.lines] == ["1100", "4000"]
        assert dto.lines[0].account_name == "Accounts Receivable"
        assert dto.lines[0].debit == Decimal("100")

    def test_other_company_sees_nothing(self, selector, sample_entries):
        assert selector.get(sample_entries[0].id, uuid4()) is None

    def test_get_by_number(self, selector, sample_entries, company_id):
        dto = selector.get_by_number("JE-0002", company_id)
        assert dto.description == "January rent"

    def test_get_by_number_missing(self, selector, sample_entries, company_id):
        assert selector.get_by_number("JE-9999", company_id) is None

    def test_void_entry_carries_reason(self, selector, sample_entries, company_id):
        dto = selector.get(sample_entries[4].id, company_id)
        assert dto.status == JournalEntryStatus.VOID
        assert dto.void_reason == "Entered twice"

    def test_reversals_of(self, selector, journal_service, sample_entries, company_id, test_actor_id):
        reversal = journal_service.reverse(sample_entries[1].id, company_id, test_actor_id)

        found = selector.get_reversals_of(sample_entries[1].id)

        assert [dto.id for dto in found] == [reversal.id]
        assert found[0].entry_type == EntryType.REVERSING


class TestListEntries:
    def test_default_is_newest_first(self, selector, sample_entries, company_id):
        page = selector.list_entries(company_id)

        assert page.total == 5
        assert [dto.entry_date for dto in page.items] == sorted(
            (dto.entry_date for dto in page.items), reverse=True
        )

    def test_filter_by_status(self, selector, sample_entries, company_id):
        page = selector.list_entries(company_id, JournalQuery(status=JournalEntryStatus.POSTED))
        assert page.total == 3
        assert {dto.status for dto in page.items} == {JournalEntryStatus.POSTED}

    def test_filter_by_date_range(self, selector, sample_entries, company_id):
        page = selector.list_entries(
            company_id, JournalQuery(date_from=date(2024, 2, 1), date_to=date(2024, 2, 7))
        )
        assert {dto.description for dto in page.items} == {"Customer payment", "Paper"}

    def test_filter_by_amount(self, selector, sample_entries, company_id):
        page = selector.list_entries(
            company_id, JournalQuery(amount_min=Decimal("50"), amount_max=Decimal("200"))
        )
        assert {dto.description for dto in page.items} == {"Consulting invoice", "Customer payment"}

    def test_filter_by_account(self, selector, sample_entries, chart, company_id):
        page = selector.list_entries(company_id, JournalQuery(account_id=chart["1100"].id))
        assert {dto.description for dto in page.items} == {"Consulting invoice", "Customer payment"}
        # Full line set is returned, not just the matching line.
        assert all(len(dto.lines) == 2 for dto in page.items)

    def test_search_is_case_insensitive(self, selector, sample_entries, company_id):
        page = selector.list_entries(company_id, JournalQuery(search="RENT"))
        assert [dto.description for dto in page.items] == ["January rent"]

    def test_search_matches_entry_number(self, selector, sample_entries, company_id):
        page = selector.list_entries(company_id, JournalQuery(search="0003"))
        assert [dto.entry_number for dto in page.items] == ["JE-0003"]

    def test_sort_by_amount_ascending(self, selector, sample_entries, company_id):
        page = selector.list_entries(
            company_id, JournalQuery(sort_by="total_debit", sort_order="asc")
        )
        amounts = [dto.total_debit for dto in page.items]
        assert amounts == sorted(amounts)

    def test_pagination(self, selector, sample_entries, company_id):
        first = selector.list_entries(
            company_id, JournalQuery(sort_by="entry_number", sort_order="asc", limit=2)
        )
        third = selector.list_entries(
            company_id, JournalQuery(sort_by="entry_number", sort_order="asc", limit=2, page=3)
        )

        assert first.total == 5
        assert first.total_pages == 3
        assert [dto.entry_number for dto in first.items] == ["JE-0001", "JE-0002"]
        assert [dto.entry_number for dto in third.items] == ["JE-0005"]

    def test_empty_company(self, selector):
        page = selector.list_entries(uuid4())
        assert page.total == 0
        assert page.items == ()
        assert page.total_pages == 0

    @pytest.mark.parametrize(
        "kwargs",
        [{"sort_by": "description"}, {"sort_order": "up"}, {"page": 0}, {"limit": 0}],
    )
    def test_invalid_query_rejected(self, kwargs):
        with pytest.raises(InvalidFieldError):
            JournalQuery(**kwargs)


class TestSummary:
    def test_counts_by_status(self, selector, sample_entries, company_id):
        summary = selector.summary(company_id)

        assert summary.draft_count == 1
        assert summary.posted_count == 3
        assert summary.void_count == 1
        assert summary.total_entries == 5
        assert summary.posted_total_debit == Decimal("1660")
        assert summary.by_status == {"DRAFT": 1, "POSTED": 3, "VOID": 1}

    def test_empty_company(self, selector):
        summary = selector.summary(uuid4())
        assert summary.total_entries == 0
        assert summary.posted_total_debit == Decimal("0")


class TestBySource:
    def test_entries_of_a_document(
        self, selector, auto_journal, session, company_id, test_actor_id, chart,
    ):
        from ledger_kernel.domain.dtos import AutoEntryLine, AutoEntryRequest

        source_id = uuid4()
        auto_journal.post_auto_entry(
            AutoEntryRequest(
                company_id=company_id,
                user_id=test_actor_id,
                entry_date=date(2024, 3, 1),
                description="Invoice INV-7",
                source_type="INVOICE",
                source_id=source_id,
                lines=[
                    AutoEntryLine(debit=Decimal("10"), account_type="Accounts Receivable"),
                    AutoEntryLine(credit=Decimal("10"), account_type="Income"),
                ],
            )
        )
        session.flush()

        found = selector.get_by_source("INVOICE", source_id)
        assert len(found) == 1
        assert found[0].source_id == source_id
        assert selector.get_by_source("BILL", source_id) == []


class TestLedgerBalances:
    def test_healthy_ledger_has_no_drift(self, ledger, sample_entries, company_id):
        assert ledger.find_balance_drift(company_id) == []

    def test_recompute_ignores_drafts_and_voids(self, ledger, sample_entries, chart):
        assert ledger.recompute_balance(chart["1100"].id) == Decimal("40")
        assert ledger.recompute_balance(chart["6030"].id) == Decimal("0")
        assert ledger.recompute_balance(chart["1010"].id) == Decimal("-1440")

    def test_account_balances_cover_whole_chart(self, ledger, sample_entries, chart, company_id):
        balances = ledger.account_balances(company_id)

        assert len(balances) == len(chart)
        assert [b.code for b in balances] == sorted(chart)
        rent = next(b for b in balances if b.code == "6060")
        assert rent.stored_balance == Decimal("1500")
        assert rent.computed_balance == Decimal("1500")
        assert rent.drift == Decimal("0")

    def test_tampered_balance_detected(self, session, ledger, sample_entries, chart, company_id):
        session.execute(
            update(Account)
            .where(Account.id == chart["4000"].id)
            .values(current_balance=Decimal("1"))
        )

        drifted = ledger.find_balance_drift(company_id)

        assert [b.code for b in drifted] == ["4000"]
        assert drifted[0].drift == Decimal("-99")

    def test_drift_within_tolerance_ignored(self, session, ledger, sample_entries, chart, company_id):
        session.execute(
            update(Account)
            .where(Account.id == chart["4000"].id)
            .values(current_balance=Decimal("100.0005"))
        )
        assert ledger.find_balance_drift(company_id, tolerance=Decimal("0.001")) == []
