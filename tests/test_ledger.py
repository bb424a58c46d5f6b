from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from conftest import FIXED_NOW, Clock, make_entry

from finbot.database import ENTRIES, MemoryStore
from finbot.errors import EmptyLedger, NoReceiptPending
from finbot.schemas.ledger import INCOME_CATEGORY, EntryKind
from finbot.services.ledger import Ledger, Period, period_start, total_value, totals_by_category


def make_ledger(entries=None, store=None, tz=timezone.utc, now=FIXED_NOW):
    return Ledger(store or MemoryStore(), entries, tz=tz, clock=Clock(now))


def test_append_persists_the_whole_collection():
    store = MemoryStore()
    ledger = make_ledger(store=store)

    ledger.append(make_entry(20, "alimentação"))
    ledger.append(make_entry("12.50", "transporte"))

    saved = store.collections[ENTRIES]
    assert [record["category"] for record in saved] == ["alimentação", "transporte"]
    assert saved[1]["value"] == 12.5


def test_undo_last_restores_previous_state():
    store = MemoryStore()
    ledger = make_ledger([make_entry(5, "lazer")], store=store)
    before = ledger.to_records()

    ledger.append(make_entry(20, "alimentação"))
    removed = ledger.undo_last()

    assert removed.category == "alimentação"
    assert ledger.to_records() == before
    assert store.collections[ENTRIES] == before


def test_undo_last_on_empty_ledger_raises():
    store = MemoryStore()
    ledger = make_ledger(store=store)

    with pytest.raises(EmptyLedger):
        ledger.undo_last()
    assert ENTRIES not in store.collections


def test_amend_receipt_targets_most_recent_pending():
    ledger = make_ledger([
        make_entry(0, "comprovante", kind=EntryKind.RECEIPT_PENDING),
        make_entry(10, "lazer"),
        make_entry(0, "comprovante", kind=EntryKind.RECEIPT_PENDING),
        make_entry(30, "transporte"),
    ])

    amended = ledger.amend_receipt(Decimal("45.90"), "alimentação")

    assert amended is ledger.entries[2]
    assert amended.value == Decimal("45.90")
    assert amended.category == "alimentação"
    assert amended.kind == EntryKind.RECEIPT
    assert ledger.entries[0].kind == EntryKind.RECEIPT_PENDING


def test_amend_receipt_without_pending_raises():
    ledger = make_ledger([make_entry(45, "alimentação", kind=EntryKind.RECEIPT)])
    with pytest.raises(NoReceiptPending):
        ledger.amend_receipt(Decimal("10"), "lazer")


def test_by_category_excludes_income():
    ledger = make_ledger([
        make_entry(50, "alimentação"),
        make_entry(1000, INCOME_CATEGORY, kind=EntryKind.INCOME),
        make_entry(30, "transporte"),
        make_entry(20, "alimentação"),
    ])

    assert ledger.by_category() == {"alimentação": Decimal("70"), "transporte": Decimal("30")}
    assert total_value(ledger.incomes()) == Decimal("1000")
    assert total_value(ledger.expenses()) == Decimal("100")


def test_totals_by_category_keeps_first_appearance_order():
    totals = totals_by_category([make_entry(1, "b"), make_entry(2, "a"), make_entry(3, "b")])
    assert list(totals) == ["b", "a"]
    assert totals["b"] == Decimal("4")


def test_period_start():
    # 2026-10-19 is a Monday
    assert period_start(Period.DAY, FIXED_NOW) == FIXED_NOW - timedelta(days=1)
    assert period_start(Period.WEEK, FIXED_NOW) == datetime(2026, 10, 18, tzinfo=timezone.utc)
    assert period_start(Period.MONTH, FIXED_NOW) == datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert period_start(Period.YEAR, FIXED_NOW) == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_week_starts_on_the_same_sunday():
    sunday = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
    assert period_start(Period.WEEK, sunday) == datetime(2026, 10, 18, tzinfo=timezone.utc)


def test_by_period_windows():
    ledger = make_ledger([
        make_entry(1, "a", when=FIXED_NOW - timedelta(hours=2)),
        make_entry(2, "b", when=FIXED_NOW - timedelta(hours=30)),
        make_entry(4, "c", when=datetime(2026, 10, 2, tzinfo=timezone.utc)),
        make_entry(8, "d", when=datetime(2026, 3, 2, tzinfo=timezone.utc)),
        make_entry(16, "e", when=datetime(2025, 12, 31, tzinfo=timezone.utc)),
        make_entry(32, INCOME_CATEGORY, when=FIXED_NOW, kind=EntryKind.INCOME),
    ])

    def total(period):
        return total_value(ledger.by_period(period))

    assert total(Period.DAY) == Decimal("33")
    assert total(Period.WEEK) == Decimal("35")
    assert total(Period.MONTH) == Decimal("39")
    assert total(Period.YEAR) == Decimal("47")


def test_by_period_excludes_future_entries():
    ledger = make_ledger([make_entry(5, "a", when=FIXED_NOW + timedelta(minutes=1))])
    assert ledger.by_period(Period.DAY) == []


def test_month_window_follows_local_time_zone():
    # 02:00 UTC on Oct 1 is still Sep 30 in São Paulo
    now = datetime(2026, 10, 1, 2, 0, tzinfo=timezone.utc)
    ledger = make_ledger([
        make_entry(10, "a", when=datetime(2026, 9, 15, tzinfo=timezone.utc)),
        make_entry(20, "b", when=datetime(2026, 10, 1, 1, 0, tzinfo=timezone.utc)),
        make_entry(40, "c", when=datetime(2026, 8, 31, 23, 0, tzinfo=timezone.utc)),
    ], tz=ZoneInfo("America/Sao_Paulo"), now=now)

    assert total_value(ledger.by_period(Period.MONTH)) == Decimal("30")
    assert [e.category for e in ledger.entries_in_month_number(9)] == ["a", "b"]
    # Aug 31 23:00 UTC is Aug 31 20:00 locally
    assert [e.category for e in ledger.entries_in_month_number(8)] == ["c"]


def test_entries_in_month_number_ignores_year():
    ledger = make_ledger([
        make_entry(10, "a", when=datetime(2025, 10, 5, tzinfo=timezone.utc)),
        make_entry(20, "b", when=datetime(2026, 10, 5, tzinfo=timezone.utc)),
    ])
    assert len(ledger.entries_in_month_number(10)) == 2


def test_from_records_reads_legacy_keys():
    records = [
        {"valor": 20, "categoria": "alimentação", "data": "2026-10-18T15:00:00.000Z", "autor": "eu", "tipo": "texto"},
        {"valor": 1000, "categoria": "receita", "data": "2026-10-02T10:00:00Z", "autor": "eu",
         "tipo": "receita", "fonte": "salário"},
        {"valor": 0, "categoria": "comprovante", "data": "2026-10-03T10:00:00", "autor": "5511988887777",
         "tipo": "comprovante", "comprovante": "comprovante_1.jpeg"},
    ]

    ledger = Ledger.from_records(MemoryStore(), records, tz=timezone.utc)

    first, income, receipt = ledger.entries
    assert first.author == "self"
    assert first.kind == EntryKind.TEXT
    assert first.timestamp == datetime(2026, 10, 18, 15, tzinfo=timezone.utc)
    assert income.is_income
    assert income.source == "salário"
    assert receipt.kind == EntryKind.RECEIPT_PENDING
    assert receipt.attachment == "comprovante_1.jpeg"
    assert receipt.timestamp.tzinfo is not None


def test_from_records_skips_unreadable_entries():
    records = [
        {"value": 10, "category": "lazer", "timestamp": "2026-10-18T15:00:00Z"},
        {"value": -3, "category": "lazer", "timestamp": "2026-10-18T15:00:00Z"},
        {"category": "sem valor"},
        "garbage",
    ]
    ledger = Ledger.from_records(MemoryStore(), records)
    assert len(ledger) == 1


def test_from_records_tolerates_non_list():
    assert len(Ledger.from_records(MemoryStore(), None)) == 0
    assert len(Ledger.from_records(MemoryStore(), {"value": 1})) == 0


def test_records_round_trip_through_store():
    store = MemoryStore()
    ledger = make_ledger(store=store)
    ledger.append(make_entry("19.99", "lazer", author="5511988887777"))

    reloaded = Ledger.from_records(store, store.load(ENTRIES))

    assert reloaded.entries[0].value == Decimal("19.99")
    assert reloaded.entries[0].author == "5511988887777"


def test_filled_legacy_receipt_is_not_amendable_again():
    records = [
        {"valor": 0, "categoria": "comprovante", "data": "2026-10-03T10:00:00Z", "tipo": "comprovante"},
        {"valor": 45.9, "categoria": "alimentação", "data": "2026-10-04T10:00:00Z", "tipo": "comprovante"},
    ]
    ledger = Ledger.from_records(MemoryStore(), records, tz=timezone.utc)

    assert [e.kind for e in ledger.entries] == [EntryKind.RECEIPT_PENDING, EntryKind.RECEIPT]
    assert ledger.amend_receipt(Decimal("10"), "lazer") is ledger.entries[0]
    with pytest.raises(NoReceiptPending):
        ledger.amend_receipt(Decimal("12"), "lazer")
