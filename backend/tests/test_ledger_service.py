from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from app.services import output_service, process_service, sale_service, voucher_service
from app.services.ledger_service import (
    PRODUCTION,
    SALE,
    build_output_ledger,
    get_output_ledger,
    list_processes,
    list_vouchers,
    summarize_ledger,
)

from builders import FILLER, PRODUCT, RESIN, output, process, sale, voucher


def _output(id, day, quantity="10", product="Compound"):
    return SimpleNamespace(
        id=id, date=day, product_name=product,
        quantity_produced=Decimal(quantity), final_average_price=Decimal("5"),
    )


def _sale(id, day, quantity="4", product="Compound"):
    return SimpleNamespace(
        id=id, date=day, product_name=product, client_code="C1",
        sale_qty=Decimal(quantity), sale_price=Decimal("9"),
    )


def test_ledger_is_chronological_with_production_first():
    entries = build_output_ledger(
        [_output(2, date(2024, 1, 2)), _output(1, date(2024, 1, 1))],
        [_sale(1, date(2024, 1, 2)), _sale(2, date(2024, 1, 1))],
    )
    assert [(e.date.day, e.type) for e in entries] == [
        (1, PRODUCTION), (1, SALE), (2, PRODUCTION), (2, SALE),
    ]


def test_sales_are_negative_entries():
    [entry] = build_output_ledger([], [_sale(1, date(2024, 1, 1), quantity="4")])
    assert entry.quantity == Decimal("-4")
    assert entry.client_code == "C1"
    assert entry.price_per_kg == Decimal("9")


def test_ledger_filters_by_name_and_dates():
    entries = build_output_ledger(
        [_output(1, date(2024, 1, 1)), _output(2, date(2024, 1, 5), product="Other")],
        [_sale(1, date(2024, 2, 1))],
        name="Compound",
        end_date=date(2024, 1, 31),
    )
    assert [(e.id, e.type) for e in entries] == [(1, PRODUCTION)]


def test_summary_covers_shown_entries():
    entries = build_output_ledger(
        [_output(1, date(2024, 1, 1), quantity="10"), _output(2, date(2024, 1, 3), quantity="6")],
        [_sale(1, date(2024, 1, 2), quantity="4")],
    )
    summary = summarize_ledger(entries)
    assert summary.total_produced == Decimal("16")
    assert summary.total_sold == Decimal("4")
    assert summary.available_stock == Decimal("12")


def _history(db, user):
    voucher_service.create_voucher(db, user.id, voucher(name=RESIN, quantity="60", price="12", day=date(2024, 1, 1)))
    voucher_service.create_voucher(db, user.id, voucher(name=FILLER, quantity="40", price="7", day=date(2024, 1, 1)))
    first = process_service.create_process(
        db, user.id, process(materials=((RESIN, "30"), (FILLER, "20")), total_output="50", day=date(2024, 1, 2))
    )
    process_service.create_process(
        db, user.id,
        process(materials=((RESIN, "30"), (FILLER, "20")), total_output="50", name="Batch 2", day=date(2024, 1, 5)),
    )
    output_service.create_output(db, user.id, output(first.id, day=date(2024, 1, 3)))
    sale_service.record_sale(db, user.id, sale(quantity="20", day=date(2024, 1, 3)))
    db.commit()


def test_output_ledger_from_database(db, user):
    _history(db, user)

    entries, summary = get_output_ledger(db, user.id, name=PRODUCT)
    assert [e.type for e in entries] == [PRODUCTION, SALE]
    assert summary.available_stock == Decimal("30")

    entries, summary = get_output_ledger(db, user.id, start_date=date(2024, 1, 4))
    assert entries == []
    assert summary.total_produced == 0


def test_voucher_list_is_oldest_first_with_direction(db, user):
    _history(db, user)

    vouchers = list_vouchers(db, user.id, name=RESIN)
    assert [v.date for v in vouchers] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 5)]
    assert [v.direction for v in vouchers] == ["IN", "OUT", "OUT"]


def test_process_list_is_newest_first(db, user):
    _history(db, user)

    assert [p.process_name for p in list_processes(db, user.id)] == ["Batch 2", "Batch 1"]
    assert [p.process_name for p in list_processes(db, user.id, end_date=date(2024, 1, 4))] == ["Batch 1"]
