"""Stock and weighted-average figures."""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from app.models import User
from app.services import output_service, process_service, sale_service, voucher_service
from app.services.inventory_service import (
    get_finished_goods_inventory,
    get_inventory_item,
    get_raw_materials_inventory,
    get_voucher_item_names,
    summarize_finished_good,
    summarize_raw_material,
)

from builders import FILLER, RESIN, output, process, sale, voucher


def _voucher(id, quantity, price, day=date(2024, 1, 1), code="RM-1"):
    quantity = Decimal(quantity)
    price = Decimal(price)
    return SimpleNamespace(
        id=id, date=day, name="Resin", code=code, quantity=quantity,
        quantity_type="KG", price_per_unit=price, total_price=quantity * price,
    )


def _output(id, quantity, price, day=date(2024, 1, 1)):
    return SimpleNamespace(
        id=id, date=day, quantity_produced=Decimal(quantity),
        final_average_price=Decimal(price), quantity_type="KG",
    )


def _sale(quantity):
    return SimpleNamespace(sale_qty=Decimal(quantity))


def test_raw_material_stock_is_sum_of_signed_quantities():
    snapshot = summarize_raw_material([
        _voucher(1, "100", "10"),
        _voucher(2, "50", "16"),
        _voucher(3, "-30", "12"),
    ])
    assert snapshot.available_stock == Decimal("120")


def test_raw_material_average_price_uses_inflows_only():
    snapshot = summarize_raw_material([
        _voucher(1, "100", "10"),
        _voucher(2, "50", "16"),
        _voucher(3, "-30", "99"),
    ])
    # (1000 + 800) / 150
    assert snapshot.average_price == Decimal("12")


def test_raw_material_without_inflow_has_zero_price_and_negative_stock():
    snapshot = summarize_raw_material([_voucher(1, "-5", "10")])
    assert snapshot.average_price == 0
    assert snapshot.available_stock == Decimal("-5")


def test_raw_material_code_comes_from_latest_voucher():
    snapshot = summarize_raw_material([
        _voucher(2, "10", "1", day=date(2024, 2, 1), code="NEW"),
        _voucher(1, "10", "1", day=date(2024, 1, 1), code="OLD"),
    ])
    assert snapshot.code == "NEW"


def test_no_vouchers_gives_empty_snapshot():
    snapshot = summarize_raw_material([], name="Ghost")
    assert snapshot.name == "Ghost"
    assert snapshot.available_stock == 0
    assert snapshot.average_price == 0


def test_finished_good_stock_is_produced_minus_sold():
    snapshot = summarize_finished_good(
        [_output(1, "85", "13.76"), _output(2, "15", "20")],
        [_sale("30"), _sale("10")],
        name="Compound",
    )
    assert snapshot.available_stock == Decimal("60")
    assert snapshot.code == "FG-Compound"


def test_finished_good_average_is_quantity_weighted():
    snapshot = summarize_finished_good([_output(1, "100", "10"), _output(2, "50", "16")], [], name="Compound")
    assert snapshot.average_price == Decimal("12")


def test_batches_without_quantity_carry_no_weight():
    snapshot = summarize_finished_good(
        [_output(1, "100", "10"), _output(2, "0", "500"), _output(3, "-5", "500")],
        [],
        name="Compound",
    )
    assert snapshot.average_price == Decimal("10")
    assert snapshot.available_stock == Decimal("95")


def test_inventory_item_reads_the_database(db, user):
    voucher_service.create_voucher(db, user.id, voucher(quantity="60", price="12"))
    voucher_service.create_voucher(db, user.id, voucher(quantity="40", price="15"))
    db.commit()

    snapshot = get_inventory_item(db, user.id, RESIN)
    assert snapshot.available_stock == Decimal("100")
    assert snapshot.average_price == Decimal("13.2")
    assert snapshot.quantity_type == "KG"


def test_inventory_item_date_range_is_inclusive(db, user):
    voucher_service.create_voucher(db, user.id, voucher(quantity="10", day=date(2024, 1, 1)))
    voucher_service.create_voucher(db, user.id, voucher(quantity="20", day=date(2024, 1, 15)))
    voucher_service.create_voucher(db, user.id, voucher(quantity="40", day=date(2024, 2, 1)))
    db.commit()

    snapshot = get_inventory_item(db, user.id, RESIN, start_date=date(2024, 1, 1), end_date=date(2024, 1, 15))
    assert snapshot.available_stock == Decimal("30")


def test_inventory_is_partitioned_by_user(db, user):
    other = User(username="other", hashed_password="x")
    db.add(other)
    db.commit()
    voucher_service.create_voucher(db, other.id, voucher(quantity="10"))
    db.commit()

    assert get_inventory_item(db, user.id, RESIN).available_stock == 0
    assert get_raw_materials_inventory(db, user.id) == []


def test_raw_materials_inventory_filters_case_insensitively(db, user):
    voucher_service.create_voucher(db, user.id, voucher(name=RESIN))
    voucher_service.create_voucher(db, user.id, voucher(name=FILLER))
    db.commit()

    names = [s.name for s in get_raw_materials_inventory(db, user.id, "resin")]
    assert names == [RESIN]
    assert [s.name for s in get_raw_materials_inventory(db, user.id)] == [FILLER, RESIN]


def test_raw_materials_inventory_keeps_negative_stock(db, user):
    voucher_service.create_voucher(db, user.id, voucher(quantity="-5"))
    db.commit()

    [snapshot] = get_raw_materials_inventory(db, user.id)
    assert snapshot.available_stock == Decimal("-5")


def test_finished_goods_inventory_lists_only_stock_on_hand(db, user):
    voucher_service.create_voucher(db, user.id, voucher(name=RESIN, quantity="60"))
    voucher_service.create_voucher(db, user.id, voucher(name=FILLER, quantity="40", price="7"))
    p = process_service.create_process(db, user.id, process())
    output_service.create_output(db, user.id, output(p.id, product="Zeta"))
    output_service.create_output(db, user.id, output(p.id, product="Alpha"))
    sale_service.record_sale(db, user.id, sale(quantity="100", product="Zeta"))
    db.commit()

    goods = get_finished_goods_inventory(db, user.id)
    assert [g.name for g in goods] == ["Alpha"]
    assert goods[0].code == "FG-Alpha"
    assert goods[0].quantity_type == "KG"


def test_voucher_item_names_exclude_generated_entries(db, user):
    voucher_service.create_voucher(db, user.id, voucher(name=RESIN, quantity="60"))
    voucher_service.create_voucher(db, user.id, voucher(name=FILLER, quantity="40", price="7"))
    voucher_service.create_voucher(db, user.id, voucher(name="Wastage", quantity="-1"))
    process_service.create_process(db, user.id, process())
    db.commit()

    assert get_voucher_item_names(db, user.id) == [FILLER, RESIN]
