"""Output costing against stored processes, scrape receipts and deletes."""
from decimal import Decimal

import pytest

from app.core.exceptions import NotFoundError
from app.models import Output, Voucher
from app.services import output_service, process_service, sale_service, voucher_service
from app.services.inventory_service import get_inventory_item, get_product_stock

from builders import FILLER, PRODUCT, RESIN, output, process, sale, voucher

SCRAPE = f"{PRODUCT} - SCRAPE"


@pytest.fixture
def batch(db, user):
    voucher_service.create_voucher(db, user.id, voucher(name=RESIN, quantity="60", price="12"))
    voucher_service.create_voucher(db, user.id, voucher(name=FILLER, quantity="40", price="7"))
    created = process_service.create_process(db, user.id, process())
    db.commit()
    return created.id


def _worked_example(process_id, **kwargs):
    return output(process_id, scrape="5", reduction="10", reduction_unit="%", charge="2", **kwargs)


def test_create_costs_from_the_process(db, user, batch):
    result = output_service.create_output(db, user.id, _worked_example(batch))
    db.commit()

    made = db.get(Output, result.id)
    assert made.process_used == "Batch 1"
    assert made.total_cost == Decimal("1000")
    assert made.quantity_produced == Decimal("85")
    assert made.final_average_price == Decimal("13.76")
    assert made.quantity_type == "KG"

    snapshot = get_product_stock(db, user.id, PRODUCT)
    assert snapshot.available_stock == Decimal("85")
    assert snapshot.average_price == Decimal("13.76")


def test_scrape_is_received_at_zero_cost(db, user, batch):
    result = output_service.create_output(db, user.id, _worked_example(batch))
    db.commit()

    assert result.message == "Output and scrape saved to inventory."
    [receipt] = db.query(Voucher).filter(Voucher.output_id == result.id).all()
    assert receipt.name == SCRAPE
    assert receipt.code == f"SCRAPE-{PRODUCT}"
    assert receipt.remarks == "SCRAPE FROM Batch 1"
    snapshot = get_inventory_item(db, user.id, SCRAPE)
    assert snapshot.available_stock == Decimal("5")
    assert snapshot.average_price == 0


def test_percent_scrape_is_received_as_quantity(db, user, batch):
    result = output_service.create_output(db, user.id, output(batch, scrape="2", scrape_unit="%"))
    db.commit()

    assert get_inventory_item(db, user.id, SCRAPE).available_stock == Decimal("2")
    assert db.get(Output, result.id).quantity_produced == Decimal("98")


def test_missing_process_is_rejected(db, user, batch):
    with pytest.raises(NotFoundError):
        output_service.create_output(db, user.id, output(batch + 100))


def test_edit_recosts_and_rewrites_scrape(db, user, batch):
    created = output_service.create_output(db, user.id, _worked_example(batch))
    db.commit()

    output_service.update_output(db, user.id, created.id, output(batch, scrape="0", update=True))
    db.commit()

    made = db.get(Output, created.id)
    assert made.quantity_produced == Decimal("100")
    assert made.final_average_price == Decimal("10")
    assert db.query(Voucher).filter(Voucher.name == SCRAPE).count() == 0


def test_edit_after_process_delete_uses_cost_snapshot(db, user, batch):
    created = output_service.create_output(db, user.id, _worked_example(batch))
    db.commit()
    process_service.delete_process(db, user.id, batch)
    db.commit()

    output_service.update_output(
        db, user.id, created.id, output(None, reduction="20", charge="0", update=True)
    )
    db.commit()

    made = db.get(Output, created.id)
    assert made.process_id is None
    assert made.process_used == "Batch 1"
    assert made.quantity_produced == Decimal("80")
    assert made.final_average_price == Decimal("12.50")


def test_delete_removes_batch_but_not_consumption(db, user, batch):
    created = output_service.create_output(db, user.id, _worked_example(batch))
    db.commit()

    output_service.delete_output(db, user.id, created.id)
    db.commit()

    assert get_product_stock(db, user.id, PRODUCT).available_stock == 0
    assert get_inventory_item(db, user.id, SCRAPE).available_stock == 0
    assert get_inventory_item(db, user.id, RESIN).available_stock == 0


def test_delete_with_sales_warns_about_negative_stock(db, user, batch):
    created = output_service.create_output(db, user.id, _worked_example(batch))
    sale_service.record_sale(db, user.id, sale(quantity="25"))
    db.commit()

    result = output_service.delete_output(db, user.id, created.id)
    db.commit()

    assert result.warnings == [f"Warning: {PRODUCT} stock is now -25."]
    assert get_product_stock(db, user.id, PRODUCT).available_stock == Decimal("-25")


def _regrind_scrape(db, user):
    """Feed all 5 kg of scrape into a later process."""
    process_service.create_process(
        db, user.id, process(materials=((SCRAPE, "5"),), total_output="5", name="Regrind")
    )
    db.commit()
    assert get_inventory_item(db, user.id, SCRAPE).available_stock == 0


def test_delete_warns_when_consumed_scrape_goes_negative(db, user, batch):
    created = output_service.create_output(db, user.id, _worked_example(batch))
    db.commit()
    _regrind_scrape(db, user)

    result = output_service.delete_output(db, user.id, created.id)
    db.commit()

    assert result.warnings == [f"Warning: {SCRAPE} stock is now -5."]
    assert get_inventory_item(db, user.id, SCRAPE).available_stock == Decimal("-5")


def test_shrinking_consumed_scrape_warns(db, user, batch):
    created = output_service.create_output(db, user.id, _worked_example(batch))
    db.commit()
    _regrind_scrape(db, user)

    edit = output(batch, scrape="2", reduction="10", reduction_unit="%", charge="2", update=True)
    result = output_service.update_output(db, user.id, created.id, edit)
    db.commit()

    assert result.warnings == [f"Warning: {SCRAPE} stock is now -3."]
    assert get_inventory_item(db, user.id, SCRAPE).available_stock == Decimal("-3")
