from decimal import Decimal

from app.services.output_service import compute_output_costing, deduction_quantity


def test_worked_example():
    costing = compute_output_costing(
        Decimal("100"),
        Decimal("1000"),
        scrape=Decimal("5"),
        scrape_unit="kg",
        reduction=Decimal("10"),
        reduction_unit="%",
        process_charge=Decimal("2"),
    )
    assert costing.scrape_qty == Decimal("5")
    assert costing.reduction_qty == Decimal("10")
    assert costing.net_quantity == Decimal("85")
    # 1000 / 85 + 2 = 13.7647...
    assert costing.final_average_price == Decimal("13.76")


def test_no_deductions_spreads_cost_over_total_output():
    costing = compute_output_costing(Decimal("200"), Decimal("1000"))
    assert costing.net_quantity == Decimal("200")
    assert costing.final_average_price == Decimal("5.00")


def test_price_rounds_half_up():
    # 1 / 8 = 0.125
    costing = compute_output_costing(Decimal("8"), Decimal("1"))
    assert costing.final_average_price == Decimal("0.13")


def test_percent_deductions_scale_with_output():
    assert deduction_quantity(Decimal("5"), "%", Decimal("200")) == Decimal("10")
    assert deduction_quantity(Decimal("5"), "kg", Decimal("200")) == Decimal("5")
    assert deduction_quantity(None, "kg", Decimal("200")) == Decimal("0")


def test_nothing_left_after_deductions_prices_at_zero():
    costing = compute_output_costing(
        Decimal("100"), Decimal("1000"), scrape=Decimal("60"), reduction=Decimal("40"),
    )
    assert costing.net_quantity == Decimal("0")
    assert costing.final_average_price == Decimal("0")


def test_over_deduction_gives_negative_quantity():
    costing = compute_output_costing(Decimal("100"), Decimal("1000"), scrape=Decimal("80"), reduction=Decimal("40"))
    assert costing.net_quantity == Decimal("-20")
    assert costing.final_average_price == Decimal("0")
