"""Finished-goods output costing and mutations.

An output turns a process's cost into a finished-goods batch:

    net quantity = total process output - scrape - reduction
    final average price = total cost / net quantity + process charge

Scrape and reduction are either absolute (kg) or a percentage of the total
process output. A positive scrape is also booked as a zero-cost raw
material receipt named "<product> - SCRAPE".

Deleting an output only takes its batch out of finished-goods stock. The raw
materials stay consumed until the process itself is deleted.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, format_quantity
from app.models.output import Output
from app.models.voucher import Voucher
from app.schemas.output import OutputCreate, OutputUpdate
from app.services.process_service import get_owned_process
from app.services.reconciler import Mutation
from app.services.inventory_service import get_product_stock, negative_stock_warnings, process_total_cost

ZERO = Decimal("0")
QTY_PLACES = Decimal("0.001")
PRICE_PLACES = Decimal("0.01")


@dataclass
class OutputCosting:
    scrape_qty: Decimal
    reduction_qty: Decimal
    net_quantity: Decimal
    final_average_price: Decimal


def deduction_quantity(amount: Decimal, unit: str, total_process_output: Decimal) -> Decimal:
    amount = Decimal(amount or 0)
    if unit == "%":
        return Decimal(total_process_output) * amount / 100
    return amount


def compute_output_costing(
    total_process_output: Decimal,
    total_cost: Decimal,
    scrape: Decimal = ZERO,
    scrape_unit: str = "kg",
    reduction: Decimal = ZERO,
    reduction_unit: str = "kg",
    process_charge: Decimal = ZERO,
) -> OutputCosting:
    total_process_output = Decimal(total_process_output)
    scrape_qty = deduction_quantity(scrape, scrape_unit, total_process_output)
    reduction_qty = deduction_quantity(reduction, reduction_unit, total_process_output)
    net_quantity = total_process_output - scrape_qty - reduction_qty

    if net_quantity > 0:
        price = Decimal(total_cost) / net_quantity + Decimal(process_charge or 0)
        final_average_price = price.quantize(PRICE_PLACES, rounding=ROUND_HALF_UP)
    else:
        final_average_price = ZERO.quantize(PRICE_PLACES)

    return OutputCosting(
        scrape_qty=scrape_qty.quantize(QTY_PLACES, rounding=ROUND_HALF_UP),
        reduction_qty=reduction_qty.quantize(QTY_PLACES, rounding=ROUND_HALF_UP),
        net_quantity=net_quantity.quantize(QTY_PLACES, rounding=ROUND_HALF_UP),
        final_average_price=final_average_price,
    )


def get_owned_output(db: Session, user_id: int, output_id: int) -> Output:
    output = db.query(Output).filter(Output.id == output_id, Output.user_id == user_id).first()
    if not output:
        raise NotFoundError("Output")
    return output


def _scrape_vouchers(user_id: int, output: Output, scrape_qty: Decimal) -> List[Voucher]:
    if scrape_qty <= 0:
        return []
    return [
        Voucher(
            user_id=user_id,
            date=output.date,
            name=f"{output.product_name} - SCRAPE",
            code=f"SCRAPE-{output.product_name}",
            quantity=scrape_qty,
            quantity_type="KG",
            price_per_unit=ZERO,
            total_price=ZERO,
            remarks=f"SCRAPE FROM {output.process_used}",
        )
    ]


def _apply(db: Session, user_id: int, output: Output, data: OutputCreate, process_id: Optional[int]) -> OutputCosting:
    """Copy the form onto the output and re-derive its quantity and price."""
    if process_id is not None:
        process = get_owned_process(db, user_id, process_id)
        output.process_id = process.id
        output.process_used = process.process_name
        output.total_process_output = process.total_process_output
        output.total_cost = process_total_cost(process)
        output.quantity_type = process.output_unit

    output.date = data.date
    output.product_name = data.product_name
    output.scrape = data.scrape
    output.scrape_unit = data.scrape_unit
    output.reduction = data.reduction
    output.reduction_unit = data.reduction_unit
    output.process_charge = data.process_charge
    output.notes = data.notes

    costing = compute_output_costing(
        output.total_process_output,
        output.total_cost,
        scrape=data.scrape,
        scrape_unit=data.scrape_unit,
        reduction=data.reduction,
        reduction_unit=data.reduction_unit,
        process_charge=data.process_charge,
    )
    output.quantity_produced = costing.net_quantity
    output.final_average_price = costing.final_average_price
    for old in output.scrape_vouchers:
        db.delete(old)
    output.scrape_vouchers = _scrape_vouchers(user_id, output, costing.scrape_qty)
    return costing


def _stock_warning(db: Session, user_id: int, product_name: str) -> List[str]:
    snapshot = get_product_stock(db, user_id, product_name)
    if snapshot.available_stock < 0:
        return [f"Warning: {product_name} stock is now {format_quantity(snapshot.available_stock)}."]
    return []


def create_output(db: Session, user_id: int, data: OutputCreate) -> Mutation:
    output = Output(user_id=user_id)
    costing = _apply(db, user_id, output, data, data.process_id)
    db.add(output)
    db.flush()

    return Mutation(
        id=output.id,
        message="Output and scrape saved to inventory." if costing.scrape_qty > 0 else "Output saved to inventory.",
        changes={
            "product_name": output.product_name,
            "quantity_produced": output.quantity_produced,
            "final_average_price": output.final_average_price,
        },
    )


def update_output(db: Session, user_id: int, output_id: int, data: OutputUpdate) -> Mutation:
    output = get_owned_output(db, user_id, output_id)
    old_name, old_quantity = output.product_name, Decimal(output.quantity_produced)
    scrape_names = [v.name for v in output.scrape_vouchers]

    # Re-read the process when there is one; otherwise cost from the stored snapshot
    process_id = data.process_id if data.process_id is not None else output.process_id
    _apply(db, user_id, output, data, process_id)
    db.flush()

    warnings = _stock_warning(db, user_id, old_name)
    if output.product_name != old_name:
        warnings += _stock_warning(db, user_id, output.product_name)
    scrape_names += [v.name for v in output.scrape_vouchers]
    warnings += negative_stock_warnings(db, user_id, scrape_names)

    return Mutation(
        id=output.id,
        message="Output updated successfully.",
        changes={"quantity_produced": [old_quantity, output.quantity_produced]},
        warnings=warnings,
    )


def delete_output(db: Session, user_id: int, output_id: int) -> Mutation:
    output = get_owned_output(db, user_id, output_id)
    product_name, quantity = output.product_name, output.quantity_produced
    scrape_names = [v.name for v in output.scrape_vouchers]

    db.delete(output)
    db.flush()

    warnings = _stock_warning(db, user_id, product_name)
    warnings += negative_stock_warnings(db, user_id, scrape_names)

    return Mutation(
        id=output_id,
        message="Output deleted and inventory adjusted.",
        changes={"product_name": product_name, "quantity_produced": quantity},
        warnings=warnings,
    )
