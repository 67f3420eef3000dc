"""Production process mutations.

A process takes its raw materials out of stock through one negative voucher
per material line. Those vouchers are owned by the process: editing the
process regenerates them, deleting it removes them and the stock comes back.
"""
from collections import OrderedDict
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InsufficientStockError, NotFoundError
from app.models.output import Output
from app.models.process import Process, ProcessMaterial
from app.models.voucher import Voucher
from app.schemas.process import ProcessCreate, ProcessUpdate
from app.services.reconciler import Mutation
from app.services.inventory_service import get_inventory_item, line_total

RATIO_PLACES = Decimal("0.001")


def get_owned_process(db: Session, user_id: int, process_id: int) -> Process:
    process = db.query(Process).filter(Process.id == process_id, Process.user_id == user_id).first()
    if not process:
        raise NotFoundError("Process")
    return process


def _build_materials(
    db: Session,
    user_id: int,
    data: ProcessCreate,
    exclude_process_id: Optional[int] = None,
) -> List[ProcessMaterial]:
    """
    Check stock for every material, then build the material lines.

    A material listed on several lines is checked against its combined
    quantity. When editing, the snapshot leaves out the process's current
    consumption so an unchanged line is not counted twice.
    """
    required = OrderedDict()
    for line in data.raw_materials:
        required[line.name] = required.get(line.name, Decimal("0")) + line.quantity

    snapshots = {}
    for name, quantity in required.items():
        snapshot = get_inventory_item(db, user_id, name, exclude_process_id=exclude_process_id)
        if snapshot.available_stock < quantity:
            raise InsufficientStockError(name, snapshot.available_stock, quantity)
        snapshots[name] = snapshot

    materials = []
    for line_no, line in enumerate(data.raw_materials):
        rate = line.rate if line.rate is not None else snapshots[line.name].average_price
        ratio = line.ratio
        if ratio is None:
            ratio = (line.quantity / data.total_process_output * 100).quantize(RATIO_PLACES)
        materials.append(
            ProcessMaterial(
                line_no=line_no,
                name=line.name,
                code=line.code,
                quantity_type=line.quantity_type,
                quantity=line.quantity,
                ratio=ratio,
                rate=rate,
            )
        )
    return materials


def _consumption_vouchers(user_id: int, data: ProcessCreate, materials: List[ProcessMaterial]) -> List[Voucher]:
    return [
        Voucher(
            user_id=user_id,
            date=data.date,
            name=m.name,
            code=m.code,
            quantity=-m.quantity,
            quantity_type=m.quantity_type,
            price_per_unit=m.rate,
            total_price=-line_total(m.quantity, m.rate),
            remarks=f"USED IN {data.process_name}",
        )
        for m in materials
    ]


def _replace_consumption(db: Session, process: Process, vouchers: List[Voucher]) -> None:
    for old in process.consumption_vouchers:
        db.delete(old)
    process.consumption_vouchers = vouchers


def ratio_warning(materials: List[ProcessMaterial]) -> Optional[str]:
    """Ratios are expected to add up to ~100%. Off totals are reported, not rejected."""
    total = sum((m.ratio or Decimal("0") for m in materials), Decimal("0"))
    if abs(total - 100) > settings.RATIO_TOLERANCE:
        return f"Note: raw material ratios add up to {total.normalize():f}%, not 100%."
    return None


def _apply(process: Process, data: ProcessCreate) -> None:
    process.date = data.date
    process.process_name = data.process_name
    process.output_product = data.output_product
    process.total_process_output = data.total_process_output
    process.output_unit = data.output_unit
    process.notes = data.notes


def _consumed(materials: List[ProcessMaterial]) -> dict:
    consumed = {}
    for m in materials:
        consumed[m.name] = consumed.get(m.name, Decimal("0")) + Decimal(m.quantity)
    return consumed


def create_process(db: Session, user_id: int, data: ProcessCreate) -> Mutation:
    materials = _build_materials(db, user_id, data)

    process = Process(user_id=user_id)
    _apply(process, data)
    process.materials = materials
    _replace_consumption(db, process, _consumption_vouchers(user_id, data, materials))
    db.add(process)
    db.flush()

    warning = ratio_warning(materials)
    return Mutation(
        id=process.id,
        message="Process saved successfully, inventory updated.",
        changes={"process_name": process.process_name, "consumed": _consumed(materials)},
        warnings=[warning] if warning else [],
    )


def update_process(db: Session, user_id: int, process_id: int, data: ProcessUpdate) -> Mutation:
    process = get_owned_process(db, user_id, process_id)
    old_consumed = _consumed(process.materials)

    materials = _build_materials(db, user_id, data, exclude_process_id=process.id)

    _apply(process, data)
    process.materials = materials
    _replace_consumption(db, process, _consumption_vouchers(user_id, data, materials))

    # Outputs keep their cost snapshot; only the displayed name follows the process
    db.query(Output).filter(Output.process_id == process.id).update(
        {Output.process_used: data.process_name}, synchronize_session="fetch"
    )
    db.flush()

    warning = ratio_warning(materials)
    return Mutation(
        id=process.id,
        message="Process updated successfully.",
        changes={"consumed": [old_consumed, _consumed(materials)]},
        warnings=[warning] if warning else [],
    )


def delete_process(db: Session, user_id: int, process_id: int) -> Mutation:
    """
    Remove the process and its consumption vouchers, returning the raw
    materials to stock. Outputs made from it stay as they are and lose the
    link.
    """
    process = get_owned_process(db, user_id, process_id)
    returned = _consumed(process.materials)

    db.query(Output).filter(Output.process_id == process.id).update(
        {Output.process_id: None}, synchronize_session="fetch"
    )
    db.delete(process)
    db.flush()

    return Mutation(
        id=process_id,
        message="Process deleted and raw materials returned to stock.",
        changes={"returned": returned},
    )
