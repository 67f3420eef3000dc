"""Stock levels and weighted-average costs.

Nothing here is cached: every snapshot is recomputed from the transaction
rows, so an edit or delete is reflected as soon as it is flushed.
"""
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import format_quantity
from app.models.output import Output
from app.models.process import Process
from app.models.sale import Sale
from app.models.voucher import Voucher

ZERO = Decimal("0")
PRICE_PLACES = Decimal("0.0001")


@dataclass
class StockSnapshot:
    name: str = ""
    available_stock: Decimal = ZERO
    average_price: Decimal = ZERO
    code: str = ""
    quantity_type: str = ""


def in_date_range(query, column, start_date: Optional[date] = None, end_date: Optional[date] = None):
    """Inclusive whole-day bounds."""
    if start_date:
        query = query.filter(column >= start_date)
    if end_date:
        query = query.filter(column <= end_date)
    return query


def summarize_raw_material(vouchers: Iterable[Voucher], name: str = "") -> StockSnapshot:
    """
    Available stock is the sum of all signed quantities. The average price
    only looks at inflows: total value of positive vouchers over their total
    quantity. Negative stock is returned as-is.
    """
    vouchers = list(vouchers)
    if not vouchers:
        return StockSnapshot(name=name)

    inflows = [v for v in vouchers if v.quantity > 0]
    inflow_qty = sum((v.quantity for v in inflows), ZERO)
    inflow_value = sum((v.total_price for v in inflows), ZERO)
    available = sum((v.quantity for v in vouchers), ZERO)
    average = (inflow_value / inflow_qty).quantize(PRICE_PLACES) if inflow_qty > 0 else ZERO

    latest = max(vouchers, key=lambda v: (v.date, v.id or 0))
    return StockSnapshot(
        name=name or latest.name,
        available_stock=available,
        average_price=average,
        code=latest.code,
        quantity_type=latest.quantity_type,
    )


def summarize_finished_good(outputs: Iterable[Output], sales: Iterable[Sale], name: str = "") -> StockSnapshot:
    """
    Available stock is everything produced minus everything sold. The average
    price weights each batch's final price by its quantity; batches with no
    positive quantity carry no weight.
    """
    outputs = list(outputs)
    sales = list(sales)

    produced = sum((o.quantity_produced for o in outputs), ZERO)
    sold = sum((s.sale_qty for s in sales), ZERO)

    weighted = [o for o in outputs if o.quantity_produced > 0]
    weight = sum((o.quantity_produced for o in weighted), ZERO)
    value = sum((o.quantity_produced * o.final_average_price for o in weighted), ZERO)
    average = (value / weight).quantize(PRICE_PLACES) if weight > 0 else ZERO

    quantity_type = "KG"
    if outputs:
        quantity_type = max(outputs, key=lambda o: (o.date, o.id or 0)).quantity_type or "KG"

    return StockSnapshot(
        name=name,
        available_stock=produced - sold,
        average_price=average,
        code=f"FG-{name}" if name else "",
        quantity_type=quantity_type,
    )


def get_inventory_item(
    db: Session,
    user_id: int,
    name: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    exclude_process_id: Optional[int] = None,
) -> StockSnapshot:
    """Raw-material snapshot. exclude_process_id leaves out that process's own consumption."""
    if not name:
        return StockSnapshot()

    q = db.query(Voucher).filter(Voucher.user_id == user_id, Voucher.name == name)
    q = in_date_range(q, Voucher.date, start_date, end_date)
    if exclude_process_id is not None:
        q = q.filter(or_(Voucher.process_id.is_(None), Voucher.process_id != exclude_process_id))
    return summarize_raw_material(q.all(), name=name)


def get_product_stock(
    db: Session,
    user_id: int,
    product_name: str,
    exclude_sale_id: Optional[int] = None,
) -> StockSnapshot:
    """Finished-good snapshot, optionally as if one sale did not exist."""
    outputs = db.query(Output).filter(Output.user_id == user_id, Output.product_name == product_name)
    sales = db.query(Sale).filter(Sale.user_id == user_id, Sale.product_name == product_name)
    if exclude_sale_id is not None:
        sales = sales.filter(Sale.id != exclude_sale_id)
    return summarize_finished_good(outputs.all(), sales.all(), name=product_name)


def negative_stock_warnings(db: Session, user_id: int, names: Iterable[str]) -> List[str]:
    """One warning per raw material in names whose stock is now below zero."""
    warnings = []
    for name in dict.fromkeys(names):
        snapshot = get_inventory_item(db, user_id, name)
        if snapshot.available_stock < 0:
            warnings.append(f"Warning: {name} stock is now {format_quantity(snapshot.available_stock)}.")
    return warnings


def line_total(quantity: Decimal, price: Decimal) -> Decimal:
    """quantity * price at the stored money precision."""
    return (Decimal(quantity) * Decimal(price)).quantize(PRICE_PLACES, rounding=ROUND_HALF_UP)


def _matches(name: str, name_filter: Optional[str]) -> bool:
    return not name_filter or name_filter.lower() in name.lower()


def get_raw_materials_inventory(db: Session, user_id: int, name_filter: Optional[str] = None) -> List[StockSnapshot]:
    """Every raw material seen in the vouchers, negative stock included."""
    grouped: Dict[str, List[Voucher]] = defaultdict(list)
    for v in db.query(Voucher).filter(Voucher.user_id == user_id).all():
        grouped[v.name].append(v)

    return [
        summarize_raw_material(vouchers, name=name)
        for name, vouchers in sorted(grouped.items())
        if _matches(name, name_filter)
    ]


def get_finished_goods_inventory(db: Session, user_id: int, name_filter: Optional[str] = None) -> List[StockSnapshot]:
    """Finished goods with stock on hand, sorted by name."""
    outputs: Dict[str, List[Output]] = defaultdict(list)
    sales: Dict[str, List[Sale]] = defaultdict(list)
    for o in db.query(Output).filter(Output.user_id == user_id).all():
        outputs[o.product_name].append(o)
    for s in db.query(Sale).filter(Sale.user_id == user_id).all():
        sales[s.product_name].append(s)

    inventory = []
    for name in sorted(outputs):
        if not _matches(name, name_filter):
            continue
        snapshot = summarize_finished_good(outputs[name], sales.get(name, []), name=name)
        if snapshot.available_stock > 0:
            inventory.append(snapshot)
    return inventory


def get_voucher_item_names(db: Session, user_id: int) -> List[str]:
    """Names of purchased materials, for the process form."""
    rows = (
        db.query(Voucher.name)
        .filter(
            Voucher.user_id == user_id,
            Voucher.quantity > 0,
            Voucher.process_id.is_(None),
            Voucher.output_id.is_(None),
        )
        .distinct()
        .all()
    )
    return sorted(name for (name,) in rows)


def process_total_cost(process: Process) -> Decimal:
    return sum((m.rate * m.quantity for m in process.materials), ZERO)


def get_process_details(db: Session, user_id: int) -> List[dict]:
    processes = (
        db.query(Process)
        .filter(Process.user_id == user_id)
        .order_by(Process.date.desc(), Process.id.desc())
        .all()
    )
    return [
        {
            "process_id": p.id,
            "process_name": p.process_name,
            "total_process_output": p.total_process_output,
            "total_cost": process_total_cost(p),
        }
        for p in processes
    ]


def get_unique_process_names(db: Session, user_id: int) -> List[str]:
    rows = db.query(Process.process_name).filter(Process.user_id == user_id).distinct().all()
    return sorted(name for (name,) in rows)
