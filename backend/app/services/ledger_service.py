"""Ledger views: typed production/sale entries and filtered record lists."""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.output import Output
from app.models.process import Process
from app.models.sale import Sale
from app.models.voucher import Voucher
from app.services.inventory_service import in_date_range

PRODUCTION = "Production"
SALE = "Sale"


@dataclass
class LedgerEntry:
    id: int
    date: date
    product_name: str
    type: str
    quantity: Decimal
    price_per_kg: Decimal
    client_code: Optional[str] = None


@dataclass
class LedgerSummary:
    total_produced: Decimal
    total_sold: Decimal
    available_stock: Decimal


def _in_range(day: date, start_date: Optional[date], end_date: Optional[date]) -> bool:
    if start_date and day < start_date:
        return False
    if end_date and day > end_date:
        return False
    return True


def build_output_ledger(
    outputs: Iterable[Output],
    sales: Iterable[Sale],
    name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[LedgerEntry]:
    """
    Merge outputs (positive quantity) and sales (negative quantity) into one
    chronological ledger. Same-day production is listed before same-day sales.
    """
    ledger = []
    for o in outputs:
        if (name and o.product_name != name) or not _in_range(o.date, start_date, end_date):
            continue
        ledger.append(
            LedgerEntry(
                id=o.id,
                date=o.date,
                product_name=o.product_name,
                type=PRODUCTION,
                quantity=Decimal(o.quantity_produced),
                price_per_kg=Decimal(o.final_average_price),
            )
        )
    for s in sales:
        if (name and s.product_name != name) or not _in_range(s.date, start_date, end_date):
            continue
        ledger.append(
            LedgerEntry(
                id=s.id,
                date=s.date,
                product_name=s.product_name,
                type=SALE,
                client_code=s.client_code,
                quantity=-Decimal(s.sale_qty),
                price_per_kg=Decimal(s.sale_price),
            )
        )

    ledger.sort(key=lambda e: (e.date, 0 if e.type == PRODUCTION else 1, e.id or 0))
    return ledger


def summarize_ledger(entries: Iterable[LedgerEntry]) -> LedgerSummary:
    """Totals over exactly the entries given, i.e. what the user is looking at."""
    total_produced = Decimal("0")
    total_sold = Decimal("0")
    for e in entries:
        if e.type == PRODUCTION:
            total_produced += e.quantity
        else:
            total_sold += -e.quantity
    return LedgerSummary(
        total_produced=total_produced,
        total_sold=total_sold,
        available_stock=total_produced - total_sold,
    )


def get_output_ledger(
    db: Session,
    user_id: int,
    name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[List[LedgerEntry], LedgerSummary]:
    outputs = db.query(Output).filter(Output.user_id == user_id)
    sales = db.query(Sale).filter(Sale.user_id == user_id)
    if name:
        outputs = outputs.filter(Output.product_name == name)
        sales = sales.filter(Sale.product_name == name)
    outputs = in_date_range(outputs, Output.date, start_date, end_date)
    sales = in_date_range(sales, Sale.date, start_date, end_date)

    entries = build_output_ledger(outputs.all(), sales.all(), name, start_date, end_date)
    return entries, summarize_ledger(entries)


def list_vouchers(
    db: Session,
    user_id: int,
    name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Voucher]:
    q = db.query(Voucher).filter(Voucher.user_id == user_id)
    if name:
        q = q.filter(Voucher.name == name)
    q = in_date_range(q, Voucher.date, start_date, end_date)
    return q.order_by(Voucher.date, Voucher.id).all()


def list_processes(
    db: Session,
    user_id: int,
    name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Process]:
    """Newest first."""
    q = db.query(Process).filter(Process.user_id == user_id)
    if name:
        q = q.filter(Process.process_name == name)
    q = in_date_range(q, Process.date, start_date, end_date)
    return q.order_by(Process.date.desc(), Process.id.desc()).all()


def list_outputs(
    db: Session,
    user_id: int,
    name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Output]:
    q = db.query(Output).filter(Output.user_id == user_id)
    if name:
        q = q.filter(Output.product_name == name)
    q = in_date_range(q, Output.date, start_date, end_date)
    return q.order_by(Output.date, Output.id).all()


def list_sales(
    db: Session,
    user_id: int,
    name: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Sale]:
    q = db.query(Sale).filter(Sale.user_id == user_id)
    if name:
        q = q.filter(Sale.product_name == name)
    q = in_date_range(q, Sale.date, start_date, end_date)
    return q.order_by(Sale.date, Sale.id).all()
