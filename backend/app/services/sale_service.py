"""Finished-goods sales. Every sale is checked against current stock."""
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import InsufficientStockError, NotFoundError
from app.models.sale import Sale
from app.schemas.sale import SaleCreate, SaleUpdate
from app.services.reconciler import Mutation
from app.services.inventory_service import get_product_stock, line_total


def get_owned_sale(db: Session, user_id: int, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.id == sale_id, Sale.user_id == user_id).first()
    if not sale:
        raise NotFoundError("Sale")
    return sale


def _check_stock(db: Session, user_id: int, data: SaleCreate, exclude_sale_id: Optional[int] = None) -> None:
    snapshot = get_product_stock(db, user_id, data.product_name, exclude_sale_id=exclude_sale_id)
    if data.sale_qty > snapshot.available_stock:
        raise InsufficientStockError(data.product_name, snapshot.available_stock, data.sale_qty)


def _apply(sale: Sale, data: SaleCreate) -> None:
    sale.date = data.date
    sale.product_name = data.product_name
    sale.client_code = data.client_code
    sale.sale_qty = data.sale_qty
    sale.sale_price = data.sale_price
    sale.total_amount = line_total(data.sale_qty, data.sale_price)


def record_sale(db: Session, user_id: int, data: SaleCreate) -> Mutation:
    _check_stock(db, user_id, data)

    sale = Sale(user_id=user_id)
    _apply(sale, data)
    db.add(sale)
    db.flush()

    return Mutation(
        id=sale.id,
        message="Sale recorded and inventory updated.",
        changes={"product_name": sale.product_name, "sale_qty": sale.sale_qty},
    )


def update_sale(db: Session, user_id: int, sale_id: int, data: SaleUpdate) -> Mutation:
    """
    Stock is checked as if this sale had never been made, so keeping or
    lowering its quantity always passes.
    """
    sale = get_owned_sale(db, user_id, sale_id)
    _check_stock(db, user_id, data, exclude_sale_id=sale.id)

    old_quantity = Decimal(sale.sale_qty)
    _apply(sale, data)
    db.flush()

    return Mutation(
        id=sale.id,
        message="Sale updated successfully.",
        changes={"sale_qty": [old_quantity, sale.sale_qty]},
    )


def delete_sale(db: Session, user_id: int, sale_id: int) -> Mutation:
    sale = get_owned_sale(db, user_id, sale_id)
    product_name, quantity = sale.product_name, sale.sale_qty

    db.delete(sale)
    db.flush()

    return Mutation(
        id=sale_id,
        message="Sale deleted and stock returned to inventory.",
        changes={"product_name": product_name, "sale_qty": quantity},
    )
