"""Raw-material voucher mutations. Callers wrap these in run_mutation."""
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models.voucher import Voucher
from app.schemas.voucher import VoucherCreate, VoucherUpdate
from app.services.reconciler import Mutation
from app.services.inventory_service import line_total, negative_stock_warnings


def get_owned_voucher(db: Session, user_id: int, voucher_id: int) -> Voucher:
    voucher = db.query(Voucher).filter(Voucher.id == voucher_id, Voucher.user_id == user_id).first()
    if not voucher:
        raise NotFoundError("Voucher")
    return voucher


def _ensure_editable(voucher: Voucher) -> None:
    if voucher.process_id is not None:
        raise ValidationError("This entry belongs to a process. Edit or delete the process instead.")
    if voucher.output_id is not None:
        raise ValidationError("This entry belongs to an output. Edit or delete the output instead.")


def _apply(voucher: Voucher, data: VoucherCreate) -> None:
    voucher.date = data.date
    voucher.name = data.name
    voucher.code = data.code
    voucher.quantity = data.quantity
    voucher.quantity_type = data.quantity_type
    voucher.price_per_unit = data.price_per_unit
    voucher.total_price = line_total(data.quantity, data.price_per_unit)
    voucher.remarks = data.remarks


def create_voucher(db: Session, user_id: int, data: VoucherCreate) -> Mutation:
    voucher = Voucher(user_id=user_id)
    _apply(voucher, data)
    db.add(voucher)
    db.flush()
    return Mutation(
        id=voucher.id,
        message="Voucher saved successfully!",
        changes={"name": voucher.name, "quantity": voucher.quantity},
        warnings=negative_stock_warnings(db, user_id, [voucher.name]),
    )


def update_voucher(db: Session, user_id: int, voucher_id: int, data: VoucherUpdate) -> Mutation:
    voucher = get_owned_voucher(db, user_id, voucher_id)
    _ensure_editable(voucher)

    old_name, old_quantity = voucher.name, Decimal(voucher.quantity)
    _apply(voucher, data)
    db.flush()

    return Mutation(
        id=voucher.id,
        message="Voucher updated successfully.",
        changes={
            "name": [old_name, voucher.name],
            "quantity": [old_quantity, voucher.quantity],
        },
        warnings=negative_stock_warnings(db, user_id, [old_name, voucher.name]),
    )


def delete_voucher(db: Session, user_id: int, voucher_id: int) -> Mutation:
    voucher = get_owned_voucher(db, user_id, voucher_id)
    _ensure_editable(voucher)

    name, quantity = voucher.name, voucher.quantity
    db.delete(voucher)
    db.flush()

    return Mutation(
        id=voucher_id,
        message="Voucher deleted successfully.",
        changes={"name": name, "quantity": quantity},
        warnings=negative_stock_warnings(db, user_id, [name]),
    )
