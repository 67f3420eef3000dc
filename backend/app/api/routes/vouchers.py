"""Raw-material vouchers: purchases (IN) and manual consumption (OUT)."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_session
from app.api.responses import mutation_response
from app.core.context import SessionContext
from app.schemas.voucher import VoucherCreate, VoucherRecord, VoucherUpdate
from app.services import voucher_service
from app.services.inventory_service import get_voucher_item_names
from app.services.ledger_service import list_vouchers
from app.services.reconciler import run_mutation

router = APIRouter()


@router.get("", response_model=List[VoucherRecord])
def get_vouchers(
    name: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Voucher ledger, oldest first. Each entry is marked IN or OUT."""
    return list_vouchers(db, session.user_id, name, start_date, end_date)


@router.get("/item-names", response_model=List[str])
def item_names(db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    return get_voucher_item_names(db, session.user_id)


@router.post("")
def create_voucher(
    data: VoucherCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    result = run_mutation(
        db, session, "create", "voucher",
        lambda: voucher_service.create_voucher(db, session.user_id, data),
    )
    return mutation_response(result, status.HTTP_201_CREATED)


@router.put("/{voucher_id}")
def update_voucher(
    voucher_id: int,
    data: VoucherUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    result = run_mutation(
        db, session, "update", "voucher",
        lambda: voucher_service.update_voucher(db, session.user_id, voucher_id, data),
    )
    return mutation_response(result)


@router.delete("/{voucher_id}")
def delete_voucher(
    voucher_id: int,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    result = run_mutation(
        db, session, "delete", "voucher",
        lambda: voucher_service.delete_voucher(db, session.user_id, voucher_id),
    )
    return mutation_response(result)
