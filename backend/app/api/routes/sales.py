"""Finished-goods sales."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_session
from app.api.responses import mutation_response
from app.core.context import SessionContext
from app.core.exceptions import BusinessError, NotFoundError
from app.schemas.sale import SaleCreate, SaleRecord, SaleUpdate
from app.services import sale_service
from app.services.ledger_service import list_sales
from app.services.reconciler import run_mutation

router = APIRouter()


@router.get("", response_model=List[SaleRecord])
def get_sales(
    name: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    return list_sales(db, session.user_id, name, start_date, end_date)


@router.get("/{sale_id}", response_model=SaleRecord)
def get_sale(sale_id: int, db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    try:
        return sale_service.get_owned_sale(db, session.user_id, sale_id)
    except NotFoundError:
        raise BusinessError.not_found("Sale")


@router.post("")
def record_sale(
    data: SaleCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Rejected with 409 when the product does not have enough stock."""
    result = run_mutation(
        db, session, "create", "sale",
        lambda: sale_service.record_sale(db, session.user_id, data),
    )
    return mutation_response(result, status.HTTP_201_CREATED)


@router.put("/{sale_id}")
def update_sale(
    sale_id: int,
    data: SaleUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    result = run_mutation(
        db, session, "update", "sale",
        lambda: sale_service.update_sale(db, session.user_id, sale_id, data),
    )
    return mutation_response(result)


@router.delete("/{sale_id}")
def delete_sale(sale_id: int, db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    result = run_mutation(
        db, session, "delete", "sale",
        lambda: sale_service.delete_sale(db, session.user_id, sale_id),
    )
    return mutation_response(result)
