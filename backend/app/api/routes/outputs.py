"""Finished-goods outputs and the production/sales ledger."""
from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_session
from app.api.responses import mutation_response
from app.core.context import SessionContext
from app.core.exceptions import BusinessError, NotFoundError
from app.schemas.inventory import OutputLedger
from app.schemas.output import OutputCreate, OutputRecord, OutputUpdate
from app.services import output_service
from app.services.ledger_service import get_output_ledger, list_outputs
from app.services.reconciler import run_mutation

router = APIRouter()


@router.get("", response_model=List[OutputRecord])
def get_outputs(
    name: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    return list_outputs(db, session.user_id, name, start_date, end_date)


@router.get("/ledger", response_model=OutputLedger)
def output_ledger(
    name: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Production and sale entries in date order, with totals over what is shown."""
    entries, summary = get_output_ledger(db, session.user_id, name, start_date, end_date)
    return OutputLedger(entries=[asdict(e) for e in entries], summary=asdict(summary))


@router.get("/{output_id}", response_model=OutputRecord)
def get_output(output_id: int, db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    try:
        return output_service.get_owned_output(db, session.user_id, output_id)
    except NotFoundError:
        raise BusinessError.not_found("Output")


@router.post("")
def create_output(
    data: OutputCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """quantity_produced and final_average_price are computed here, never taken from the client."""
    result = run_mutation(
        db, session, "create", "output",
        lambda: output_service.create_output(db, session.user_id, data),
    )
    return mutation_response(result, status.HTTP_201_CREATED)


@router.put("/{output_id}")
def update_output(
    output_id: int,
    data: OutputUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    result = run_mutation(
        db, session, "update", "output",
        lambda: output_service.update_output(db, session.user_id, output_id, data),
    )
    return mutation_response(result)


@router.delete("/{output_id}")
def delete_output(output_id: int, db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    result = run_mutation(
        db, session, "delete", "output",
        lambda: output_service.delete_output(db, session.user_id, output_id),
    )
    return mutation_response(result)
