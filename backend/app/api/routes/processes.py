"""Production processes: consume raw materials toward an output."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_session
from app.api.responses import mutation_response
from app.core.context import SessionContext
from app.core.exceptions import BusinessError, NotFoundError
from app.models.process import Process
from app.schemas.process import ProcessCreate, ProcessDetails, ProcessRecord, ProcessUpdate, RawMaterialRecord
from app.services import process_service
from app.services.inventory_service import get_process_details, get_unique_process_names, process_total_cost
from app.services.ledger_service import list_processes
from app.services.reconciler import run_mutation

router = APIRouter()


def _to_record(process: Process) -> ProcessRecord:
    return ProcessRecord(
        id=process.id,
        date=process.date,
        process_name=process.process_name,
        output_product=process.output_product,
        total_process_output=process.total_process_output,
        output_unit=process.output_unit,
        notes=process.notes,
        raw_materials=[RawMaterialRecord.model_validate(m) for m in process.materials],
        total_cost=process_total_cost(process),
    )


@router.get("", response_model=List[ProcessRecord])
def get_processes(
    name: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Newest first."""
    return [_to_record(p) for p in list_processes(db, session.user_id, name, start_date, end_date)]


@router.get("/names", response_model=List[str])
def process_names(db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    return get_unique_process_names(db, session.user_id)


@router.get("/details", response_model=List[ProcessDetails])
def process_details(db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    """Process picker for the output form: output quantity and total cost per process."""
    return get_process_details(db, session.user_id)


@router.get("/{process_id}", response_model=ProcessRecord)
def get_process(process_id: int, db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    try:
        return _to_record(process_service.get_owned_process(db, session.user_id, process_id))
    except NotFoundError:
        raise BusinessError.not_found("Process")


@router.post("")
def create_process(
    data: ProcessCreate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Rejected with 409 if any raw material is short; nothing is written in that case."""
    result = run_mutation(
        db, session, "create", "process",
        lambda: process_service.create_process(db, session.user_id, data),
    )
    return mutation_response(result, status.HTTP_201_CREATED)


@router.put("/{process_id}")
def update_process(
    process_id: int,
    data: ProcessUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    result = run_mutation(
        db, session, "update", "process",
        lambda: process_service.update_process(db, session.user_id, process_id, data),
    )
    return mutation_response(result)


@router.delete("/{process_id}")
def delete_process(process_id: int, db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    result = run_mutation(
        db, session, "delete", "process",
        lambda: process_service.delete_process(db, session.user_id, process_id),
    )
    return mutation_response(result)
