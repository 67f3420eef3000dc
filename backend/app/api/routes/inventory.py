"""Read-only stock views. Every number is recomputed from the transactions."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_session
from app.core.context import SessionContext
from app.schemas.inventory import FinishedGood, InventoryItem
from app.services.inventory_service import (
    get_finished_goods_inventory,
    get_inventory_item,
    get_raw_materials_inventory,
)

router = APIRouter()


@router.get("/raw-materials", response_model=List[InventoryItem])
def raw_materials(
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """All raw materials, including any that have gone negative."""
    return get_raw_materials_inventory(db, session.user_id, name)


@router.get("/raw-materials/item", response_model=InventoryItem)
def raw_material_item(
    name: str = Query(..., min_length=1),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Stock and average price of one material. Unknown names come back empty, not 404."""
    return get_inventory_item(db, session.user_id, name, start_date, end_date)


@router.get("/finished-goods", response_model=List[InventoryItem])
def finished_goods(
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    return get_finished_goods_inventory(db, session.user_id, name)


@router.get("/finished-goods/available", response_model=List[FinishedGood])
def sellable_goods(db: Session = Depends(get_db), session: SessionContext = Depends(get_current_session)):
    """Products that can be sold right now."""
    return get_finished_goods_inventory(db, session.user_id)
