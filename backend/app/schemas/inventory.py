from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel


class InventoryItem(BaseModel):
    name: str
    code: str
    available_stock: float
    average_price: float
    quantity_type: str

    class Config:
        from_attributes = True


class FinishedGood(BaseModel):
    name: str
    available_stock: float

    class Config:
        from_attributes = True


class LedgerEntry(BaseModel):
    id: int
    date: date
    product_name: str
    type: Literal["Production", "Sale"]
    client_code: Optional[str] = None
    quantity: float
    price_per_kg: float

    class Config:
        from_attributes = True


class LedgerSummary(BaseModel):
    total_produced: float
    total_sold: float
    available_stock: float

    class Config:
        from_attributes = True


class OutputLedger(BaseModel):
    entries: List[LedgerEntry]
    summary: LedgerSummary
