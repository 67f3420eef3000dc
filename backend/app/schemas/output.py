from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

DeductionUnit = Literal["kg", "%"]


class OutputCreate(BaseModel):
    """quantity_produced and final_average_price are always derived server-side."""
    date: date
    product_name: str = Field(min_length=1, max_length=255)
    process_id: int
    scrape: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=3)
    scrape_unit: DeductionUnit = "kg"
    reduction: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=3)
    reduction_unit: DeductionUnit = "kg"
    process_charge: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=4)
    notes: Optional[str] = None


class OutputUpdate(OutputCreate):
    # None keeps the current process link (or the cost snapshot if the process is gone)
    process_id: Optional[int] = None


class OutputRecord(BaseModel):
    id: int
    date: date
    product_name: str
    process_id: Optional[int] = None
    process_used: str
    total_process_output: float
    total_cost: float
    scrape: float
    scrape_unit: str
    reduction: float
    reduction_unit: str
    process_charge: float
    quantity_produced: float
    quantity_type: str
    final_average_price: float
    notes: Optional[str] = None

    class Config:
        from_attributes = True
