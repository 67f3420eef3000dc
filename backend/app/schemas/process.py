from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RawMaterialLine(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=64)
    quantity_type: str = Field(min_length=1, max_length=32)
    quantity: Decimal = Field(gt=0, decimal_places=3)
    ratio: Optional[Decimal] = Field(default=None, ge=0, decimal_places=3)
    # Defaults to the material's current average price
    rate: Optional[Decimal] = Field(default=None, ge=0, decimal_places=4)

    @field_validator('name', 'code', 'quantity_type')
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Field is required')
        return v


class ProcessCreate(BaseModel):
    date: date
    process_name: str = Field(min_length=1, max_length=255)
    output_product: Optional[str] = None
    total_process_output: Decimal = Field(gt=0, decimal_places=3)
    output_unit: str = Field(min_length=1, max_length=32)
    raw_materials: List[RawMaterialLine] = Field(min_length=1)
    notes: Optional[str] = None

    @field_validator('process_name', 'output_unit')
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Field is required')
        return v


class ProcessUpdate(ProcessCreate):
    pass


class RawMaterialRecord(BaseModel):
    name: str
    code: str
    quantity_type: str
    quantity: float
    ratio: Optional[float] = None
    rate: float

    class Config:
        from_attributes = True


class ProcessRecord(BaseModel):
    id: int
    date: date
    process_name: str
    output_product: Optional[str] = None
    total_process_output: float
    output_unit: str
    notes: Optional[str] = None
    raw_materials: List[RawMaterialRecord]
    total_cost: float


class ProcessDetails(BaseModel):
    process_id: int
    process_name: str
    total_process_output: float
    total_cost: float
