from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VoucherCreate(BaseModel):
    date: date
    name: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=64)
    quantity: Decimal = Field(decimal_places=3)  # positive = purchase, negative = consumption
    quantity_type: str = Field(min_length=1, max_length=32)
    price_per_unit: Decimal = Field(ge=0, decimal_places=4)
    remarks: Optional[str] = None

    @field_validator('name', 'code', 'quantity_type')
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Field is required')
        return v

    @field_validator('quantity')
    @classmethod
    def quantity_not_zero(cls, v: Decimal) -> Decimal:
        if v == 0:
            raise ValueError('Quantity cannot be zero')
        return v


class VoucherUpdate(VoucherCreate):
    pass


class VoucherRecord(BaseModel):
    id: int
    date: date
    name: str
    code: str
    quantity: float
    quantity_type: str
    price_per_unit: float
    total_price: float
    remarks: Optional[str] = None
    direction: str
    process_id: Optional[int] = None
    output_id: Optional[int] = None

    class Config:
        from_attributes = True
