from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class SaleCreate(BaseModel):
    date: date
    product_name: str = Field(min_length=1, max_length=255)
    client_code: str = Field(min_length=1, max_length=64)
    sale_qty: Decimal = Field(gt=0, decimal_places=3)
    sale_price: Decimal = Field(ge=0, decimal_places=4)


class SaleUpdate(SaleCreate):
    pass


class SaleRecord(BaseModel):
    id: int
    date: date
    product_name: str
    client_code: str
    sale_qty: float
    sale_price: float
    total_amount: float

    class Config:
        from_attributes = True
