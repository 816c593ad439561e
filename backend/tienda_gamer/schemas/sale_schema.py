# backend/tienda_gamer/schemas/sale_schema.py
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SaleCreate(BaseModel):
    """Esquema para registrar una venta directa."""
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0)


class Sale(BaseModel):
    id: int
    product_id: str
    quantity: int
    total_price: int
    sold_by: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SaleSearchQuery(BaseModel):
    sale_date: Optional[date] = None
    sold_by: Optional[str] = None
