# backend/tienda_gamer/schemas/order_schema.py
"""
Esquemas de respuesta del historial de pedidos pagados del cliente.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentOrderItem(BaseModel):
    item_id: str
    item_type: str
    name: str
    quantity: int
    price: int
    backordered_quantity: int = 0

    model_config = ConfigDict(from_attributes=True)


class PaymentOrder(BaseModel):
    """Pedido cobrado por Mercado Pago, tal como lo ve el cliente."""
    id: int
    payment_id: str
    external_reference: str
    description: Optional[str] = None
    total_amount: int
    status: str
    payment_method: Optional[str] = None
    oversold: bool = False
    created_at: Optional[datetime] = None
    items: List[PaymentOrderItem] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
