# backend/tienda_gamer/schemas/cart_schema.py
"""
Esquemas Pydantic para la gestión del carrito de la compra.
"""

import enum
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field


class ItemType(str, enum.Enum):
    """Tipos de entidad del catálogo que pueden ir al carrito."""
    PRODUCT = "product"
    COURSE = "course"
    SERVICE = "service"


class CartItemCreate(BaseModel):
    """Esquema para añadir un item al carrito (la cantidad implícita es 1)."""
    id: str = Field(..., min_length=1, description="ID de la entidad del catálogo")
    type: ItemType
    name: str
    price: int = Field(..., ge=0, description="Precio unitario en unidades enteras de moneda")
    image: Optional[str] = None


class CartItem(CartItemCreate):
    """Línea del carrito."""
    quantity: int = Field(1, ge=1)

    @property
    def subtotal(self) -> int:
        return self.price * self.quantity


class CartQuantityUpdate(BaseModel):
    """Nueva cantidad para una línea; cero o negativo elimina la línea."""
    quantity: int


class CartState(BaseModel):
    """Esquema que representa el estado completo del carrito."""
    items: List[CartItem] = Field(default_factory=list)

    @computed_field
    @property
    def total(self) -> int:
        # Siempre derivado de las líneas, nunca almacenado
        return sum(item.subtotal for item in self.items)
