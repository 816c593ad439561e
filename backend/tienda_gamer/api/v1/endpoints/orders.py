# backend/tienda_gamer/api/v1/endpoints/orders.py
"""
Historial de pedidos pagados del cliente autenticado.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.api import deps
from tienda_gamer.crud import order_crud
from tienda_gamer.schemas.order_schema import PaymentOrder

router = APIRouter()


@router.get("/me", response_model=List[PaymentOrder])
async def read_my_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(deps.require_user_id),
    db: AsyncSession = Depends(deps.get_db),
):
    """Pedidos del usuario, los más recientes primero."""
    return await order_crud.get_orders_by_user(db, user_id, skip=skip, limit=limit)
