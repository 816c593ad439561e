# backend/tienda_gamer/crud/order_crud.py
"""
Operaciones CRUD para los pedidos pagados.

Este módulo registra los pedidos aprobados por Mercado Pago y descuenta el
inventario de los productos en la misma transacción.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tienda_gamer.crud import catalog_crud
from tienda_gamer.db.models.order_model import PaymentOrder, PaymentOrderItem
from tienda_gamer.schemas.cart_schema import CartItem, ItemType


async def get_order_by_payment_id(db: AsyncSession, payment_id: str) -> Optional[PaymentOrder]:
    """Obtiene un pedido por el id del pago en Mercado Pago."""
    result = await db.execute(
        select(PaymentOrder)
        .options(selectinload(PaymentOrder.items))
        .filter(PaymentOrder.payment_id == payment_id)
    )
    return result.scalars().first()


async def get_orders_by_user(db: AsyncSession, user_id: str, skip: int = 0, limit: int = 10) -> List[PaymentOrder]:
    query = (
        select(PaymentOrder)
        .options(selectinload(PaymentOrder.items))
        .filter(PaymentOrder.user_id == user_id)
        .order_by(PaymentOrder.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(query)
    return result.scalars().all()


async def create_paid_order(
    db: AsyncSession,
    *,
    payment_id: str,
    external_reference: str,
    total_amount: int,
    status: str,
    items: List[CartItem],
    user_id: Optional[str] = None,
    payer_email: Optional[str] = None,
    description: Optional[str] = None,
    payment_method: Optional[str] = None,
) -> PaymentOrder:
    """
    Crea el pedido y sus líneas, y descuenta el stock de los productos.
    Si faltan unidades el pedido se registra igual, marcado como oversold.

    No hace commit: el llamador decide el límite de la transacción.
    """
    db_order = PaymentOrder(
        payment_id=payment_id,
        external_reference=external_reference,
        user_id=user_id,
        payer_email=payer_email,
        description=description,
        total_amount=total_amount,
        status=status,
        payment_method=payment_method,
        oversold=False,
    )
    db.add(db_order)

    for item in items:
        backordered = 0
        # Solo los productos físicos tienen inventario
        if item.type == ItemType.PRODUCT:
            backordered = await catalog_crud.deduct_paid_stock(db, item.id, item.quantity)
        if backordered:
            db_order.oversold = True
        db_order.items.append(
            PaymentOrderItem(
                item_id=item.id,
                item_type=item.type.value,
                name=item.name,
                quantity=item.quantity,
                price=item.price,
                backordered_quantity=backordered,
            )
        )

    await db.flush()
    return db_order
