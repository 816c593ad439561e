# backend/tienda_gamer/crud/service_order_crud.py
"""
Operaciones CRUD para las órdenes de servicio técnico.

La validación de transiciones vive en services/service_order_service.py;
aquí solo se lee y escribe.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tienda_gamer.db.models.service_order_model import ServiceOrder, ServiceOrderComment
from tienda_gamer.schemas.service_order_schema import CommentAuthor, ServiceOrderStatus


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def get_service_order(db: AsyncSession, order_id: str) -> Optional[ServiceOrder]:
    result = await db.execute(
        select(ServiceOrder)
        .options(selectinload(ServiceOrder.comments))
        .filter(ServiceOrder.id == order_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_service_orders(db: AsyncSession, client_id: Optional[str] = None) -> List[ServiceOrder]:
    """Lista las órdenes, las más recientes primero, opcionalmente de un cliente."""
    query = select(ServiceOrder).options(selectinload(ServiceOrder.comments))
    if client_id:
        query = query.filter(ServiceOrder.client_id == client_id)
    result = await db.execute(query.order_by(ServiceOrder.created_at.desc()))
    return result.scalars().all()


async def create_service_order(db: AsyncSession, client_id: str, description: str, opening_comment: str) -> ServiceOrder:
    now = _now()
    db_order = ServiceOrder(
        id=str(uuid.uuid4()),
        client_id=client_id,
        description=description,
        admin_images=[],
        status=ServiceOrderStatus.RECIBIDO.value,
        created_at=now,
        updated_at=now,
    )
    db_order.comments.append(
        ServiceOrderComment(text=opening_comment, author=CommentAuthor.ADMIN.value, timestamp=now)
    )
    db.add(db_order)
    await db.commit()
    return await get_service_order(db, db_order.id)


async def save_status(
    db: AsyncSession,
    db_order: ServiceOrder,
    status: ServiceOrderStatus,
    admin_description: Optional[str] = None,
    admin_images: Optional[List[str]] = None,
) -> ServiceOrder:
    db_order.status = status.value
    if admin_description is not None:
        db_order.admin_description = admin_description
    if admin_images is not None:
        db_order.admin_images = list(admin_images)
    db_order.updated_at = _now()
    await db.commit()
    return await get_service_order(db, db_order.id)


async def save_quotation(db: AsyncSession, db_order: ServiceOrder, quotation: int) -> ServiceOrder:
    db_order.quotation = quotation
    db_order.updated_at = _now()
    await db.commit()
    return await get_service_order(db, db_order.id)


async def append_comment(db: AsyncSession, db_order: ServiceOrder, text: str, author: CommentAuthor) -> ServiceOrder:
    """Añade un comentario; los existentes nunca se editan ni se borran."""
    now = _now()
    db.add(ServiceOrderComment(order_id=db_order.id, text=text, author=author.value, timestamp=now))
    db_order.updated_at = now
    await db.commit()
    return await get_service_order(db, db_order.id)
