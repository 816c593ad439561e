# backend/tienda_gamer/api/v1/endpoints/service_orders.py
"""
Endpoints de órdenes de servicio técnico (panel de administración y cliente).
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.api import deps
from tienda_gamer.core.exceptions import InvalidTransitionError, ServiceOrderNotFoundError
from tienda_gamer.schemas.service_order_schema import (
    CommentCreate,
    QuotationUpdate,
    ServiceOrder,
    ServiceOrderCreate,
    ServiceOrderStatusUpdate,
)
from tienda_gamer.services.service_order_service import ServiceOrderService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=ServiceOrder, status_code=status.HTTP_201_CREATED)
async def create_service_order(
    order_in: ServiceOrderCreate,
    db: AsyncSession = Depends(deps.get_db),
    service: ServiceOrderService = Depends(deps.get_service_order_service),
):
    return await service.create(db, order_in.client_id, order_in.description)


@router.get("/", response_model=List[ServiceOrder])
async def list_service_orders(
    client_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(deps.get_db),
    service: ServiceOrderService = Depends(deps.get_service_order_service),
):
    return await service.list(db, client_id=client_id)


@router.get("/{order_id}", response_model=ServiceOrder)
async def get_service_order(
    order_id: str,
    db: AsyncSession = Depends(deps.get_db),
    service: ServiceOrderService = Depends(deps.get_service_order_service),
):
    try:
        return await service.get(db, order_id)
    except ServiceOrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{order_id}/status", response_model=ServiceOrder)
async def update_service_order_status(
    order_id: str,
    update: ServiceOrderStatusUpdate,
    db: AsyncSession = Depends(deps.get_db),
    service: ServiceOrderService = Depends(deps.get_service_order_service),
):
    """Cambia el estado, opcionalmente con descripción e imágenes del administrador."""
    images = [str(url) for url in update.admin_images] if update.admin_images is not None else None
    try:
        return await service.update_status(db, order_id, update.status, update.admin_description, images)
    except ServiceOrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidTransitionError as e:
        logger.warning(f"Transición rechazada en la orden {order_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.put("/{order_id}/quotation", response_model=ServiceOrder)
async def set_service_order_quotation(
    order_id: str,
    update: QuotationUpdate,
    db: AsyncSession = Depends(deps.get_db),
    service: ServiceOrderService = Depends(deps.get_service_order_service),
):
    try:
        return await service.set_quotation(db, order_id, update.quotation)
    except ServiceOrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{order_id}/comments", response_model=ServiceOrder, status_code=status.HTTP_201_CREATED)
async def add_service_order_comment(
    order_id: str,
    comment: CommentCreate,
    db: AsyncSession = Depends(deps.get_db),
    service: ServiceOrderService = Depends(deps.get_service_order_service),
):
    try:
        return await service.add_comment(db, order_id, comment.text, comment.author)
    except ServiceOrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
