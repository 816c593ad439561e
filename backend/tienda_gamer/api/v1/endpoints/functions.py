# backend/tienda_gamer/api/v1/endpoints/functions.py
"""
Funciones de pago del backend: create-payment, process-payment y payment-webhook.

Los errores se devuelven como 400 con {"detail": mensaje}; los fallos de
Mercado Pago como 502.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.api import deps
from tienda_gamer.core.exceptions import PaymentProviderError, TiendaError
from tienda_gamer.schemas.payment_schema import (
    CreatePaymentRequest,
    Payer,
    PaymentIntent,
    PaymentResult,
    ProcessPaymentRequest,
    WebhookNotification,
)
from tienda_gamer.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-payment", response_model=PaymentIntent)
async def create_payment(
    request: CreatePaymentRequest,
    payer: Optional[Payer] = Depends(deps.get_payer),
    db: AsyncSession = Depends(deps.get_db),
    service: PaymentService = Depends(deps.get_payment_service),
):
    """Calcula el monto a partir del catálogo y devuelve el intent para el brick."""
    try:
        return await service.create_payment_intent(db, request.items, payer)
    except TiendaError as e:
        logger.error(f"Error creating payment: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/process-payment", response_model=PaymentResult)
async def process_payment(
    request: ProcessPaymentRequest,
    payer: Optional[Payer] = Depends(deps.get_payer),
    db: AsyncSession = Depends(deps.get_db),
    service: PaymentService = Depends(deps.get_payment_service),
):
    """Cobra con el token del brick y, si se aprueba, registra el pedido y descuenta inventario."""
    try:
        return await service.process_payment(db, request, payer)
    except PaymentProviderError as e:
        logger.error(f"Error processing payment: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except TiendaError as e:
        logger.error(f"Error processing payment: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/payment-webhook")
async def payment_webhook(
    notification: WebhookNotification,
    db: AsyncSession = Depends(deps.get_db),
    service: PaymentService = Depends(deps.get_payment_service),
):
    """Notificaciones de Mercado Pago. Registra el pedido si el pago quedó aprobado."""
    logger.info(f"Webhook received: {notification.type} {notification.data.id if notification.data else ''}")
    try:
        order = await service.handle_webhook(db, notification)
    except TiendaError as e:
        logger.error(f"Webhook error: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"success": True, "order_recorded": order is not None}
