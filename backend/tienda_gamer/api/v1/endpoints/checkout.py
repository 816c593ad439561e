# backend/tienda_gamer/api/v1/endpoints/checkout.py
"""
Endpoints del flujo de checkout.

El navegador renderiza el Card Payment Brick con la configuración que devuelve
/start y reenvía aquí sus callbacks (onReady, onSubmit, onError). El resultado
del pago se comunica con redirect_url, que lleva payment_id y status.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from tienda_gamer.api import deps
from tienda_gamer.schemas.checkout_schema import CheckoutStatus, SubmitAck, WidgetErrorEvent
from tienda_gamer.schemas.payment_schema import Payer, PaymentResultPage
from tienda_gamer.services.checkout_session import CheckoutSession, SessionRegistry
from tienda_gamer.services.payment_widget import RemoteBrickHandle

logger = logging.getLogger(__name__)

router = APIRouter()


def _mounted_handle(session: CheckoutSession) -> RemoteBrickHandle:
    handle = session.widget.mounted_handle(session.orchestrator.container_id)
    if handle is None or not handle.mounted:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="El formulario de pago no está montado")
    return handle


@router.get("/result", response_model=PaymentResultPage)
async def payment_result(
    payment_id: Optional[str] = Query(None),
    payment_status: Optional[str] = Query(None, alias="status"),
):
    """Datos de las páginas de éxito y fallo, leídos tal cual de la URL."""
    return PaymentResultPage(payment_id=payment_id, status=payment_status, approved=payment_status == "approved")


@router.get("/{session_id}", response_model=CheckoutStatus)
async def get_checkout_status(
    session_id: str,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    session = await registry.get(session_id)
    return session.status()


@router.post("/{session_id}/start", response_model=CheckoutStatus)
async def start_checkout(
    session_id: str,
    payer: Optional[Payer] = Depends(deps.get_payer),
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """
    Proceder al pago: pide el intent y monta el brick.
    Con el carrito vacío no hace nada.
    """
    session = await registry.get(session_id, payer)
    await session.orchestrator.start_checkout()
    return session.status()


@router.post("/{session_id}/ready", response_model=CheckoutStatus)
async def widget_ready(
    session_id: str,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    session = await registry.get(session_id)
    _mounted_handle(session).report_ready()
    return session.status()


@router.post("/{session_id}/submit", response_model=CheckoutStatus)
async def widget_submit(
    session_id: str,
    card_form_data: Dict[str, Any] = Body(...),
    payer: Optional[Payer] = Depends(deps.get_payer),
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """
    Reenvía el cardFormData tokenizado del brick. La respuesta siempre incluye
    un ack estructurado para devolverlo al brick.
    """
    session = await registry.get(session_id, payer)
    handle = session.widget.mounted_handle(session.orchestrator.container_id)
    if handle is None:
        ack = SubmitAck(status="error", message="El formulario de pago no está montado")
    else:
        ack = await handle.submit(card_form_data)
    return session.status(ack)


@router.post("/{session_id}/error", response_model=CheckoutStatus)
async def widget_error(
    session_id: str,
    event: WidgetErrorEvent,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    session = await registry.get(session_id)
    _mounted_handle(session).report_error(event.message or event.cause)
    return session.status()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_checkout(
    session_id: str,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """
    El usuario salió de la página: se desmonta el brick, se descartan respuestas
    tardías y la sesión sale del registro. El carrito durable se conserva.
    """
    await registry.discard(session_id)
