# backend/tienda_gamer/services/payment_functions.py
"""
Adaptadores de las funciones de pago que consume el orquestador de checkout.

Ambas implementaciones devuelven FunctionResponse ({data, error}); un error
de negocio nunca se lanza como excepción hacia el orquestador.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

import httpx
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.core.config import settings
from tienda_gamer.core.exceptions import TiendaError
from tienda_gamer.db.database import AsyncSessionLocal
from tienda_gamer.schemas.cart_schema import CartItem
from tienda_gamer.schemas.payment_schema import (
    FunctionResponse,
    Payer,
    PaymentIntent,
    PaymentResult,
    ProcessPaymentRequest,
)
from tienda_gamer.services.payment_service import PaymentService, payment_service as default_payment_service

logger = logging.getLogger(__name__)


class PaymentFunctions(Protocol):

    async def create_payment(self, items: List[CartItem]) -> FunctionResponse[PaymentIntent]: ...

    async def process_payment(self, payload: Dict[str, Any]) -> FunctionResponse[PaymentResult]: ...


class LocalPaymentFunctions:
    """Invoca PaymentService dentro del mismo proceso, con una sesión de BD por llamada."""

    def __init__(
        self,
        payer: Optional[Payer],
        service: Optional[PaymentService] = None,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
    ):
        self.payer = payer
        self.service = service or default_payment_service
        self.session_factory = session_factory

    async def create_payment(self, items: List[CartItem]) -> FunctionResponse[PaymentIntent]:
        try:
            async with self.session_factory() as db:
                intent = await self.service.create_payment_intent(db, items, self.payer)
        except TiendaError as e:
            logger.warning(f"create-payment rechazado: {e}")
            return FunctionResponse[PaymentIntent](error=str(e))
        return FunctionResponse[PaymentIntent](data=intent)

    async def process_payment(self, payload: Dict[str, Any]) -> FunctionResponse[PaymentResult]:
        try:
            request = ProcessPaymentRequest.model_validate(payload)
            async with self.session_factory() as db:
                result = await self.service.process_payment(db, request, self.payer)
        except ValidationError as e:
            logger.warning(f"process-payment con datos inválidos: {e}")
            return FunctionResponse[PaymentResult](error="Datos de pago inválidos")
        except TiendaError as e:
            logger.warning(f"process-payment rechazado: {e}")
            return FunctionResponse[PaymentResult](error=str(e))
        return FunctionResponse[PaymentResult](data=result)


class HttpPaymentFunctions:
    """Llama a las funciones publicadas bajo /api/v1/functions desde otro proceso."""

    def __init__(
        self,
        payer: Optional[Payer],
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.payer = payer
        self.base_url = base_url or settings.FUNCTIONS_BASE_URL
        self.transport = transport

    def _get_api_client(self) -> httpx.AsyncClient:
        headers = {}
        if self.payer:
            headers = {"X-User-Id": self.payer.user_id, "X-User-Email": self.payer.email}
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            headers=headers,
            transport=self.transport,
        )

    async def _invoke(self, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        async with self._get_api_client() as client:
            response = await client.post(f"/{name}", json=body)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            detail = data.get("detail") if isinstance(data, dict) else None
            raise TiendaError(detail or f"La función {name} respondió {response.status_code}")
        return data

    async def create_payment(self, items: List[CartItem]) -> FunctionResponse[PaymentIntent]:
        try:
            data = await self._invoke("create-payment", {"items": [i.model_dump(mode="json") for i in items]})
            return FunctionResponse[PaymentIntent](data=PaymentIntent.model_validate(data) if data else None)
        except (TiendaError, httpx.HTTPError, ValidationError) as e:
            logger.error(f"Error en create-payment: {e}")
            return FunctionResponse[PaymentIntent](error=str(e) or "Error creando el pago")

    async def process_payment(self, payload: Dict[str, Any]) -> FunctionResponse[PaymentResult]:
        try:
            data = await self._invoke("process-payment", payload)
            return FunctionResponse[PaymentResult](data=PaymentResult.model_validate(data))
        except (TiendaError, httpx.HTTPError, ValidationError) as e:
            logger.error(f"Error en process-payment: {e}")
            return FunctionResponse[PaymentResult](error=str(e) or "Error procesando el pago")


def build_payment_functions(payer: Optional[Payer]) -> PaymentFunctions:
    """Elige el adaptador según PAYMENT_FUNCTIONS_MODE."""
    if settings.PAYMENT_FUNCTIONS_MODE == "http":
        return HttpPaymentFunctions(payer)
    return LocalPaymentFunctions(payer)
