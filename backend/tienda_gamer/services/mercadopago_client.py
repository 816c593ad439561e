# backend/tienda_gamer/services/mercadopago_client.py
"""
Cliente mínimo de la API REST de Mercado Pago (Checkout API).

Solo cubre lo que usa la tienda: crear un pago con un token de tarjeta
emitido por el Card Payment Brick y consultar un pago por su id.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from tienda_gamer.core.config import settings
from tienda_gamer.core.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)


class MercadoPagoClient:

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token if access_token is not None else settings.MERCADO_PAGO_ACCESS_TOKEN
        self.base_url = base_url or settings.MERCADO_PAGO_API_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        if not self.access_token:
            raise PaymentProviderError("Token de acceso de Mercado Pago no configurado")
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"Authorization": f"Bearer {self.access_token}"},
        )

    async def create_payment(self, payment_data: Dict[str, Any], idempotency_key: str) -> Dict[str, Any]:
        """POST /v1/payments. La clave de idempotencia evita cobros duplicados en reintentos de red."""
        async with self._get_client() as client:
            try:
                response = await client.post(
                    "/v1/payments",
                    json=payment_data,
                    headers={"X-Idempotency-Key": idempotency_key},
                )
            except httpx.HTTPError as e:
                logger.error(f"Error de red contactando Mercado Pago: {e}")
                raise PaymentProviderError("No se pudo contactar a Mercado Pago") from e

        return self._parse(response, "Error procesando el pago")

    async def get_payment(self, payment_id: str) -> Dict[str, Any]:
        async with self._get_client() as client:
            try:
                response = await client.get(f"/v1/payments/{payment_id}")
            except httpx.HTTPError as e:
                logger.error(f"Error de red consultando el pago {payment_id}: {e}")
                raise PaymentProviderError("No se pudo contactar a Mercado Pago") from e

        return self._parse(response, "Error al obtener información del pago")

    @staticmethod
    def _parse(response: httpx.Response, default_message: str) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            logger.error(f"Mercado Pago respondió {response.status_code}: {body}")
            message = body.get("message") if isinstance(body, dict) else None
            raise PaymentProviderError(message or default_message, status_code=response.status_code)

        return body
