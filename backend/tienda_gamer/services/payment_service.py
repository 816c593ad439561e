# backend/tienda_gamer/services/payment_service.py
"""
Servicio de pagos: la parte servidor de las funciones create-payment,
process-payment y payment-webhook.

El monto a cobrar siempre se calcula aquí a partir del catálogo; el precio
que viaja en el carrito del navegador solo sirve para mostrarlo.
"""

import json
import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.core.config import settings
from tienda_gamer.core.exceptions import (
    CatalogItemNotFoundError,
    InsufficientStockError,
    PaymentFunctionError,
)
from tienda_gamer.crud import catalog_crud, order_crud
from tienda_gamer.db.models.order_model import PaymentOrder
from tienda_gamer.schemas.cart_schema import CartItem, ItemType
from tienda_gamer.schemas.payment_schema import (
    Payer,
    PaymentIntent,
    PaymentResult,
    ProcessPaymentRequest,
    WebhookNotification,
)
from tienda_gamer.services.mercadopago_client import MercadoPagoClient

logger = logging.getLogger(__name__)

APPROVED = "approved"


class PaymentService:

    def __init__(self, mp_client: Optional[MercadoPagoClient] = None):
        self.mp_client = mp_client or MercadoPagoClient()

    # ========================================
    # PRECIOS DEL CATÁLOGO
    # ========================================

    async def price_items(self, db: AsyncSession, items: List[CartItem]) -> List[CartItem]:
        """
        Devuelve las líneas con nombre y precio tomados del catálogo.

        Valida además el inventario de los productos físicos.
        """
        priced = []
        for item in items:
            entity = await catalog_crud.get_catalog_item(db, item.type, item.id)
            if entity is None or getattr(entity, "active", True) is False:
                raise CatalogItemNotFoundError(item.type.value, item.id)

            if item.type == ItemType.PRODUCT and entity.stock < item.quantity:
                raise InsufficientStockError(entity.name, item.quantity, entity.stock)

            priced.append(item.model_copy(update={"name": entity.name, "price": entity.price}))
        return priced

    # ========================================
    # create-payment
    # ========================================

    async def create_payment_intent(self, db: AsyncSession, items: List[CartItem], payer: Optional[Payer]) -> PaymentIntent:
        if payer is None:
            raise PaymentFunctionError("Usuario no autenticado")
        if not items:
            raise PaymentFunctionError("No hay items en el carrito")

        priced = await self.price_items(db, items)
        amount = sum(item.subtotal for item in priced)
        logger.info(f"Creando intent de pago por {amount} {settings.PAYMENT_CURRENCY} para {payer.user_id}")

        return PaymentIntent(
            amount=amount,
            payer_email=payer.email,
            description=f"Compra de {len(priced)} producto(s)",
            external_reference=str(uuid.uuid4()),
            items=priced,
        )

    # ========================================
    # process-payment
    # ========================================

    async def process_payment(self, db: AsyncSession, request: ProcessPaymentRequest, payer: Optional[Payer]) -> PaymentResult:
        if payer is None:
            raise PaymentFunctionError("Usuario no autenticado")

        if not request.items:
            raise PaymentFunctionError("No hay items en el carrito")

        priced = await self.price_items(db, request.items)
        expected = sum(item.subtotal for item in priced)
        if expected != request.transaction_amount:
            logger.warning(
                f"Monto {request.transaction_amount} no coincide con el catálogo ({expected}) "
                f"para {request.external_reference}"
            )
            raise PaymentFunctionError("El monto del pago no coincide con el carrito")

        payer_data = request.payer or {}
        payment_data = {
            "transaction_amount": request.transaction_amount,
            "token": request.token,
            "description": request.description,
            "installments": request.installments or 1,
            "payment_method_id": request.payment_method_id,
            "payer": {
                "email": payer_data.get("email") or payer.email,
                "first_name": payer_data.get("first_name", ""),
                "last_name": payer_data.get("last_name", ""),
                "identification": payer_data.get("identification") or {},
            },
            "external_reference": request.external_reference,
            "metadata": {
                "user_id": payer.user_id,
                "items": json.dumps([item.model_dump(mode="json") for item in priced]),
            },
        }
        if request.issuer_id:
            payment_data["issuer_id"] = request.issuer_id
        if settings.MERCADO_PAGO_NOTIFICATION_URL:
            payment_data["notification_url"] = settings.MERCADO_PAGO_NOTIFICATION_URL

        logger.info(f"Enviando pago a Mercado Pago: {request.transaction_amount} ({request.payment_method_id})")
        # Cada intento trae un token de tarjeta nuevo, así un reintento tras un
        # rechazo no recibe la respuesta cacheada del intento anterior.
        idempotency_key = f"{request.external_reference}:{request.token}"
        response = await self.mp_client.create_payment(payment_data, idempotency_key=idempotency_key)

        result = PaymentResult(
            id=str(response.get("id")) if response.get("id") is not None else None,
            status=response.get("status") or "unknown",
            status_detail=response.get("status_detail"),
            amount=response.get("transaction_amount"),
            payment_method=response.get("payment_method_id"),
            external_reference=response.get("external_reference"),
        )
        logger.info(f"Resultado del pago {result.id}: {result.status} ({result.status_detail})")

        if result.status == APPROVED and result.id:
            try:
                await self.record_approved_payment(
                    db,
                    result,
                    priced,
                    user_id=payer.user_id,
                    payer_email=payment_data["payer"]["email"],
                    description=request.description,
                )
            except Exception as e:
                # El cobro ya se hizo; el webhook volverá a intentar el registro
                logger.error(f"Pago {result.id} aprobado pero no se pudo registrar el pedido: {e}", exc_info=True)

        return result

    async def record_approved_payment(
        self,
        db: AsyncSession,
        result: PaymentResult,
        items: List[CartItem],
        user_id: Optional[str] = None,
        payer_email: Optional[str] = None,
        description: Optional[str] = None,
    ) -> PaymentOrder:
        """
        Registra el pedido y descuenta inventario en una transacción.
        Es idempotente por payment_id: webhook y flujo síncrono pueden llamarlo ambos.
        """
        existing = await order_crud.get_order_by_payment_id(db, result.id)
        if existing:
            return existing

        try:
            order = await order_crud.create_paid_order(
                db,
                payment_id=result.id,
                external_reference=result.external_reference or "",
                total_amount=int(result.amount) if result.amount is not None else sum(i.subtotal for i in items),
                status=result.status,
                items=items,
                user_id=user_id,
                payer_email=payer_email,
                description=description,
                payment_method=result.payment_method,
            )
            await db.commit()
        except IntegrityError:
            # Otro proceso registró el mismo pago en paralelo
            await db.rollback()
            return await order_crud.get_order_by_payment_id(db, result.id)
        except Exception:
            await db.rollback()
            raise

        if order.oversold:
            logger.warning(f"Pedido del pago {result.id} cobrado sin inventario suficiente; quedan unidades pendientes")
        logger.info(f"Pedido registrado para el pago {result.id}")
        return order

    # ========================================
    # payment-webhook
    # ========================================

    async def handle_webhook(self, db: AsyncSession, notification: WebhookNotification) -> Optional[PaymentOrder]:
        if notification.type != "payment" or notification.data is None:
            logger.info(f"Notificación ignorada: {notification.type}")
            return None

        payment = await self.mp_client.get_payment(notification.data.id)
        if payment.get("status") != APPROVED:
            logger.info(f"Pago {notification.data.id} en estado {payment.get('status')}, sin pedido")
            return None

        metadata = payment.get("metadata") or {}
        try:
            items = [CartItem.model_validate(data) for data in json.loads(metadata.get("items") or "[]")]
        except (ValueError, TypeError):
            logger.error(f"Metadata de items inválida en el pago {notification.data.id}")
            items = []

        result = PaymentResult(
            id=str(payment.get("id", notification.data.id)),
            status=APPROVED,
            status_detail=payment.get("status_detail"),
            amount=payment.get("transaction_amount"),
            payment_method=payment.get("payment_method_id"),
            external_reference=payment.get("external_reference"),
        )
        return await self.record_approved_payment(
            db,
            result,
            items,
            user_id=metadata.get("user_id"),
            payer_email=(payment.get("payer") or {}).get("email"),
            description=payment.get("description"),
        )


payment_service = PaymentService()
