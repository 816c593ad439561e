# backend/tienda_gamer/services/checkout_orchestrator.py
"""
Orquestador del checkout con Mercado Pago.

Este componente encapsula la máquina de estados que lleva el carrito hasta un
cobro confirmado:

    IDLE -> REQUESTING_INTENT -> WIDGET_MOUNTING -> AWAITING_SUBMISSION -> PROCESSING -> SUCCEEDED

Coordina dos actores externos (las funciones de pago del backend y el brick
que tokeniza la tarjeta) sin manejar nunca datos de tarjeta en claro.

Reglas que mantiene:
- El carrito solo se vacía cuando el procesador responde approved.
- Mientras hay un pago en vuelo, un segundo envío se rechaza sin llamar al backend.
- Cada inicio o abandono incrementa una generación; respuestas que llegan
  tarde de una generación anterior no modifican el estado.
"""

import logging
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from tienda_gamer.core.config import settings
from tienda_gamer.core.exceptions import CheckoutError, PaymentFunctionError, PaymentRejectedError
from tienda_gamer.schemas.checkout_schema import (
    CheckoutState,
    Notification,
    NotificationVariant,
    SubmitAck,
)
from tienda_gamer.schemas.payment_schema import PaymentIntent
from tienda_gamer.services.cart_service import CartStore
from tienda_gamer.services.payment_functions import PaymentFunctions
from tienda_gamer.services.payment_widget import PaymentWidget, WidgetCallbacks, WidgetConfig, WidgetHandle

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]
Navigator = Callable[[str], None]

# Estados en los que ya hay una operación asíncrona en curso
_BUSY_STATES = {
    CheckoutState.REQUESTING_INTENT,
    CheckoutState.WIDGET_MOUNTING,
    CheckoutState.PROCESSING,
}


def build_result_url(path: str, payment_id: Optional[str], status: str) -> str:
    """URL de la página de resultado; lee payment_id y status literalmente."""
    return f"{path}?{urlencode({'payment_id': payment_id or '', 'status': status})}"


class CheckoutOrchestrator:

    def __init__(
        self,
        cart: CartStore,
        functions: PaymentFunctions,
        widget: PaymentWidget,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        container_id: Optional[str] = None,
    ):
        self.cart = cart
        self.functions = functions
        self.widget = widget
        self.notifier = notifier
        self.navigator = navigator
        self.container_id = container_id or settings.PAYMENT_CONTAINER_ID

        self.state = CheckoutState.IDLE
        self.intent: Optional[PaymentIntent] = None
        self.handle: Optional[WidgetHandle] = None
        self.redirect_url: Optional[str] = None
        self._generation = 0
        self._in_flight = False

    # ===============================================
    # Utilidades internas
    # ===============================================

    @property
    def is_processing(self) -> bool:
        return self._in_flight

    def _set_state(self, new_state: CheckoutState) -> None:
        if new_state != self.state:
            logger.debug(f"Checkout {self.cart.session_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _notify(self, title: str, description: str, destructive: bool = False) -> None:
        notification = Notification(
            title=title,
            description=description,
            variant=NotificationVariant.DESTRUCTIVE if destructive else NotificationVariant.DEFAULT,
        )
        if self.notifier:
            self.notifier(notification)
        else:
            logger.info(f"[{title}] {description}")

    def _fail_to_idle(self, error: Exception, default_message: str) -> None:
        logger.error(f"Error inicializando formulario de pago para {self.cart.session_id}: {error}")
        self.intent = None
        self._set_state(CheckoutState.IDLE)
        self._notify("Error", str(error) or default_message, destructive=True)

    # ===============================================
    # Inicio del checkout
    # ===============================================

    async def start_checkout(self) -> CheckoutState:
        """
        Pide el intent de pago y monta el brick. Con el carrito vacío no hace nada.
        """
        if self.cart.is_empty():
            return self.state

        if self.state in _BUSY_STATES:
            logger.info(f"Checkout {self.cart.session_id} ya en curso ({self.state.value}), se ignora")
            return self.state

        self._generation += 1
        generation = self._generation
        self.redirect_url = None
        self._set_state(CheckoutState.REQUESTING_INTENT)

        try:
            if not self.widget.sdk_available():
                raise CheckoutError("Mercado Pago SDK no está cargado")

            items = self.cart.items
            logger.info(f"Iniciando llamada a create-payment con {len(items)} items")
            response = await self.functions.create_payment(items)
            if self._is_stale(generation):
                logger.info("Respuesta de create-payment descartada: el checkout fue reiniciado")
                return self.state

            if response.error:
                raise PaymentFunctionError(response.error)
            if not response.data:
                raise CheckoutError("No se recibieron datos del servidor")
        except Exception as e:
            if not self._is_stale(generation):
                self._fail_to_idle(e, "No se pudo cargar el formulario de pago")
            return self.state

        self.intent = response.data
        await self._mount_widget(generation)
        return self.state

    async def _mount_widget(self, generation: int) -> None:
        self._set_state(CheckoutState.WIDGET_MOUNTING)
        intent = self.intent

        try:
            if not self.widget.has_container(self.container_id):
                raise CheckoutError(f"Contenedor {self.container_id} no encontrado")

            # Nunca apilar instancias: se limpia el contenedor antes de crear otra
            self._release_handle()
            self.widget.clear_container(self.container_id)

            config = WidgetConfig(
                amount=intent.amount,
                payer_email=intent.payer_email,
                callbacks=WidgetCallbacks(
                    on_ready=lambda: self._on_ready(generation),
                    on_submit=lambda data: self._on_submit(data, generation),
                    on_error=self._on_error,
                ),
            )
            handle = await self.widget.mount(self.container_id, config)
        except Exception as e:
            if not self._is_stale(generation):
                self._fail_to_idle(e, "No se pudo cargar el formulario de pago")
            return

        if self._is_stale(generation):
            handle.unmount()
            return
        self.handle = handle
        logger.info(f"Card Payment Brick inicializado para {self.cart.session_id} con monto {intent.amount}")

    # ===============================================
    # Callbacks del widget
    # ===============================================

    def _on_ready(self, generation: int) -> None:
        if self._is_stale(generation) or self.state != CheckoutState.WIDGET_MOUNTING:
            return
        self._set_state(CheckoutState.AWAITING_SUBMISSION)

    def _on_error(self, error: Any) -> None:
        logger.error(f"Error en Card Payment Brick: {error}")
        self._notify("Error", "Error en el formulario de pago", destructive=True)

    async def _on_submit(self, card_data: Dict[str, Any], generation: int) -> SubmitAck:
        """
        Envía los datos tokenizados a process-payment. Siempre devuelve un ack
        estructurado al widget; nunca lanza.
        """
        if self._is_stale(generation):
            return SubmitAck(status="error", message="El formulario de pago ya no está activo")
        if self._in_flight:
            logger.warning(f"Envío duplicado ignorado en {self.cart.session_id}")
            return SubmitAck(status="error", message="Ya hay un pago en proceso")
        if self.state != CheckoutState.AWAITING_SUBMISSION or self.intent is None:
            return SubmitAck(status="error", message="El formulario de pago no está listo")

        self._in_flight = True
        self._set_state(CheckoutState.PROCESSING)
        intent = self.intent

        try:
            # Los campos del intent van después para que el cliente no pueda pisar el monto
            payload = {
                **card_data,
                "transaction_amount": intent.amount,
                "description": intent.description,
                "external_reference": intent.external_reference,
                "items": [item.model_dump(mode="json") for item in intent.items],
            }
            response = await self.functions.process_payment(payload)
            if response.error:
                raise PaymentFunctionError(response.error)
            result = response.data
            if result is None:
                raise PaymentFunctionError("No se recibió respuesta del procesador de pagos")

            if result.status == "approved":
                # El cobro se hizo: el carrito se vacía aunque la sesión haya cambiado
                await self.cart.clear_cart()
                if self._is_stale(generation):
                    logger.warning(f"Pago {result.id} aprobado tras reiniciar el checkout")
                    return SubmitAck(status="success")
                self.redirect_url = build_result_url(settings.PAYMENT_SUCCESS_PATH, result.id, result.status)
                self._set_state(CheckoutState.SUCCEEDED)
                self._release_handle()
                self._notify("Pago exitoso", "Tu pago ha sido procesado correctamente.")
                if self.navigator:
                    self.navigator(self.redirect_url)
            elif result.status == "pending":
                if not self._is_stale(generation):
                    self._set_state(CheckoutState.AWAITING_SUBMISSION)
                    self._notify(
                        "Pago pendiente",
                        "Tu pago está siendo procesado. Te notificaremos cuando esté listo.",
                    )
            else:
                raise PaymentRejectedError(result.status, result.status_detail)

            return SubmitAck(status="success")
        except Exception as e:
            logger.error(f"Error procesando pago en {self.cart.session_id}: {e}")
            if not self._is_stale(generation):
                self._set_state(CheckoutState.AWAITING_SUBMISSION)
                self._notify("Error en el pago", str(e) or "No se pudo procesar el pago", destructive=True)
            return SubmitAck(status="error", message=str(e))
        finally:
            if not self._is_stale(generation):
                self._in_flight = False

    # ===============================================
    # Abandono
    # ===============================================

    def _release_handle(self) -> None:
        if self.handle is not None:
            self.handle.unmount()
            self.handle = None

    def abandon(self) -> None:
        """
        El usuario se fue o la sesión terminó: cualquier respuesta pendiente
        queda obsoleta y el widget se desmonta.
        """
        self._generation += 1
        self._in_flight = False
        self._release_handle()
        self.widget.clear_container(self.container_id)
        self.intent = None
        self._set_state(CheckoutState.IDLE)
