# backend/tienda_gamer/services/payment_widget.py
"""
Adaptador del widget de pago alojado (Card Payment Brick de Mercado Pago).

El orquestador solo conoce esta interfaz, así puede probarse contra un widget
falso sin el SDK real. RemoteBrickWidget es la implementación de producción:
el brick se dibuja en el navegador y este objeto guarda el lado servidor del
montaje; el navegador reenvía los eventos ready/submit/error por la API.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from tienda_gamer.core.config import settings
from tienda_gamer.schemas.checkout_schema import BrickConfig, SubmitAck

logger = logging.getLogger(__name__)

SubmitCallback = Callable[[Dict[str, Any]], Awaitable[SubmitAck]]


@dataclass
class WidgetCallbacks:
    on_ready: Callable[[], None]
    on_submit: SubmitCallback
    on_error: Callable[[Any], None]


@dataclass
class WidgetConfig:
    amount: int
    payer_email: str
    callbacks: WidgetCallbacks
    kind: str = field(default_factory=lambda: settings.PAYMENT_BRICK_KIND)
    public_key: str = field(default_factory=lambda: settings.MERCADO_PAGO_PUBLIC_KEY)
    locale: str = field(default_factory=lambda: settings.MERCADO_PAGO_LOCALE)

    def initialization(self) -> Dict[str, Any]:
        return {"amount": self.amount, "payer": {"email": self.payer_email}}


class WidgetHandle(ABC):
    """Una instancia montada del widget en un contenedor."""

    container_id: str

    @abstractmethod
    def unmount(self) -> None: ...


class PaymentWidget(ABC):

    @abstractmethod
    def sdk_available(self) -> bool: ...

    @abstractmethod
    def has_container(self, container_id: str) -> bool: ...

    @abstractmethod
    def clear_container(self, container_id: str) -> None:
        """Destruye cualquier instancia previa del contenedor."""

    @abstractmethod
    async def mount(self, container_id: str, config: WidgetConfig) -> WidgetHandle: ...


class RemoteBrickHandle(WidgetHandle):

    def __init__(self, container_id: str, config: WidgetConfig):
        self.container_id = container_id
        self.config = config
        self.mounted = True

    def brick_config(self) -> BrickConfig:
        return BrickConfig(
            kind=self.config.kind,
            container_id=self.container_id,
            public_key=self.config.public_key,
            locale=self.config.locale,
            initialization=self.config.initialization(),
        )

    def report_ready(self) -> None:
        if self.mounted:
            self.config.callbacks.on_ready()

    async def submit(self, card_data: Dict[str, Any]) -> SubmitAck:
        if not self.mounted:
            return SubmitAck(status="error", message="El formulario de pago ya no está activo")
        return await self.config.callbacks.on_submit(card_data)

    def report_error(self, error: Any) -> None:
        if self.mounted:
            self.config.callbacks.on_error(error)

    def unmount(self) -> None:
        self.mounted = False


class RemoteBrickWidget(PaymentWidget):
    """Brick renderizado en el navegador y controlado desde el servidor."""

    def __init__(self, public_key: Optional[str] = None, containers: Optional[Iterable[str]] = None):
        self.public_key = public_key if public_key is not None else settings.MERCADO_PAGO_PUBLIC_KEY
        self.containers = set(containers or [settings.PAYMENT_CONTAINER_ID])
        self._mounted: Dict[str, RemoteBrickHandle] = {}

    def sdk_available(self) -> bool:
        return bool(self.public_key)

    def has_container(self, container_id: str) -> bool:
        return container_id in self.containers

    def clear_container(self, container_id: str) -> None:
        previous = self._mounted.pop(container_id, None)
        if previous is not None:
            previous.unmount()
            logger.debug(f"Brick anterior desmontado de {container_id}")

    async def mount(self, container_id: str, config: WidgetConfig) -> RemoteBrickHandle:
        self.clear_container(container_id)
        config.public_key = self.public_key
        handle = RemoteBrickHandle(container_id, config)
        self._mounted[container_id] = handle
        logger.info(f"Brick {config.kind} montado en {container_id} con monto {config.amount}")
        return handle

    def mounted_handle(self, container_id: Optional[str] = None) -> Optional[RemoteBrickHandle]:
        return self._mounted.get(container_id or settings.PAYMENT_CONTAINER_ID)
