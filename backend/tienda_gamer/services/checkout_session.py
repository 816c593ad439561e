# backend/tienda_gamer/services/checkout_session.py
"""
Contexto por sesión de navegador: carrito, orquestador y brick montado.

El SessionRegistry se crea al arrancar la aplicación y se cierra al apagarla;
no hay carritos globales a nivel de módulo.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from tienda_gamer.schemas.checkout_schema import CheckoutStatus, Notification, SubmitAck
from tienda_gamer.schemas.payment_schema import Payer
from tienda_gamer.services.cart_service import CartStorage, CartStore
from tienda_gamer.services.checkout_orchestrator import CheckoutOrchestrator
from tienda_gamer.services.payment_functions import PaymentFunctions
from tienda_gamer.services.payment_widget import RemoteBrickWidget

logger = logging.getLogger(__name__)

FunctionsFactory = Callable[[Optional[Payer]], PaymentFunctions]


@dataclass
class CheckoutSession:
    session_id: str
    cart: CartStore
    widget: RemoteBrickWidget
    orchestrator: Optional[CheckoutOrchestrator] = None
    payer: Optional[Payer] = None
    outbox: List[Notification] = field(default_factory=list)
    navigation: Optional[str] = None

    def drain_notifications(self) -> List[Notification]:
        # Se vacía en sitio: el orquestador guarda una referencia a outbox.append
        notifications = list(self.outbox)
        self.outbox.clear()
        return notifications

    def status(self, ack: Optional[SubmitAck] = None) -> CheckoutStatus:
        handle = self.widget.mounted_handle(self.orchestrator.container_id)
        brick = handle.brick_config() if handle is not None and handle.mounted else None
        return CheckoutStatus(
            state=self.orchestrator.state,
            cart=self.cart.state,
            brick=brick,
            redirect_url=self.orchestrator.redirect_url,
            ack=ack,
            notifications=self.drain_notifications(),
        )


class SessionRegistry:

    def __init__(
        self,
        storage: Optional[CartStorage],
        functions_factory: FunctionsFactory,
        widget_factory: Callable[[], RemoteBrickWidget] = RemoteBrickWidget,
    ):
        self.storage = storage
        self.functions_factory = functions_factory
        self.widget_factory = widget_factory
        self._sessions: Dict[str, CheckoutSession] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    async def get(self, session_id: str, payer: Optional[Payer] = None) -> CheckoutSession:
        """Devuelve la sesión, rehidratando el carrito desde el almacenamiento si es nueva."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = await self._create(session_id, payer)
                self._sessions[session_id] = session

        if payer is not None and payer != session.payer:
            session.payer = payer
            session.orchestrator.functions = self.functions_factory(payer)
        return session

    async def _create(self, session_id: str, payer: Optional[Payer]) -> CheckoutSession:
        cart = await CartStore.load(session_id, self.storage)
        session = CheckoutSession(session_id=session_id, cart=cart, widget=self.widget_factory(), payer=payer)

        def navigate(url: str) -> None:
            session.navigation = url

        session.orchestrator = CheckoutOrchestrator(
            cart=cart,
            functions=self.functions_factory(payer),
            widget=session.widget,
            notifier=session.outbox.append,
            navigator=navigate,
        )
        logger.debug(f"Sesión {session_id} creada con {len(cart.items)} items")
        return session

    async def discard(self, session_id: str) -> None:
        """Termina la sesión en memoria; el carrito durable se conserva."""
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.orchestrator.abandon()

    async def close(self) -> None:
        async with self._lock:
            sessions, self._sessions = list(self._sessions.values()), {}
        for session in sessions:
            session.orchestrator.abandon()
        close = getattr(self.storage, "close", None)
        if close is not None:
            await close()
