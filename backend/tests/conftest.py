"""
Fixtures y dobles de prueba compartidos.

Los dobles sustituyen a Redis, al Card Payment Brick y a las funciones de pago
para poder probar el carrito y el orquestador sin servicios externos.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tienda_gamer.schemas.cart_schema import CartItem, CartItemCreate, ItemType
from tienda_gamer.schemas.checkout_schema import SubmitAck
from tienda_gamer.schemas.payment_schema import FunctionResponse, PaymentIntent, PaymentResult
from tienda_gamer.services.cart_service import CartStore
from tienda_gamer.services.checkout_orchestrator import CheckoutOrchestrator
from tienda_gamer.services.payment_widget import PaymentWidget, WidgetConfig, WidgetHandle


class MemoryCartStorage:
    def __init__(self):
        self.data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class BrokenCartStorage:
    """Simula un Redis caído."""

    async def get(self, key: str) -> Optional[str]:
        raise RedisConnectionError("redis caído")

    async def set(self, key: str, value: str) -> None:
        raise RedisConnectionError("redis caído")

    async def delete(self, key: str) -> None:
        raise RedisConnectionError("redis caído")


class FakeHandle(WidgetHandle):
    def __init__(self, container_id: str, config: WidgetConfig):
        self.container_id = container_id
        self.config = config
        self.mounted = True

    def ready(self) -> None:
        self.config.callbacks.on_ready()

    async def submit(self, data: Dict[str, Any]) -> SubmitAck:
        return await self.config.callbacks.on_submit(data)

    def error(self, err: Any) -> None:
        self.config.callbacks.on_error(err)

    def unmount(self) -> None:
        self.mounted = False


class FakeWidget(PaymentWidget):
    def __init__(self, sdk: bool = True, containers=("mercadopago-checkout",), auto_ready: bool = True, fail_mount: bool = False):
        self.sdk = sdk
        self.containers = set(containers)
        self.auto_ready = auto_ready
        self.fail_mount = fail_mount
        self.handles: List[FakeHandle] = []
        self.cleared: List[str] = []

    def sdk_available(self) -> bool:
        return self.sdk

    def has_container(self, container_id: str) -> bool:
        return container_id in self.containers

    def clear_container(self, container_id: str) -> None:
        self.cleared.append(container_id)
        for handle in self.handles:
            if handle.container_id == container_id:
                handle.unmount()

    async def mount(self, container_id: str, config: WidgetConfig) -> FakeHandle:
        if self.fail_mount:
            raise RuntimeError("fallo al crear el brick")
        handle = FakeHandle(container_id, config)
        self.handles.append(handle)
        if self.auto_ready:
            handle.ready()
        return handle

    @property
    def current(self) -> FakeHandle:
        return self.handles[-1]


class FakePaymentFunctions:
    """
    Funciones de pago programables. process_gate permite dejar una llamada
    a process-payment suspendida para probar envíos concurrentes.
    """

    def __init__(self, intent: Optional[PaymentIntent] = None, intent_error: Optional[str] = None):
        self.intent = intent
        self.intent_error = intent_error
        self.results: List[Any] = []
        self.create_calls: List[List[CartItem]] = []
        self.process_calls: List[Dict[str, Any]] = []
        self.process_gate: Optional[asyncio.Event] = None
        self.create_gate: Optional[asyncio.Event] = None

    async def create_payment(self, items: List[CartItem]) -> FunctionResponse[PaymentIntent]:
        self.create_calls.append(items)
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.intent_error:
            return FunctionResponse[PaymentIntent](error=self.intent_error)
        return FunctionResponse[PaymentIntent](data=self.intent)

    async def process_payment(self, payload: Dict[str, Any]) -> FunctionResponse[PaymentResult]:
        self.process_calls.append(payload)
        if self.process_gate is not None:
            await self.process_gate.wait()
        outcome = self.results.pop(0) if self.results else PaymentResult(id="1", status="approved")
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            return FunctionResponse[PaymentResult](error=outcome)
        return FunctionResponse[PaymentResult](data=outcome)


def make_entry(item_id: str, price: int, item_type: ItemType = ItemType.PRODUCT) -> CartItemCreate:
    return CartItemCreate(id=item_id, type=item_type, name=f"Item {item_id}", price=price)


@pytest.fixture
def storage() -> MemoryCartStorage:
    return MemoryCartStorage()


@pytest.fixture
def cart(storage) -> CartStore:
    return CartStore("sesion-1", storage)


@pytest.fixture
async def filled_cart(cart) -> CartStore:
    await cart.add_item(make_entry("p1", 10000))
    await cart.add_item(make_entry("p1", 10000))
    await cart.add_item(make_entry("p2", 5000))
    return cart


@pytest.fixture
def intent(filled_cart) -> PaymentIntent:
    return PaymentIntent(
        amount=25000,
        payer_email="gamer@example.com",
        description="Compra de 2 producto(s)",
        external_reference="ref-123",
        items=filled_cart.items,
    )


@pytest.fixture
def functions(intent) -> FakePaymentFunctions:
    return FakePaymentFunctions(intent=intent)


@pytest.fixture
def widget() -> FakeWidget:
    return FakeWidget()


@pytest.fixture
def orchestrator(filled_cart, functions, widget):
    notifications = []
    navigations = []
    orch = CheckoutOrchestrator(
        cart=filled_cart,
        functions=functions,
        widget=widget,
        notifier=notifications.append,
        navigator=navigations.append,
    )
    orch.notifications = notifications
    orch.navigations = navigations
    return orch
