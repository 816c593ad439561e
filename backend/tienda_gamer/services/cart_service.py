# backend/tienda_gamer/services/cart_service.py
"""
Servicio de Carrito de Compras para la aplicación.

Cada sesión del navegador tiene su propio CartStore. El estado vive en memoria
y se copia a un almacenamiento clave-valor durable (Redis) después de cada
cambio, para poder rehidratarlo tras una recarga.

La persistencia es de mejor esfuerzo: si Redis falla, el cambio en memoria
se mantiene y solo se registra el error.
"""

import json
import logging
from typing import List, Optional, Protocol

from pydantic import ValidationError
from redis.asyncio import Redis

from tienda_gamer.core.config import settings
from tienda_gamer.schemas.cart_schema import CartItem, CartItemCreate, CartState

logger = logging.getLogger(__name__)


class CartStorage(Protocol):
    """Almacenamiento clave-valor durable para el estado del carrito."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class RedisCartStorage:
    """Implementación de CartStorage sobre Redis con caducidad configurable."""

    def __init__(self, redis: Redis, ttl_seconds: Optional[int] = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.CART_TTL_SECONDS

    @classmethod
    def from_settings(cls) -> "RedisCartStorage":
        return cls(Redis.from_url(settings.REDIS_URL, decode_responses=True))

    async def get(self, key: str) -> Optional[str]:
        return await self.redis.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.redis.set(key, value, ex=self.ttl_seconds or None)

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)

    async def close(self) -> None:
        await self.redis.aclose()


def cart_key(session_id: str) -> str:
    """Genera la clave de almacenamiento del carrito de una sesión."""
    return f"{settings.CART_KEY_PREFIX}:{session_id}"


class CartStore:
    """
    Fuente única de verdad de lo que el visitante quiere comprar.

    El total nunca se guarda: CartState lo recalcula a partir de las líneas.
    """

    def __init__(self, session_id: str, storage: Optional[CartStorage] = None, items: Optional[List[CartItem]] = None):
        self.session_id = session_id
        self.storage = storage
        self._items: List[CartItem] = list(items or [])

    # ===============================================
    # Lectura
    # ===============================================

    @property
    def items(self) -> List[CartItem]:
        return [item.model_copy() for item in self._items]

    @property
    def state(self) -> CartState:
        return CartState(items=self.items)

    @property
    def total(self) -> int:
        return sum(item.price * item.quantity for item in self._items)

    def is_empty(self) -> bool:
        return not self._items

    def _find(self, item_id: str) -> Optional[CartItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    # ===============================================
    # Mutaciones
    # ===============================================

    async def add_item(self, entry: CartItemCreate) -> CartState:
        """
        Añade una unidad. Si ya hay una línea con el mismo id, incrementa su cantidad.
        """
        existing = self._find(entry.id)
        if existing:
            existing.quantity += 1
        else:
            self._items.append(CartItem(**entry.model_dump(), quantity=1))
        await self._persist()
        return self.state

    async def update_quantity(self, item_id: str, quantity: int) -> CartState:
        """
        Fija la cantidad de una línea. Cero o negativo la elimina; id desconocido no hace nada.

        No se compara contra el stock: el carrito es una intención local y el
        inventario se valida en el servidor al cobrar.
        """
        if quantity <= 0:
            return await self.remove_item(item_id)

        existing = self._find(item_id)
        if existing is None:
            return self.state

        existing.quantity = quantity
        await self._persist()
        return self.state

    async def remove_item(self, item_id: str) -> CartState:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        if len(self._items) != before:
            await self._persist()
        return self.state

    async def clear_cart(self) -> CartState:
        self._items = []
        await self._persist()
        return self.state

    # ===============================================
    # Persistencia
    # ===============================================

    async def _persist(self) -> None:
        if self.storage is None:
            return
        key = cart_key(self.session_id)
        try:
            if self._items:
                payload = json.dumps([item.model_dump(mode="json") for item in self._items])
                await self.storage.set(key, payload)
            else:
                await self.storage.delete(key)
        except Exception as e:
            # Cualquier fallo del adaptador queda en el log; el cambio en memoria se conserva
            logger.warning(f"No se pudo persistir el carrito de la sesión {self.session_id}: {e}", exc_info=True)

    @classmethod
    async def load(cls, session_id: str, storage: Optional[CartStorage]) -> "CartStore":
        """
        Rehidrata el carrito de una sesión. Datos corruptos o un almacenamiento
        caído producen un carrito vacío utilizable.
        """
        if storage is None:
            return cls(session_id)

        try:
            raw = await storage.get(cart_key(session_id))
        except Exception as e:
            logger.warning(f"No se pudo leer el carrito de la sesión {session_id}: {e}", exc_info=True)
            return cls(session_id, storage)

        if not raw:
            return cls(session_id, storage)

        try:
            items = [CartItem.model_validate(data) for data in json.loads(raw)]
        except (json.JSONDecodeError, TypeError, ValidationError):
            logger.error(f"Error decodificando el carrito guardado de la sesión {session_id}")
            return cls(session_id, storage)

        return cls(session_id, storage, items)
