# backend/tienda_gamer/api/v1/endpoints/cart.py
"""
Endpoints del carrito de compras de una sesión de navegador.

Ninguna operación falla por el almacenamiento: si Redis no responde, el
carrito en memoria sigue funcionando.
"""

import logging

from fastapi import APIRouter, Depends, status

from tienda_gamer.api import deps
from tienda_gamer.schemas.cart_schema import CartItemCreate, CartQuantityUpdate, CartState
from tienda_gamer.services.checkout_session import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{session_id}", response_model=CartState)
async def get_cart(
    session_id: str,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """Obtiene el contenido del carrito y su total."""
    session = await registry.get(session_id)
    return session.cart.state


@router.post("/{session_id}/items", status_code=status.HTTP_201_CREATED, response_model=CartState)
async def add_item_to_cart(
    session_id: str,
    item: CartItemCreate,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """
    Añade una unidad de un producto, curso o servicio.
    Si ya está en el carrito, incrementa su cantidad.
    """
    session = await registry.get(session_id)
    logger.info(f"🛒 CARRITO {session_id}: añadiendo {item.type.value} '{item.id}'")
    return await session.cart.add_item(item)


@router.patch("/{session_id}/items/{item_id}", response_model=CartState)
async def update_item_quantity(
    session_id: str,
    item_id: str,
    update: CartQuantityUpdate,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """Fija la cantidad de una línea; cero o menos la elimina."""
    session = await registry.get(session_id)
    return await session.cart.update_quantity(item_id, update.quantity)


@router.delete("/{session_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item_from_cart(
    session_id: str,
    item_id: str,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    session = await registry.get(session_id)
    await session.cart.remove_item(item_id)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(
    session_id: str,
    registry: SessionRegistry = Depends(deps.get_session_registry),
):
    """Vacía completamente el carrito."""
    session = await registry.get(session_id)
    await session.cart.clear_cart()
