# backend/tienda_gamer/crud/catalog_crud.py
"""
Operaciones de lectura del catálogo y de inventario.

Los precios que se cobran salen siempre de aquí; el carrito del navegador
solo aporta ids y cantidades.
"""

from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.core.exceptions import CatalogItemNotFoundError, InsufficientStockError
from tienda_gamer.db.models.catalog_model import Course, Product, Service
from tienda_gamer.schemas.cart_schema import ItemType

CatalogEntity = Union[Product, Course, Service]

_MODELS_BY_TYPE = {
    ItemType.PRODUCT: Product,
    ItemType.COURSE: Course,
    ItemType.SERVICE: Service,
}


async def get_catalog_item(db: AsyncSession, item_type: ItemType, item_id: str) -> Optional[CatalogEntity]:
    """Obtiene una entidad del catálogo por tipo e id."""
    model = _MODELS_BY_TYPE[ItemType(item_type)]
    result = await db.execute(select(model).filter(model.id == item_id))
    return result.scalars().first()


async def get_product(db: AsyncSession, product_id: str) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.id == product_id))
    return result.scalars().first()


async def deduct_stock(db: AsyncSession, product_id: str, quantity: int) -> Product:
    """
    Descuenta inventario de un producto bloqueando su fila.

    El commit se gestiona en la transacción de nivel superior que llama a esta función.
    """
    result = await db.execute(
        select(Product).filter(Product.id == product_id).with_for_update()
    )
    product = result.scalars().first()
    if product is None:
        raise CatalogItemNotFoundError(ItemType.PRODUCT.value, product_id)

    if product.stock < quantity:
        raise InsufficientStockError(product.name, quantity, product.stock)

    product.stock -= quantity
    return product


async def deduct_paid_stock(db: AsyncSession, product_id: str, quantity: int) -> int:
    """
    Descuenta inventario de una compra ya cobrada.

    El pedido no puede rechazarse a estas alturas: el stock se deja en cero y
    se devuelven las unidades que faltaron para que queden como pendientes.
    """
    result = await db.execute(
        select(Product).filter(Product.id == product_id).with_for_update()
    )
    product = result.scalars().first()
    if product is None:
        return quantity

    shortfall = max(quantity - product.stock, 0)
    product.stock -= quantity - shortfall
    return shortfall
