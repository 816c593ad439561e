# backend/tienda_gamer/crud/sale_crud.py
"""
Operaciones CRUD para las ventas directas en tienda.
"""

from datetime import datetime, time, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.core.exceptions import CatalogItemNotFoundError
from tienda_gamer.crud import catalog_crud
from tienda_gamer.db.models.sale_model import Sale
from tienda_gamer.schemas.sale_schema import SaleCreate, SaleSearchQuery


async def register_sale(db: AsyncSession, sale_in: SaleCreate, sold_by: str) -> Sale:
    """
    Registra la venta y descuenta el inventario en una única transacción.

    Lanza InsufficientStockError si la cantidad supera el stock disponible.
    """
    try:
        product = await catalog_crud.get_product(db, sale_in.product_id)
        if product is None:
            raise CatalogItemNotFoundError("product", sale_in.product_id)

        await catalog_crud.deduct_stock(db, product.id, sale_in.quantity)

        db_sale = Sale(
            product_id=product.id,
            quantity=sale_in.quantity,
            total_price=product.price * sale_in.quantity,
            sold_by=sold_by,
        )
        db.add(db_sale)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(db_sale)
    return db_sale


async def get_sales(db: AsyncSession, filters: SaleSearchQuery) -> List[Sale]:
    """Lista las ventas, las más recientes primero, filtrando por día y vendedor."""
    query = select(Sale).order_by(Sale.created_at.desc())
    if filters.sale_date:
        start = datetime.combine(filters.sale_date, time.min, tzinfo=timezone.utc)
        end = datetime.combine(filters.sale_date, time.max, tzinfo=timezone.utc)
        query = query.filter(Sale.created_at >= start, Sale.created_at <= end)
    if filters.sold_by:
        query = query.filter(Sale.sold_by == filters.sold_by)
    result = await db.execute(query)
    return result.scalars().all()
