# backend/tienda_gamer/api/v1/endpoints/sales.py
"""
Endpoints de ventas directas en tienda.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.api import deps
from tienda_gamer.core.exceptions import CatalogItemNotFoundError, InsufficientStockError
from tienda_gamer.crud import sale_crud
from tienda_gamer.schemas.sale_schema import Sale, SaleCreate, SaleSearchQuery

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=Sale, status_code=status.HTTP_201_CREATED)
async def register_sale(
    sale_in: SaleCreate,
    sold_by: str = Depends(deps.require_user_id),
    db: AsyncSession = Depends(deps.get_db),
):
    """Registra la venta verificando antes el inventario disponible."""
    try:
        sale = await sale_crud.register_sale(db, sale_in, sold_by)
    except CatalogItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InsufficientStockError as e:
        logger.warning(f"Venta rechazada por inventario: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Inventario insuficiente. {e}")

    logger.info(f"Venta registrada: {sale.quantity} x {sale.product_id} por {sold_by}")
    return sale


@router.get("/", response_model=List[Sale])
async def list_sales(
    sale_date: Optional[date] = Query(None),
    sold_by: Optional[str] = Query(None),
    db: AsyncSession = Depends(deps.get_db),
):
    return await sale_crud.get_sales(db, SaleSearchQuery(sale_date=sale_date, sold_by=sold_by))
