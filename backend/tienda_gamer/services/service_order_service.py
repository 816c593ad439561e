# backend/tienda_gamer/services/service_order_service.py
"""
Flujo de estados de las órdenes de servicio técnico.

    recibido -> diagnostico -> esperando_aprobacion -> reparando -> completado -> entregado

Además del avance normal se permiten dos retrocesos explícitos:
- esperando_aprobacion -> diagnostico, cuando el cliente rechaza la cotización.
- completado / entregado -> reparando / diagnostico, para reabrir un trabajo
  (retoque antes de entregar o garantía después de entregar).
Cualquier otro salto se rechaza con InvalidTransitionError.
"""

import logging
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.core.exceptions import InvalidTransitionError, ServiceOrderNotFoundError
from tienda_gamer.crud import service_order_crud as crud
from tienda_gamer.db.models.service_order_model import ServiceOrder
from tienda_gamer.schemas.service_order_schema import (
    CommentAuthor,
    ServiceOrderStatus as S,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[S, FrozenSet[S]] = {
    S.RECIBIDO: frozenset({S.DIAGNOSTICO}),
    # Reparaciones sin costo adicional pueden saltarse la aprobación
    S.DIAGNOSTICO: frozenset({S.ESPERANDO_APROBACION, S.REPARANDO}),
    S.ESPERANDO_APROBACION: frozenset({S.REPARANDO, S.DIAGNOSTICO}),
    S.REPARANDO: frozenset({S.COMPLETADO}),
    S.COMPLETADO: frozenset({S.ENTREGADO, S.REPARANDO}),
    S.ENTREGADO: frozenset({S.DIAGNOSTICO}),
}

OPENING_COMMENT = "Servicio creado y equipo recibido"


def can_transition(current: S, new: S) -> bool:
    """Mantener el mismo estado siempre es válido (solo se adjunta información)."""
    return current == new or new in ALLOWED_TRANSITIONS[current]


def validate_transition(current: S, new: S) -> None:
    if not can_transition(current, new):
        raise InvalidTransitionError(current.value, new.value)


class ServiceOrderService:
    """Operaciones de alto nivel sobre las órdenes de servicio."""

    async def _get_or_raise(self, db: AsyncSession, order_id: str) -> ServiceOrder:
        db_order = await crud.get_service_order(db, order_id)
        if db_order is None:
            raise ServiceOrderNotFoundError(order_id)
        return db_order

    async def create(self, db: AsyncSession, client_id: str, description: str) -> ServiceOrder:
        db_order = await crud.create_service_order(db, client_id, description, OPENING_COMMENT)
        logger.info(f"Orden de servicio {db_order.id} creada para el cliente {client_id}")
        return db_order

    async def get(self, db: AsyncSession, order_id: str) -> ServiceOrder:
        return await self._get_or_raise(db, order_id)

    async def list(self, db: AsyncSession, client_id: Optional[str] = None) -> List[ServiceOrder]:
        return await crud.get_service_orders(db, client_id=client_id)

    async def update_status(
        self,
        db: AsyncSession,
        order_id: str,
        new_status: S,
        admin_description: Optional[str] = None,
        admin_images: Optional[List[str]] = None,
    ) -> ServiceOrder:
        db_order = await self._get_or_raise(db, order_id)
        current = S(db_order.status)
        validate_transition(current, new_status)

        updated = await crud.save_status(db, db_order, new_status, admin_description, admin_images)
        logger.info(f"Orden {order_id}: {current.value} -> {new_status.value}")
        return updated

    async def set_quotation(self, db: AsyncSession, order_id: str, quotation: int) -> ServiceOrder:
        """La cotización se puede adjuntar en cualquier estado."""
        db_order = await self._get_or_raise(db, order_id)
        return await crud.save_quotation(db, db_order, quotation)

    async def add_comment(self, db: AsyncSession, order_id: str, text: str, author: CommentAuthor) -> ServiceOrder:
        db_order = await self._get_or_raise(db, order_id)
        return await crud.append_comment(db, db_order, text.strip(), author)


service_order_service = ServiceOrderService()
