# backend/tienda_gamer/api/deps.py
"""
Módulo de dependencias para FastAPI.

Este archivo centraliza todas las dependencias que pueden ser inyectadas
en los endpoints de la API, de modo que los tests puedan reemplazarlas con
app.dependency_overrides.
"""

from typing import AsyncGenerator, Optional

from fastapi import Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tienda_gamer.db.database import AsyncSessionLocal
from tienda_gamer.schemas.payment_schema import Payer
from tienda_gamer.services.checkout_session import SessionRegistry
from tienda_gamer.services.payment_service import PaymentService, payment_service
from tienda_gamer.services.service_order_service import ServiceOrderService, service_order_service


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependencia de FastAPI para obtener una sesión de base de datos asíncrona.
    Se asegura de que la sesión se cierre siempre después de la petición.
    """
    async with AsyncSessionLocal() as session:
        yield session


def get_session_registry(request: Request) -> SessionRegistry:
    """Registro de sesiones creado en el arranque de la aplicación."""
    return request.app.state.session_registry


def get_payment_service() -> PaymentService:
    return payment_service


def get_service_order_service() -> ServiceOrderService:
    return service_order_service


def get_payer(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
) -> Optional[Payer]:
    """
    Identidad del usuario propagada por el proxy de autenticación.
    Devuelve None para visitantes anónimos.
    """
    if not x_user_id or not x_user_email:
        return None
    return Payer(user_id=x_user_id, email=x_user_email)


def require_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuario no autenticado")
    return x_user_id
