# backend/tienda_gamer/main.py
"""
Punto de entrada principal de la aplicación FastAPI.

Este módulo configura y inicializa la aplicación FastAPI completa,
incluyendo el registro de rutas y los eventos del ciclo de vida:
- Al arrancar se configura el logging y se crea el registro de sesiones
  de checkout (carritos en Redis + orquestadores en memoria).
- Al apagar se abandonan los checkouts en curso y se cierra Redis.
"""

import logging

from fastapi import FastAPI

from tienda_gamer.api.v1.api_router import api_router_v1
from tienda_gamer.core.config import settings
from tienda_gamer.core.logging_config import setup_logging
from tienda_gamer.services.cart_service import RedisCartStorage
from tienda_gamer.services.checkout_session import SessionRegistry
from tienda_gamer.services.payment_functions import build_payment_functions

logger = logging.getLogger(__name__)

# ========================================
# CONFIGURACIÓN DE LA APLICACIÓN FASTAPI
# ========================================

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    version=settings.PROJECT_VERSION,
    description="API de carrito, checkout y servicio técnico de la tienda gamer"
)

app.include_router(api_router_v1, prefix=settings.API_V1_STR)


@app.get("/", tags=["Root"])
async def read_root():
    """
    Endpoint raíz para verificación básica del estado de la API.

    Returns:
        dict: Mensaje de bienvenida con nombre y versión del proyecto

    Example:
        GET /
        Response: {"message": "Bienvenido a Tienda Gamer API v0.1.0"}
    """
    return {"message": f"Bienvenido a {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}"}

# ========================================
# EVENTOS DEL CICLO DE VIDA DE LA APLICACIÓN
# ========================================

@app.on_event("startup")
async def startup_event():
    """
    Inicializa el logging y el registro de sesiones de checkout.
    """
    setup_logging()
    app.state.session_registry = SessionRegistry(
        storage=RedisCartStorage.from_settings(),
        functions_factory=build_payment_functions,
    )
    logger.info(f"✅ {settings.PROJECT_NAME} iniciada en entorno {settings.APP_ENVIRONMENT}")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Abandona los checkouts en memoria y cierra la conexión con Redis.
    """
    registry = getattr(app.state, "session_registry", None)
    if registry is not None:
        await registry.close()
    logger.info("Aplicación detenida")
