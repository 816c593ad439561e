# backend/tienda_gamer/api/v1/api_router.py
"""
Este archivo contiene el router principal para la API versión 1.

Se encarga de registrar y configurar todos los routers de la versión 1 de la API.
"""

from fastapi import APIRouter

# Importación de routers especializados por dominio de negocio
from tienda_gamer.api.v1.endpoints import (
    cart,
    checkout,
    functions,
    orders,
    sales,
    service_orders,
)

api_router_v1 = APIRouter()

# ROUTER DEL CARRITO
# Carrito por sesión de navegador, persistido en Redis
api_router_v1.include_router(
    cart.router,
    prefix="/cart",
    tags=["Cart"]
)

# ROUTER DEL CHECKOUT
# Máquina de estados del pago y callbacks del Card Payment Brick
api_router_v1.include_router(
    checkout.router,
    prefix="/checkout",
    tags=["Checkout"]
)

# FUNCIONES DE PAGO
# create-payment, process-payment y el webhook de Mercado Pago
api_router_v1.include_router(
    functions.router,
    prefix="/functions",
    tags=["Payment Functions"]
)

# HISTORIAL DE PEDIDOS DEL CLIENTE
api_router_v1.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"]
)

# ROUTER DE VENTAS DIRECTAS
api_router_v1.include_router(
    sales.router,
    prefix="/sales",
    tags=["Sales"]
)

# ROUTER DE ÓRDENES DE SERVICIO TÉCNICO
api_router_v1.include_router(
    service_orders.router,
    prefix="/service-orders",
    tags=["Service Orders"]
)
