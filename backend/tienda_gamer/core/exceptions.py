# backend/tienda_gamer/core/exceptions.py
"""
Excepciones de dominio de la tienda.

Los servicios lanzan estas excepciones y los endpoints las traducen a
HTTPException con el código adecuado.
"""

from typing import Optional


class TiendaError(Exception):
    """Clase base de los errores de dominio."""


class CheckoutError(TiendaError):
    """Error local del flujo de checkout (SDK ausente, contenedor inexistente, datos vacíos)."""


class PaymentRejectedError(TiendaError):
    """El procesador devolvió un estado distinto de approved/pending."""

    def __init__(self, status: Optional[str], status_detail: Optional[str] = None):
        self.status = status
        self.status_detail = status_detail
        super().__init__(status_detail or "Pago rechazado")


class PaymentProviderError(TiendaError):
    """La API de Mercado Pago respondió con error o no fue alcanzable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class PaymentFunctionError(TiendaError):
    """Una función de pago devolvió el campo error relleno."""


class CatalogItemNotFoundError(TiendaError):
    def __init__(self, item_type: str, item_id: str):
        self.item_type = item_type
        self.item_id = item_id
        super().__init__(f"No se encontró el {item_type} con id {item_id}")


class InsufficientStockError(TiendaError):
    def __init__(self, name: str, requested: int, available: int):
        self.name = name
        self.requested = requested
        self.available = available
        super().__init__(f"Solo hay {available} unidades disponibles de {name}")


class InvalidTransitionError(TiendaError):
    def __init__(self, current: str, new: str):
        self.current = current
        self.new = new
        super().__init__(f"No se puede pasar una orden de '{current}' a '{new}'")


class ServiceOrderNotFoundError(TiendaError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Orden de servicio {order_id} no encontrada")
