# backend/tienda_gamer/schemas/checkout_schema.py
"""
Esquemas del flujo de checkout expuesto al navegador.
"""

import enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .cart_schema import CartState


class CheckoutState(str, enum.Enum):
    IDLE = "idle"
    REQUESTING_INTENT = "requesting_intent"
    WIDGET_MOUNTING = "widget_mounting"
    AWAITING_SUBMISSION = "awaiting_submission"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"


class NotificationVariant(str, enum.Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    """Aviso transitorio (toast) para el usuario."""
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT


class SubmitAck(BaseModel):
    """Respuesta estructurada que espera el brick tras onSubmit."""
    status: str
    message: Optional[str] = None


class BrickConfig(BaseModel):
    """Lo que el navegador necesita para renderizar el brick."""
    kind: str
    container_id: str
    public_key: str
    locale: str
    initialization: Dict[str, Any]


class WidgetErrorEvent(BaseModel):
    message: Optional[str] = None
    cause: Optional[Any] = None


class CheckoutStatus(BaseModel):
    state: CheckoutState
    cart: CartState
    brick: Optional[BrickConfig] = None
    redirect_url: Optional[str] = None
    ack: Optional[SubmitAck] = None
    notifications: List[Notification] = Field(default_factory=list)
