# backend/tienda_gamer/schemas/payment_schema.py
"""
Esquemas Pydantic para el intercambio con las funciones de pago y Mercado Pago.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .cart_schema import CartItem

T = TypeVar("T")


class Payer(BaseModel):
    """Identidad del comprador, resuelta por la capa de autenticación."""
    user_id: str
    email: str


class CreatePaymentRequest(BaseModel):
    items: List[CartItem] = Field(default_factory=list)


class PaymentIntent(BaseModel):
    """Descriptor emitido por el servidor con el monto a cobrar."""
    amount: int = Field(..., ge=0)
    payer_email: str
    description: str
    external_reference: str
    items: List[CartItem] = Field(default_factory=list)


class ProcessPaymentRequest(BaseModel):
    """
    Datos tokenizados del brick más el contexto del intent.

    El brick puede añadir campos propios (issuer_id, payer.identification...),
    por eso se aceptan campos extra y se reenvían tal cual.
    """
    model_config = ConfigDict(extra="allow")

    token: Optional[str] = None
    payment_method_id: Optional[str] = None
    issuer_id: Optional[str] = None
    installments: int = 1
    transaction_amount: int = Field(..., ge=0)
    description: str = ""
    external_reference: str
    items: List[CartItem] = Field(default_factory=list)
    payer: Optional[Dict[str, Any]] = None


class PaymentResult(BaseModel):
    id: Optional[str] = None
    status: str
    status_detail: Optional[str] = None
    amount: Optional[float] = None
    payment_method: Optional[str] = None
    external_reference: Optional[str] = None


class FunctionResponse(BaseModel, Generic[T]):
    """Convención {data, error} de las funciones del backend."""
    data: Optional[T] = None
    error: Optional[str] = None


class WebhookData(BaseModel):
    id: str


class WebhookNotification(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    action: Optional[str] = None
    data: Optional[WebhookData] = None


class PaymentResultPage(BaseModel):
    """Contrato de las páginas de resultado: payment_id y status literales."""
    payment_id: Optional[str] = None
    status: Optional[str] = None
    approved: bool = False
