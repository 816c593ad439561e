# backend/tienda_gamer/schemas/service_order_schema.py
"""
Se encarga de definir los esquemas Pydantic para las órdenes de servicio técnico.
"""

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator


class ServiceOrderStatus(str, enum.Enum):
    """Estados del flujo de reparación, en orden de avance."""
    RECIBIDO = "recibido"
    DIAGNOSTICO = "diagnostico"
    ESPERANDO_APROBACION = "esperando_aprobacion"
    REPARANDO = "reparando"
    COMPLETADO = "completado"
    ENTREGADO = "entregado"

    @classmethod
    def _missing_(cls, value):
        # Registros antiguos guardaban "Recibido", "Diagnóstico"...
        if isinstance(value, str):
            normalized = (
                value.strip().lower()
                .replace(" ", "_")
                .replace("ó", "o")
                .replace("á", "a")
            )
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class CommentAuthor(str, enum.Enum):
    ADMIN = "admin"
    CLIENT = "client"


class ServiceOrderComment(BaseModel):
    text: str
    author: CommentAuthor
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ServiceOrderCreate(BaseModel):
    client_id: str = Field(..., min_length=1)
    description: str

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        if not v or not v.strip():
            raise ValueError("La descripción de la orden es requerida")
        return v.strip()


class ServiceOrderStatusUpdate(BaseModel):
    """Cambio de estado con descripción e imágenes opcionales del administrador."""
    status: ServiceOrderStatus
    admin_description: Optional[str] = None
    admin_images: Optional[List[HttpUrl]] = None


class QuotationUpdate(BaseModel):
    quotation: int = Field(..., ge=0)


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1)
    author: CommentAuthor


class ServiceOrder(BaseModel):
    """Esquema completo de respuesta para una orden de servicio."""
    id: str
    client_id: str
    description: str
    admin_description: Optional[str] = None
    admin_images: List[str] = Field(default_factory=list)
    quotation: Optional[int] = None
    status: ServiceOrderStatus
    comments: List[ServiceOrderComment] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
