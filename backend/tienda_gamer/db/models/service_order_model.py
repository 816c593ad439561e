# backend/tienda_gamer/db/models/service_order_model.py
"""
Modelo de las órdenes de servicio técnico (reparaciones).
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tienda_gamer.db.database import Base


class ServiceOrder(Base):
    __tablename__ = "service_orders"

    id = Column(String(36), primary_key=True, index=True)
    client_id = Column(String(64), nullable=False, index=True)
    description = Column(Text, nullable=False)
    admin_description = Column(Text, nullable=True)
    admin_images = Column(JSON, nullable=False, default=list)
    quotation = Column(Integer, nullable=True)
    status = Column(String(30), nullable=False, default="recibido")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Registro de solo-anexado, ordenado por fecha de creación
    comments = relationship(
        "ServiceOrderComment",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="ServiceOrderComment.id",
    )

    def __repr__(self):
        return f"<ServiceOrder(id={self.id}, status='{self.status}')>"


class ServiceOrderComment(Base):
    __tablename__ = "service_order_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("service_orders.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)
    author = Column(String(10), nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("ServiceOrder", back_populates="comments")
