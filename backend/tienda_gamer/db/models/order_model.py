# backend/tienda_gamer/db/models/order_model.py
"""
Este archivo contiene el modelo de pedido pagado a través de Mercado Pago.
"""

from sqlalchemy import Boolean, Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tienda_gamer.db.database import Base


class PaymentOrder(Base):
    __tablename__ = "payment_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # El id del pago en Mercado Pago hace idempotente el registro
    payment_id = Column(String(64), unique=True, nullable=False, index=True)
    external_reference = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), nullable=True)
    payer_email = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    total_amount = Column(Integer, nullable=False)
    status = Column(String(30), nullable=False)
    payment_method = Column(String(50), nullable=True)
    # Cobrado con más unidades de las que había en inventario
    oversold = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("PaymentOrderItem", back_populates="order", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<PaymentOrder(payment_id={self.payment_id}, status='{self.status}')>"


class PaymentOrderItem(Base):
    __tablename__ = "payment_order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("payment_orders.id", ondelete="CASCADE"), nullable=False)
    item_id = Column(String(36), nullable=False)
    item_type = Column(String(20), nullable=False)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)
    backordered_quantity = Column(Integer, nullable=False, default=0)

    order = relationship("PaymentOrder", back_populates="items")
