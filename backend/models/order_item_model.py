# backend/models/order_item_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import String
from sqlalchemy.orm import relationship
from database.session import Base

class OrderItem(Base):
    __tablename__ = "order_items"
    id         = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id   = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    seller_id  = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity   = Column(Integer, nullable=False)
    price      = Column(Numeric(10, 2), nullable=False)  # snapshot of products.price at checkout
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("quantity > 0"),
        CheckConstraint("price >= 0"),
    )

    order   = relationship("Order", back_populates="items")
    product = relationship("Product")
