# backend/models/order_status_event_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey
from sqlalchemy.types import String
from sqlalchemy.orm import relationship
from database.session import Base

class OrderStatusEvent(Base):
    """Append-only log of order status changes. Rows are never updated."""
    __tablename__ = "order_status_events"
    id          = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id    = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    from_status = Column(String(20))
    status      = Column(String(20), nullable=False)
    actor_id    = Column(String(36), ForeignKey("users.id"))
    created_at  = Column(DateTime, nullable=False, default=datetime.utcnow)

    order = relationship("Order", back_populates="events")
