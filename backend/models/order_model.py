# backend/models/order_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode, UnicodeText, String
from sqlalchemy.orm import relationship
from database.session import Base

ORDER_STATUS_VALUES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")

class Order(Base):
    __tablename__ = "orders"
    id               = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    buyer_id         = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    total_amount     = Column(Numeric(10, 2), nullable=False)
    status           = Column(String(20), nullable=False, default="pending")
    shipping_address = Column(UnicodeText, nullable=False)
    tracking_number  = Column(Unicode(100))
    created_at       = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at       = Column(DateTime, nullable=False, default=datetime.utcnow)
    version          = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("total_amount >= 0"),
        CheckConstraint(
            "status in (" + ",".join(f"'{s}'" for s in ORDER_STATUS_VALUES) + ")",
            name="ck_orders_status",
        ),
    )
    # UPDATE ... WHERE version = :loaded_version, StaleDataError when another writer got there first
    __mapper_args__ = {"version_id_col": version}

    buyer  = relationship("User", foreign_keys=[buyer_id])
    items  = relationship("OrderItem", cascade="all, delete-orphan", back_populates="order")
    events = relationship(
        "OrderStatusEvent",
        cascade="all, delete-orphan",
        back_populates="order",
        order_by="OrderStatusEvent.created_at",
    )

    @property
    def short_id(self) -> str:
        return self.id[:8]
