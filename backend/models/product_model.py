# backend/models/product_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode, String

from database.session import Base

class Product(Base):
    __tablename__ = "products"

    id         = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    seller_id  = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name       = Column(Unicode(255), nullable=False)
    price      = Column(Numeric(10, 2), nullable=False)
    stock      = Column(Integer, nullable=False, default=0)
    status     = Column(String(20), nullable=False, default="active")  # 'active' / 'inactive'
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("price >= 0"),
    )
