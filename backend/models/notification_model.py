# backend/models/notification_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode, UnicodeText, String
from database.session import Base

class Notification(Base):
    __tablename__ = "notifications"
    id         = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id    = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title      = Column(Unicode(255), nullable=False)
    message    = Column(UnicodeText, nullable=False)
    type       = Column(String(20), nullable=False, default="general")  # order / promo / alert / general
    is_read    = Column(Boolean, nullable=False, default=False)
    link       = Column(Unicode(255))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        CheckConstraint("type in ('order','promo','alert','general')"),
    )
