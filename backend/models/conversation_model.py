# backend/models/conversation_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.types import UnicodeText, String
from sqlalchemy.orm import relationship
from database.session import Base

class Conversation(Base):
    __tablename__ = "conversations"
    id              = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    buyer_id        = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    seller_id       = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id      = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"))
    last_message_at = Column(DateTime, default=datetime.utcnow)
    created_at      = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("buyer_id", "seller_id", "product_id"),
    )

    messages = relationship(
        "Message",
        cascade="all, delete-orphan",
        back_populates="conversation",
        order_by="Message.created_at",
    )

    def has_party(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)


class Message(Base):
    __tablename__ = "messages"
    id              = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = Column(String(36), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id       = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content         = Column(UnicodeText, nullable=False)
    is_read         = Column(Boolean, nullable=False, default=False)
    created_at      = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    conversation = relationship("Conversation", back_populates="messages")
