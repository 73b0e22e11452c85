# backend/models/email_outbox_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.types import Unicode, UnicodeText, String
from database.session import Base

class EmailOutbox(Base):
    __tablename__ = "email_outbox"
    id         = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipient  = Column(Unicode(255), nullable=False)
    subject    = Column(Unicode(255), nullable=False)
    html       = Column(UnicodeText, nullable=False)
    status     = Column(String(20), nullable=False, default="pending", index=True)  # pending / sent / dead
    attempts   = Column(Integer, nullable=False, default=0)
    last_error = Column(UnicodeText)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    sent_at    = Column(DateTime)
