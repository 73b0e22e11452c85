# backend/models/user_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.types import Unicode, String
from sqlalchemy.orm import relationship
from database.session import Base

class User(Base):
    __tablename__ = "users"
    id         = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email      = Column(Unicode(255), unique=True)
    full_name  = Column(Unicode(255))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    roles = relationship("UserRole", cascade="all, delete-orphan", back_populates="user")

    @property
    def role_names(self) -> set:
        return {r.role for r in self.roles}


class UserRole(Base):
    __tablename__ = "user_roles"
    id      = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role    = Column(String(20), nullable=False)  # 'buyer' / 'seller' / 'admin'

    __table_args__ = (
        UniqueConstraint("user_id", "role"),
        CheckConstraint("role in ('buyer','seller','admin')"),
    )

    user = relationship("User", back_populates="roles")
