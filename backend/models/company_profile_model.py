# backend/models/company_profile_model.py
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.types import Unicode, UnicodeText, String
from sqlalchemy.orm import relationship
from database.session import Base

VERIFICATION_STATUS_VALUES = ("pending", "under_review", "verified", "rejected")

class CompanyProfile(Base):
    __tablename__ = "company_profiles"
    id                  = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id             = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    company_name        = Column(Unicode(255), nullable=False)
    registration_number = Column(Unicode(100))
    tax_id              = Column(Unicode(100))
    industry            = Column(Unicode(100))
    website             = Column(Unicode(255))
    address             = Column(Unicode(500))
    city                = Column(Unicode(100))
    country             = Column(Unicode(100))
    phone               = Column(Unicode(50))
    description         = Column(UnicodeText)
    verification_status = Column(String(20), nullable=False, default="pending", index=True)
    verified_at         = Column(DateTime)
    rejection_reason    = Column(UnicodeText)
    created_at          = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at          = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "verification_status in ('pending','under_review','verified','rejected')",
            name="ck_company_verification_status",
        ),
    )

    owner = relationship("User")
