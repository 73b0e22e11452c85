from typing import Optional, Literal, NewType
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, constr

CompanyNameStr = NewType("CompanyNameStr", constr(strip_whitespace=True, min_length=1, max_length=255))
VerificationStatusStr = Literal["pending", "under_review", "verified", "rejected"]

class CompanyProfileIn(BaseModel):
    company_name: CompanyNameStr
    registration_number: Optional[str] = Field(default=None, max_length=100)
    tax_id: Optional[str] = Field(default=None, max_length=100)
    industry: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    city: Optional[str] = Field(default=None, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = None

class CompanyProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    company_name: str
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    industry: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None
    verification_status: VerificationStatusStr
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class VerificationStatusUpdate(BaseModel):
    status: str
    rejection_reason: Optional[str] = Field(default=None, max_length=2000)

class VerificationUpdateResult(BaseModel):
    changed: bool
    company: CompanyProfileOut
