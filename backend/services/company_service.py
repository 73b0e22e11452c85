# backend/services/company_service.py
"""
Company profiles and the admin verification workflow.

Owners create and edit their own profile; only admins move it between
pending, under_review, verified and rejected. Each real change notifies the
owner and stages a status email in the same transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from config import settings
from models.company_profile_model import CompanyProfile
from models.user_model import User
from schemas.companies import CompanyProfileIn
from services.email_service import build_verification_email
from services.errors import AuthorizationError, NotFoundError, ValidationError
from services.identity_service import Actor
from services.notification_service import create_notification
from services.outbox_service import enqueue_email

logger = logging.getLogger(__name__)

COMPANY_PROFILE_LINK = "/company-profile"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    VERIFIED = "verified"
    REJECTED = "rejected"


VERIFICATION_LABELS = {
    VerificationStatus.PENDING: "Pending Verification",
    VerificationStatus.UNDER_REVIEW: "Under Review",
    VerificationStatus.VERIFIED: "Verified",
    VerificationStatus.REJECTED: "Rejected",
}


@dataclass
class VerificationOutcome:
    company: CompanyProfile
    changed: bool
    email_id: Optional[str] = None


def parse_verification_status(value) -> VerificationStatus:
    try:
        return VerificationStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid verification status '{value}'")


# ---------- owner ----------

def get_my_company(db: Session, actor: Actor) -> CompanyProfile:
    c = db.query(CompanyProfile).filter(CompanyProfile.user_id == actor.user_id).first()
    if not c:
        raise NotFoundError("No company profile yet")
    return c


def save_my_company(db: Session, actor: Actor, body: CompanyProfileIn) -> CompanyProfile:
    """Create or update the caller's profile. The verification status is never touched here."""
    c = db.query(CompanyProfile).filter(CompanyProfile.user_id == actor.user_id).first()
    if c is None:
        c = CompanyProfile(user_id=actor.user_id, verification_status=VerificationStatus.PENDING.value)
        db.add(c)
        logger.info(f"Company profile created for user {actor.user_id}")
    for key, value in body.model_dump().items():
        setattr(c, key, value)
    c.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(c)
    return c


def get_company(db: Session, actor: Actor, company_id: str) -> CompanyProfile:
    c = db.get(CompanyProfile, company_id)
    if not c:
        raise NotFoundError("Company not found")
    if c.user_id != actor.user_id and not actor.is_admin:
        raise AuthorizationError("You are not allowed to view this company")
    return c


# ---------- admin ----------

def list_companies(db: Session, actor: Actor, status: Optional[str] = None) -> List[CompanyProfile]:
    if not actor.is_admin:
        raise AuthorizationError("Admin role required")
    q = db.query(CompanyProfile)
    if status is not None:
        q = q.filter(CompanyProfile.verification_status == parse_verification_status(status).value)
    return q.order_by(CompanyProfile.created_at.desc()).all()


def update_verification_status(
    db: Session,
    actor: Actor,
    company_id: str,
    status,
    rejection_reason: Optional[str] = None,
) -> VerificationOutcome:
    """
    Apply an admin verification decision.

    Rejecting needs a reason. verified stamps verified_at; any other status
    clears it, and only rejected keeps a reason. Re-applying the current
    decision changes nothing and sends nothing.
    """
    if not actor.is_admin:
        raise AuthorizationError("Only admins can change verification status")
    c = db.get(CompanyProfile, company_id)
    if not c:
        raise NotFoundError("Company not found")
    target = parse_verification_status(status)

    reason = (rejection_reason or "").strip() or None
    if target == VerificationStatus.REJECTED and not reason:
        raise ValidationError("A rejection reason is required")
    if target != VerificationStatus.REJECTED:
        reason = None

    old_status = c.verification_status
    if target.value == old_status and reason == c.rejection_reason:
        return VerificationOutcome(company=c, changed=False)

    c.verification_status = target.value
    c.rejection_reason = reason
    c.verified_at = datetime.utcnow() if target == VerificationStatus.VERIFIED else None
    c.updated_at = datetime.utcnow()

    create_notification(
        db,
        user_id=c.user_id,
        title="Company Verification Update",
        message=f"{c.company_name} verification status: {VERIFICATION_LABELS[target]}",
        type="alert",
        link=COMPANY_PROFILE_LINK,
    )
    email = _queue_verification_email(db, c, target, reason)
    db.commit()
    db.refresh(c)

    logger.info(f"Company {c.id} verification {old_status} -> {c.verification_status} by {actor.user_id}")
    return VerificationOutcome(company=c, changed=True, email_id=email.id if email else None)


def _queue_verification_email(db: Session, company: CompanyProfile, status: VerificationStatus, reason: Optional[str]):
    owner = db.get(User, company.user_id)
    if not owner or not owner.email:
        logger.warning(f"No email on file for owner of company {company.id}, skipping verification email")
        return None
    rendered = build_verification_email(company.company_name, status.value, reason, app_name=settings.APP_NAME)
    if rendered is None:
        return None
    subject, html_body = rendered
    return enqueue_email(db, owner.email, subject, html_body)
