# backend/routers/companies_router.py
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from database.session import get_db
from schemas.companies import (
    CompanyProfileIn,
    CompanyProfileOut,
    VerificationStatusUpdate,
    VerificationUpdateResult,
)
from services import company_service
from services.identity_service import Actor, get_current_actor
from services.outbox_service import OutboxService, get_outbox_service

router = APIRouter(prefix="/companies", tags=["companies"])

@router.get("/mine", response_model=CompanyProfileOut)
def get_my_company(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return company_service.get_my_company(db, actor)

@router.put("/mine", response_model=CompanyProfileOut)
def save_my_company(body: CompanyProfileIn, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return company_service.save_my_company(db, actor, body)

@router.get("/", response_model=List[CompanyProfileOut])
def list_companies(
    status: Optional[str] = Query(default=None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return company_service.list_companies(db, actor, status=status)

@router.get("/{company_id}", response_model=CompanyProfileOut)
def get_company(company_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return company_service.get_company(db, actor, company_id)

@router.put("/{company_id}/verification", response_model=VerificationUpdateResult)
def update_verification_status(
    company_id: str,
    body: VerificationStatusUpdate,
    bg: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    outbox: OutboxService = Depends(get_outbox_service),
):
    outcome = company_service.update_verification_status(
        db, actor, company_id, body.status, rejection_reason=body.rejection_reason
    )
    if outcome.email_id:
        bg.add_task(outbox.deliver, outcome.email_id)
    return VerificationUpdateResult(
        changed=outcome.changed,
        company=CompanyProfileOut.model_validate(outcome.company),
    )
