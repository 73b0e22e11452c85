# backend/routers/notifications_router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.session import get_db
from schemas.notifications import ActionResult, NotificationOut, UnreadCount
from services import notification_service
from services.identity_service import Actor, get_current_actor

router = APIRouter(prefix="/notifications", tags=["notifications"])

@router.get("/", response_model=List[NotificationOut])
def list_notifications(
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    unread_only: bool = Query(default=False),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return notification_service.list_notifications(db, actor, limit=limit, unread_only=unread_only)

@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return UnreadCount(unread=notification_service.unread_count(db, actor))

@router.put("/read-all", response_model=ActionResult)
def mark_all_read(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return ActionResult(affected=notification_service.mark_all_read(db, actor))

@router.put("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return notification_service.mark_read(db, actor, notification_id)

@router.delete("/{notification_id}", response_model=ActionResult)
def delete_notification(notification_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    notification_service.delete_notification(db, actor, notification_id)
    return ActionResult(affected=1)
