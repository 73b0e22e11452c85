# backend/schemas/notifications.py
from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict

NotificationType = Literal["order", "promo", "alert", "general"]

class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool
    link: Optional[str] = None
    created_at: datetime

class UnreadCount(BaseModel):
    unread: int

class ActionResult(BaseModel):
    ok: bool = True
    affected: int = 0
