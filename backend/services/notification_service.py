# backend/services/notification_service.py
"""
Notification fan-out for order events plus the owner-only notification
operations behind the bell and the notifications page.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from config import settings
from models.email_outbox_model import EmailOutbox
from models.notification_model import Notification
from models.order_model import Order
from models.user_model import User
from services.email_service import build_order_status_email
from services.errors import AuthorizationError, NotFoundError, ValidationError
from services.identity_service import Actor
from services.outbox_service import enqueue_email

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("order", "promo", "alert", "general")


def order_link(order_id: str) -> str:
    return f"/orders/{order_id}/tracking"


def create_notification(
    db: Session,
    user_id: str,
    title: str,
    message: str,
    type: str = "general",
    link: Optional[str] = None,
) -> Notification:
    if type not in NOTIFICATION_TYPES:
        raise ValidationError(f"Invalid notification type '{type}'")
    n = Notification(user_id=user_id, title=title, message=message, type=type, link=link, is_read=False)
    db.add(n)
    return n


def notify_order_placed(db: Session, order: Order) -> Notification:
    return create_notification(
        db,
        user_id=order.buyer_id,
        title="Order Confirmed",
        message=f"Your order #{order.short_id} has been placed successfully!",
        type="order",
        link=order_link(order.id),
    )


def notify_status_change(db: Session, order: Order, old_status: str, new_status: str) -> Optional[Notification]:
    """One notification for the buyer per real status change; a same-value write creates none."""
    if old_status == new_status:
        return None
    return create_notification(
        db,
        user_id=order.buyer_id,
        title="Order Status Updated",
        message=f"Your order #{order.short_id} status changed to: {new_status}",
        type="order",
        link=order_link(order.id),
    )


def queue_status_email(db: Session, order: Order, new_status: str, seller_id: str) -> Optional[EmailOutbox]:
    """
    Stage the status email for the buyer. Only the notifying seller's own
    lines are listed, an order may span several sellers.
    """
    buyer = order.buyer or db.get(User, order.buyer_id)
    if not buyer or not buyer.email:
        logger.warning(f"No email on file for buyer of order {order.id}, skipping status email")
        return None

    items = [
        (it.product.name if it.product else None, it.quantity, it.price)
        for it in order.items
        if it.seller_id == seller_id
    ]
    subject, html_body = build_order_status_email(
        buyer_name=buyer.full_name or "Customer",
        order_id=order.id,
        new_status=new_status,
        items=items,
        app_name=settings.APP_NAME,
    )
    return enqueue_email(db, buyer.email, subject, html_body)


# ---------- owner operations ----------

def list_notifications(
    db: Session,
    actor: Actor,
    limit: Optional[int] = None,
    unread_only: bool = False,
) -> List[Notification]:
    q = db.query(Notification).filter(Notification.user_id == actor.user_id)
    if unread_only:
        q = q.filter(Notification.is_read.is_(False))
    q = q.order_by(Notification.created_at.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def unread_count(db: Session, actor: Actor) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == actor.user_id, Notification.is_read.is_(False))
        .count()
    )


def _owned(db: Session, actor: Actor, notification_id: str) -> Notification:
    n = db.get(Notification, notification_id)
    if not n:
        raise NotFoundError("Notification not found")
    if n.user_id != actor.user_id:
        raise AuthorizationError("Notification belongs to another user")
    return n


def mark_read(db: Session, actor: Actor, notification_id: str) -> Notification:
    n = _owned(db, actor, notification_id)
    if not n.is_read:
        n.is_read = True
        db.commit()
        db.refresh(n)
    return n


def mark_all_read(db: Session, actor: Actor) -> int:
    affected = (
        db.query(Notification)
        .filter(Notification.user_id == actor.user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return affected


def delete_notification(db: Session, actor: Actor, notification_id: str) -> None:
    n = _owned(db, actor, notification_id)
    db.delete(n)
    db.commit()
