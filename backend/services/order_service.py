# backend/services/order_service.py
"""
Order write and read paths.

Every status change goes through update_order_status: authorization,
transition rule, versioned update, status event, buyer notification and the
staged email all land in one transaction; the realtime snapshot is published
only after that transaction commits.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from config import settings
from models.order_item_model import OrderItem
from models.order_model import Order
from models.order_status_event_model import OrderStatusEvent
from models.product_model import Product
from schemas.orders import OrderCreate, OrderItemResponse, OrderResponse
from services.errors import (
    AuthorizationError,
    ConcurrencyConflictError,
    NotFoundError,
    ValidationError,
)
from services.identity_service import Actor
from services.notification_service import notify_order_placed, notify_status_change, queue_status_email
from services.order_status import INITIAL_STATUS, check_transition, parse_status
from services.realtime_service import ChangeFeedHub, change_feed, order_channel

logger = logging.getLogger(__name__)


@dataclass
class StatusUpdateOutcome:
    order: Order
    changed: bool
    email_id: Optional[str] = None


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def to_snapshot(order: Order, seller_id: Optional[str] = None) -> OrderResponse:
    """Order row -> API/realtime snapshot. seller_id narrows items to that seller's lines."""
    items: List[OrderItemResponse] = []
    for it in order.items:
        if seller_id is not None and it.seller_id != seller_id:
            continue
        price = float(it.price)
        items.append(OrderItemResponse(
            id=it.id,
            product_id=it.product_id,
            product_name=it.product.name if it.product else None,
            seller_id=it.seller_id,
            quantity=it.quantity,
            price=price,
            line_total=round(price * it.quantity, 2),
        ))
    return OrderResponse(
        id=order.id,
        short_id=order.short_id,
        buyer_id=order.buyer_id,
        status=order.status,
        total_amount=float(order.total_amount),
        shipping_address=order.shipping_address,
        tracking_number=order.tracking_number,
        created_at=order.created_at,
        updated_at=order.updated_at,
        version=order.version,
        items=items,
    )


def _sees_all_lines(actor: Actor, buyer_id: str) -> bool:
    return actor.user_id == buyer_id or actor.is_admin


def snapshot_for(order: Order, actor: Actor) -> OrderResponse:
    """Snapshot as the actor may see it: a seller only gets their own lines."""
    if _sees_all_lines(actor, order.buyer_id):
        return to_snapshot(order)
    return to_snapshot(order, seller_id=actor.user_id)


def project_snapshot(snapshot: OrderResponse, actor: Actor) -> OrderResponse:
    """Narrow a shared (published) snapshot to what the actor may see."""
    if _sees_all_lines(actor, snapshot.buyer_id):
        return snapshot
    items = [it for it in snapshot.items if it.seller_id == actor.user_id]
    return snapshot.model_copy(update={"items": items})


def _load_order(db: Session, order_id: str) -> Order:
    o = (
        db.query(Order)
        .options(joinedload(Order.items).joinedload(OrderItem.product))
        .filter(Order.id == order_id)
        .first()
    )
    if not o:
        raise NotFoundError("Order not found")
    return o


def seller_has_items(db: Session, order_id: str, seller_id: str) -> bool:
    return (
        db.query(OrderItem.id)
        .filter(OrderItem.order_id == order_id, OrderItem.seller_id == seller_id)
        .first()
        is not None
    )


def can_view_order(db: Session, actor: Actor, order: Order) -> bool:
    return (
        order.buyer_id == actor.user_id
        or actor.is_admin
        or seller_has_items(db, order.id, actor.user_id)
    )


def can_update_status(db: Session, actor: Actor, order: Order) -> bool:
    """Sellers with at least one line on the order. Buyers have no transition rights."""
    return actor.is_seller and seller_has_items(db, order.id, actor.user_id)


# ---------- reads ----------

def get_order(db: Session, actor: Actor, order_id: str) -> Order:
    o = _load_order(db, order_id)
    if not can_view_order(db, actor, o):
        raise AuthorizationError("You are not allowed to view this order")
    return o


def list_buyer_orders(db: Session, actor: Actor) -> List[Order]:
    return (
        db.query(Order)
        .options(joinedload(Order.items).joinedload(OrderItem.product))
        .filter(Order.buyer_id == actor.user_id)
        .order_by(Order.created_at.desc())
        .all()
    )


def list_seller_orders(db: Session, actor: Actor) -> List[Order]:
    """Orders containing at least one of the seller's lines, newest first."""
    if not actor.is_seller:
        raise AuthorizationError("Seller role required")
    order_ids = (
        select(OrderItem.order_id)
        .where(OrderItem.seller_id == actor.user_id)
        .distinct()
    )
    return (
        db.query(Order)
        .options(joinedload(Order.items).joinedload(OrderItem.product))
        .filter(Order.id.in_(order_ids))
        .order_by(Order.created_at.desc())
        .all()
    )


def list_order_events(db: Session, actor: Actor, order_id: str) -> List[OrderStatusEvent]:
    o = get_order(db, actor, order_id)
    return (
        db.query(OrderStatusEvent)
        .filter(OrderStatusEvent.order_id == o.id)
        .order_by(OrderStatusEvent.created_at, OrderStatusEvent.id)
        .all()
    )


# ---------- writes ----------

def create_order(db: Session, actor: Actor, body: OrderCreate) -> Order:
    if not actor.is_buyer:
        raise AuthorizationError("Buyer role required to place orders")
    if not body.items:
        raise ValidationError("An order needs at least one item")

    o = Order(
        buyer_id=actor.user_id,
        status=INITIAL_STATUS.value,
        shipping_address=body.shipping_address,
        total_amount=Decimal("0"),
    )
    db.add(o)

    total = Decimal("0")
    for item in body.items:
        p = db.get(Product, item.product_id)
        if not p or p.status != "active":
            db.rollback()
            raise ValidationError(f"Product {item.product_id} not found or not available")
        price = _money(p.price)
        total += price * item.quantity
        o.items.append(OrderItem(
            product_id=p.id,
            seller_id=p.seller_id,
            quantity=item.quantity,
            price=price,
        ))

    o.total_amount = total
    db.flush()
    db.add(OrderStatusEvent(order_id=o.id, from_status=None, status=o.status, actor_id=actor.user_id))
    notify_order_placed(db, o)
    db.commit()

    logger.info(f"Order {o.id} placed by {actor.user_id} with {len(body.items)} item(s), total {total}")
    return _load_order(db, o.id)


def update_order_status(
    db: Session,
    actor: Actor,
    order_id: str,
    status,
    tracking_number: Optional[str] = None,
    expected_version: Optional[int] = None,
    policy: Optional[str] = None,
    hub: Optional[ChangeFeedHub] = None,
) -> StatusUpdateOutcome:
    """
    Apply a seller's status change.

    Raises ValidationError for an unknown status or a move the transition
    policy forbids, AuthorizationError when the actor has no line on the
    order, ConcurrencyConflictError when another writer committed first.
    A write that changes nothing creates no notification, event or email.
    """
    hub = hub or change_feed
    policy = policy or settings.ORDER_TRANSITION_POLICY

    o = _load_order(db, order_id)
    if not can_update_status(db, actor, o):
        raise AuthorizationError("Only sellers with items on this order can change its status")
    target = parse_status(status)
    if expected_version is not None and expected_version != o.version:
        raise ConcurrencyConflictError(
            f"Order was modified (version {o.version}, expected {expected_version}); refresh and retry"
        )

    old_status = o.status
    check_transition(old_status, target, policy)

    tracking_number = (tracking_number or "").strip() or None
    status_changed = target.value != old_status
    tracking_changed = tracking_number is not None and tracking_number != o.tracking_number
    if not status_changed and not tracking_changed:
        return StatusUpdateOutcome(order=o, changed=False)

    o.updated_at = datetime.utcnow()
    if tracking_changed:
        o.tracking_number = tracking_number

    email = None
    if status_changed:
        o.status = target.value
        db.add(OrderStatusEvent(
            order_id=o.id,
            from_status=old_status,
            status=target.value,
            actor_id=actor.user_id,
        ))
        notify_status_change(db, o, old_status, target.value)
        email = queue_status_email(db, o, target.value, seller_id=actor.user_id)

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Lost update on order {order_id}: another writer committed first")
        raise ConcurrencyConflictError("Order was modified by someone else; refresh and retry")

    logger.info(f"Order {o.id} status {old_status} -> {o.status} by {actor.user_id}")

    o = _load_order(db, o.id)
    hub.publish(order_channel(o.id), to_snapshot(o))
    return StatusUpdateOutcome(order=o, changed=True, email_id=email.id if email else None)
