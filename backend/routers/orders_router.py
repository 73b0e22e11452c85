# backend/routers/orders_router.py
import asyncio
import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from database.session import get_db
from models.order_status_event_model import OrderStatusEvent
from schemas.orders import (
    OrderCreate,
    OrderResponse,
    OrderStatusEventOut,
    OrderStatusUpdate,
    OrderStatusUpdateResult,
)
from schemas.tracking import TrackingView
from services import order_service
from services.errors import MarketplaceError
from services.identity_service import Actor, get_current_actor, resolve_actor
from services.outbox_service import OutboxService, get_outbox_service
from services.realtime_service import change_feed, order_channel
from services.tracking_service import build_tracking_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

def _events(db: Session, order_id: str) -> List[OrderStatusEvent]:
    return (
        db.query(OrderStatusEvent)
        .filter(OrderStatusEvent.order_id == order_id)
        .order_by(OrderStatusEvent.created_at, OrderStatusEvent.id)
        .all()
    )

@router.post("/", response_model=OrderResponse, status_code=201)
def create_order(body: OrderCreate, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    o = order_service.create_order(db, actor, body)
    return order_service.to_snapshot(o)

@router.get("/mine", response_model=List[OrderResponse])
def get_my_orders(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return [order_service.to_snapshot(o) for o in order_service.list_buyer_orders(db, actor)]

@router.get("/seller", response_model=List[OrderResponse])
def get_seller_orders(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    # a seller only sees their own lines of a multi-seller order
    return [
        order_service.to_snapshot(o, seller_id=actor.user_id)
        for o in order_service.list_seller_orders(db, actor)
    ]

@router.get("/{order_id}", response_model=OrderResponse)
def get_order_by_id(order_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return order_service.snapshot_for(order_service.get_order(db, actor, order_id), actor)

@router.get("/{order_id}/events", response_model=List[OrderStatusEventOut])
def get_order_events(order_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    return order_service.list_order_events(db, actor, order_id)

@router.get("/{order_id}/tracking", response_model=TrackingView)
def get_order_tracking(order_id: str, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    """Full re-fetch of the progress view; what the Refresh button calls."""
    o = order_service.get_order(db, actor, order_id)
    return build_tracking_view(o, _events(db, o.id))

@router.put("/{order_id}/status", response_model=OrderStatusUpdateResult)
def update_order_status(
    order_id: str,
    status_update: OrderStatusUpdate,
    bg: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    outbox: OutboxService = Depends(get_outbox_service),
):
    outcome = order_service.update_order_status(
        db,
        actor,
        order_id,
        status_update.status,
        tracking_number=status_update.tracking_number,
        expected_version=status_update.expected_version,
    )
    # delivered after the response; a failing email never reaches the caller
    if outcome.email_id:
        bg.add_task(outbox.deliver, outcome.email_id)
    return OrderStatusUpdateResult(
        changed=outcome.changed,
        order=order_service.snapshot_for(outcome.order, actor),
    )


# ---------- realtime ----------
# All DB work of the socket runs in the threadpool, and the session is
# rolled back after each read so an idle viewer holds no pooled connection.

def _authorize_viewer(db: Session, user_id: str, order_id: str) -> Actor:
    try:
        actor = resolve_actor(db, user_id)
        order_service.get_order(db, actor, order_id)
        return actor
    finally:
        db.rollback()

def _ws_payload(db: Session, actor: Actor, snapshot: OrderResponse) -> dict:
    try:
        tracking = build_tracking_view(snapshot, _events(db, snapshot.id))
    finally:
        db.rollback()
    return {
        "type": "order",
        "order": order_service.project_snapshot(snapshot, actor).model_dump(mode="json"),
        "tracking": tracking.model_dump(mode="json"),
    }

def _current_payload(db: Session, actor: Actor, order_id: str) -> dict:
    try:
        db.expire_all()
        snapshot = order_service.to_snapshot(order_service.get_order(db, actor, order_id))
    finally:
        db.rollback()
    return _ws_payload(db, actor, snapshot)

@router.websocket("/{order_id}/ws")
async def order_updates(
    websocket: WebSocket,
    order_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    """
    Pushes the order snapshot and tracking view on every committed change.

    The current state is sent on connect, and again whenever the client sends
    "refresh"; there is no replay of changes missed while disconnected. A
    seller only ever receives their own lines of the order.
    """
    try:
        actor = await run_in_threadpool(_authorize_viewer, db, user_id, order_id)
    except MarketplaceError as e:
        logger.info(f"Rejected realtime subscription to order {order_id}: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    # subscribe before the initial read so no commit falls in between
    with change_feed.subscribe(order_channel(order_id)) as sub:
        receiver = asyncio.ensure_future(websocket.receive_text())
        try:
            payload = await run_in_threadpool(_current_payload, db, actor, order_id)
            await websocket.send_json(payload)
            sent_version = payload["order"]["version"]
            while True:
                if receiver.done():
                    message = receiver.result()
                    if message.strip().lower() == "refresh":
                        payload = await run_in_threadpool(_current_payload, db, actor, order_id)
                        await websocket.send_json(payload)
                        sent_version = payload["order"]["version"]
                    receiver = asyncio.ensure_future(websocket.receive_text())
                snapshot = await run_in_threadpool(sub.poll, 0.5)
                # already covered by the state read on connect or refresh
                if snapshot is None or snapshot.version <= sent_version:
                    continue
                await websocket.send_json(await run_in_threadpool(_ws_payload, db, actor, snapshot))
                sent_version = snapshot.version
        except WebSocketDisconnect:
            logger.info(f"Realtime client left order {order_id}")
        finally:
            receiver.cancel()
