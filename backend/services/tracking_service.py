# backend/services/tracking_service.py
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

from models.order_model import Order
from models.order_status_event_model import OrderStatusEvent
from schemas.tracking import TrackingStep, TrackingView
from services.order_status import FORWARD_STATUSES, OrderStatus, ordinal

STEP_INFO = {
    OrderStatus.PENDING: ("Order Placed", "Your order has been received"),
    OrderStatus.CONFIRMED: ("Confirmed", "Order confirmed by seller"),
    OrderStatus.PROCESSING: ("Processing", "Preparing your order"),
    OrderStatus.SHIPPED: ("Shipped", "On the way to you"),
    OrderStatus.DELIVERED: ("Delivered", "Order delivered"),
}
CANCELLED_LABEL = "Cancelled"

# estimate used for a reached step that has no logged event
SYNTHETIC_STEP_INTERVAL = timedelta(hours=1)


def status_label(status: str) -> str:
    try:
        parsed = OrderStatus(status)
    except ValueError:
        return status
    if parsed == OrderStatus.CANCELLED:
        return CANCELLED_LABEL
    return STEP_INFO[parsed][0]


def _event_times(events: Iterable[OrderStatusEvent]) -> Dict[str, datetime]:
    # latest entry wins when an order toggled back into a status
    times: Dict[str, datetime] = {}
    for ev in sorted(events, key=lambda e: e.created_at):
        times[ev.status] = ev.created_at
    return times


def build_tracking_view(order: Order, events: Optional[Iterable[OrderStatusEvent]] = None) -> TrackingView:
    """
    Step-indexed progress for an order.

    Steps before the current status are complete, the current one is active,
    later ones pending. Timestamps come from the status log; a reached step
    with no logged event gets created_at + index hours and is flagged
    synthetic.
    """
    event_times = _event_times(events if events is not None else order.events)
    cancelled = order.status == OrderStatus.CANCELLED.value
    current = None if cancelled else ordinal(order.status)

    steps = []
    for index, status in enumerate(FORWARD_STATUSES):
        label, description = STEP_INFO[status]
        logged = event_times.get(status.value)

        if cancelled:
            state = "complete" if logged else "pending"
        elif index < current:
            state = "complete"
        elif index == current:
            state = "active"
        else:
            state = "pending"

        timestamp = None
        synthetic = False
        if state != "pending":
            if logged:
                timestamp = logged
            else:
                timestamp = order.created_at + index * SYNTHETIC_STEP_INTERVAL
                synthetic = True

        steps.append(TrackingStep(
            index=index,
            key=status.value,
            label=label,
            description=description,
            state=state,
            timestamp=timestamp,
            synthetic=synthetic,
        ))

    last_index = len(FORWARD_STATUSES) - 1
    return TrackingView(
        order_id=order.id,
        short_id=order.short_id,
        status=order.status,
        status_label=status_label(order.status),
        current_index=current,
        progress_percent=0.0 if cancelled else round(current / last_index * 100, 2),
        cancelled=cancelled,
        tracking_number=order.tracking_number,
        steps=steps,
    )
