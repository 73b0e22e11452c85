from datetime import datetime, timedelta

from models.order_model import Order
from models.order_status_event_model import OrderStatusEvent
from services.tracking_service import build_tracking_view

CREATED = datetime(2026, 1, 10, 9, 0, 0)


def _order(status):
    return Order(
        id="abcdef12-0000-0000-0000-000000000000",
        buyer_id="b",
        status=status,
        total_amount=150,
        shipping_address="x",
        created_at=CREATED,
        updated_at=CREATED,
    )


def test_steps_are_split_around_current_index():
    view = build_tracking_view(_order("processing"), events=[])
    assert view.current_index == 2
    assert [s.state for s in view.steps] == ["complete", "complete", "active", "pending", "pending"]
    assert view.progress_percent == 50.0
    assert view.status_label == "Processing"
    assert view.short_id == "abcdef12"


def test_missing_events_fall_back_to_hourly_estimates():
    view = build_tracking_view(_order("shipped"), events=[])
    reached = [s for s in view.steps if s.state != "pending"]
    assert [s.timestamp for s in reached] == [CREATED + timedelta(hours=i) for i in range(4)]
    assert all(s.synthetic for s in reached)
    assert view.steps[4].timestamp is None


def test_logged_events_win_over_estimates():
    confirmed_at = CREATED + timedelta(minutes=5)
    events = [
        OrderStatusEvent(order_id="o", from_status=None, status="pending", created_at=CREATED),
        OrderStatusEvent(order_id="o", from_status="pending", status="confirmed", created_at=confirmed_at),
    ]
    view = build_tracking_view(_order("confirmed"), events=events)
    assert view.steps[0].timestamp == CREATED and not view.steps[0].synthetic
    assert view.steps[1].timestamp == confirmed_at and not view.steps[1].synthetic
    assert view.steps[1].state == "active"


def test_cancelled_is_out_of_band():
    events = [
        OrderStatusEvent(order_id="o", status="pending", created_at=CREATED),
        OrderStatusEvent(order_id="o", status="cancelled", created_at=CREATED + timedelta(hours=3)),
    ]
    view = build_tracking_view(_order("cancelled"), events=events)
    assert view.cancelled
    assert view.current_index is None
    assert view.progress_percent == 0.0
    assert view.status_label == "Cancelled"
    assert [s.state for s in view.steps] == ["complete", "pending", "pending", "pending", "pending"]


def test_delivered_is_full_progress():
    view = build_tracking_view(_order("delivered"), events=[])
    assert view.current_index == 4
    assert view.progress_percent == 100.0
    assert view.steps[-1].state == "active"
