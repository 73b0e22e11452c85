from decimal import Decimal

import pytest
import requests

from models.email_outbox_model import EmailOutbox
from services import email_service
from services.email_service import ResendEmailDispatcher, build_order_status_email
from services.errors import TransientDeliveryError
from services.outbox_service import OutboxService, enqueue_email

from conftest import FailingDispatcher


class FlakyDispatcher:
    def __init__(self, failures):
        self.failures = failures
        self.calls = 0

    def send(self, recipient, subject, html_body):
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientDeliveryError("try again")


def test_template_per_status_with_fallback():
    subject, html = build_order_status_email(
        "Bea", "abcdef12-3456", "shipped",
        [("Pallet Jack", 2, Decimal("75.00")), ("Tape <b>", 1, Decimal("1.50"))],
    )
    assert subject == "Your order has been shipped - Order #ABCDEF12"
    assert "Order Shipped!" in html
    assert "$150.00" in html
    assert "$151.50" in html
    assert "Tape &lt;b&gt;" in html

    subject, _ = build_order_status_email(None, "abcdef12", "on-hold", [])
    assert subject == "Order status update - Order #ABCDEF12"


def _stage(session_factory):
    db = session_factory()
    try:
        row = enqueue_email(db, "bea@example.com", "s", "<p>h</p>")
        db.commit()
        return row.id
    finally:
        db.close()


def test_outbox_delivers_and_marks_sent(session_factory, outbox, dispatcher):
    row_id = _stage(session_factory)
    assert outbox.deliver(row_id) == "sent"
    assert dispatcher.sent == [("bea@example.com", "s", "<p>h</p>")]
    # already sent rows are not sent twice
    assert outbox.deliver(row_id) == "sent"
    assert len(dispatcher.sent) == 1


def test_outbox_retries_then_succeeds(session_factory):
    flaky = FlakyDispatcher(failures=2)
    svc = OutboxService(dispatcher=flaky, session_factory=session_factory, max_attempts=3, backoff_seconds=0)
    row_id = _stage(session_factory)
    assert svc.deliver(row_id) == "sent"
    db = session_factory()
    try:
        row = db.get(EmailOutbox, row_id)
        assert row.attempts == 3
        assert row.last_error is None
    finally:
        db.close()


def test_outbox_dead_letters_after_bounded_attempts(session_factory):
    failing = FailingDispatcher()
    svc = OutboxService(dispatcher=failing, session_factory=session_factory, max_attempts=2, backoff_seconds=0)
    row_id = _stage(session_factory)
    assert svc.deliver(row_id) == "dead"
    assert failing.calls == 2
    db = session_factory()
    try:
        assert db.get(EmailOutbox, row_id).last_error == "smtp down"
    finally:
        db.close()


def test_deliver_pending_redrives_unsent_rows(session_factory, outbox, dispatcher):
    ids = [_stage(session_factory), _stage(session_factory)]
    assert sorted(outbox.deliver_pending()) == sorted(ids)
    assert len(dispatcher.sent) == 2
    assert outbox.deliver_pending() == []


def test_resend_dispatcher_maps_http_failures(monkeypatch):
    class Resp:
        status_code = 500
        text = "boom"

    monkeypatch.setattr(email_service.requests, "post", lambda *a, **kw: Resp())
    d = ResendEmailDispatcher("key", api_url="https://email.invalid/send", timeout=1)
    with pytest.raises(TransientDeliveryError, match="500"):
        d.send("a@b.c", "s", "h")

    def timeout(*a, **kw):
        raise requests.exceptions.Timeout()

    monkeypatch.setattr(email_service.requests, "post", timeout)
    with pytest.raises(TransientDeliveryError, match="timed out"):
        d.send("a@b.c", "s", "h")


def test_resend_dispatcher_posts_payload(monkeypatch):
    captured = {}

    class Resp:
        status_code = 200
        text = "{}"

    def fake_post(url, json=None, headers=None, timeout=None):
        captured.update(url=url, json=json, headers=headers, timeout=timeout)
        return Resp()

    monkeypatch.setattr(email_service.requests, "post", fake_post)
    ResendEmailDispatcher("key", api_url="https://email.invalid/send", sender="Shop <s@x.y>", timeout=3).send(
        "a@b.c", "Subject", "<p>x</p>"
    )
    assert captured["json"] == {"from": "Shop <s@x.y>", "to": ["a@b.c"], "subject": "Subject", "html": "<p>x</p>"}
    assert captured["headers"] == {"Authorization": "Bearer key"}
    assert captured["timeout"] == 3
