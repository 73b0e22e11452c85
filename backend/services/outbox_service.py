# backend/services/outbox_service.py
import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from config import settings
from database.session import SessionLocal
from models.email_outbox_model import EmailOutbox
from services.email_service import EmailDispatcher, get_default_dispatcher
from services.errors import TransientDeliveryError

logger = logging.getLogger(__name__)


def enqueue_email(db: Session, recipient: str, subject: str, html_body: str) -> EmailOutbox:
    """Stage an email in the caller's transaction. Nothing is sent until it commits."""
    row = EmailOutbox(recipient=recipient, subject=subject, html=html_body, status="pending", attempts=0)
    db.add(row)
    return row


class OutboxService:
    """
    Delivers staged emails with bounded retry.

    A row ends either "sent" or, after max_attempts failures, "dead". Failures
    are logged and never raised: the business change that staged the email
    has already committed and does not depend on delivery.
    """

    def __init__(
        self,
        dispatcher: Optional[EmailDispatcher] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        max_attempts: int = settings.EMAIL_MAX_ATTEMPTS,
        backoff_seconds: float = 0.5,
    ):
        self.dispatcher = dispatcher or get_default_dispatcher()
        self.session_factory = session_factory
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds

    def deliver(self, outbox_id: str) -> Optional[str]:
        """Try to send one row. Returns its final status, or None if it does not exist."""
        db = self.session_factory()
        try:
            row = db.get(EmailOutbox, outbox_id)
            if not row:
                logger.warning(f"Outbox row {outbox_id} not found")
                return None
            if row.status != "pending":
                return row.status

            while row.attempts < self.max_attempts:
                row.attempts += 1
                try:
                    self.dispatcher.send(row.recipient, row.subject, row.html)
                except TransientDeliveryError as e:
                    row.last_error = e.detail
                    logger.warning(
                        f"Email {row.id} attempt {row.attempts}/{self.max_attempts} failed: {e.detail}"
                    )
                except Exception as e:
                    row.last_error = str(e)
                    logger.error(
                        f"Email {row.id} attempt {row.attempts}/{self.max_attempts} crashed: {e}"
                    )
                else:
                    row.status = "sent"
                    row.sent_at = datetime.utcnow()
                    row.last_error = None
                    db.commit()
                    return row.status
                db.commit()
                if row.attempts < self.max_attempts and self.backoff_seconds:
                    time.sleep(self.backoff_seconds * row.attempts)

            row.status = "dead"
            db.commit()
            logger.error(f"Email {row.id} to {row.recipient} moved to dead-letter after {row.attempts} attempts")
            return row.status
        finally:
            db.close()

    def deliver_pending(self, limit: int = 50) -> List[str]:
        """Re-drive rows still pending (e.g. after a restart). Returns the ids processed."""
        db = self.session_factory()
        try:
            ids = [
                r.id for r in (
                    db.query(EmailOutbox.id)
                    .filter(EmailOutbox.status == "pending")
                    .order_by(EmailOutbox.created_at)
                    .limit(limit)
                    .all()
                )
            ]
        finally:
            db.close()
        for outbox_id in ids:
            self.deliver(outbox_id)
        return ids


_outbox_service: Optional[OutboxService] = None

def get_outbox_service() -> OutboxService:
    """FastAPI dependency; tests override it with a fake dispatcher."""
    global _outbox_service
    if _outbox_service is None:
        _outbox_service = OutboxService()
    return _outbox_service
