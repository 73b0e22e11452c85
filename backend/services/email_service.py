# backend/services/email_service.py
"""
Transactional email: status templates and the dispatchers that send them.

The dispatcher contract is small: send(recipient, subject, html) either
returns or raises TransientDeliveryError. Retrying and dead-lettering are
the outbox's job (services/outbox_service.py), not the dispatcher's.
"""

import html
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

import requests

from config import settings
from services.errors import TransientDeliveryError

logger = logging.getLogger(__name__)

STATUS_TEMPLATES: Dict[str, Dict[str, str]] = {
    "confirmed": {
        "subject": "Your order has been confirmed",
        "heading": "Order Confirmed! 👍",
        "message": "The seller has confirmed your order and will start preparing it shortly.",
        "color": "#0ea5e9",
    },
    "processing": {
        "subject": "Your order is being processed",
        "heading": "Order Processing! 📦",
        "message": "Great news! Your order is now being prepared by the seller. We'll notify you once it ships.",
        "color": "#3b82f6",
    },
    "shipped": {
        "subject": "Your order has been shipped",
        "heading": "Order Shipped! 🚚",
        "message": "Your order is on its way! You'll receive it soon. Track your package for real-time updates.",
        "color": "#8b5cf6",
    },
    "delivered": {
        "subject": "Your order has been delivered",
        "heading": "Order Delivered! ✅",
        "message": "Your order has been successfully delivered. We hope you love your purchase!",
        "color": "#22c55e",
    },
    "cancelled": {
        "subject": "Your order has been cancelled",
        "heading": "Order Cancelled ❌",
        "message": "Unfortunately, your order has been cancelled. If you have any questions, please contact support.",
        "color": "#ef4444",
    },
    "pending": {
        "subject": "Order status update",
        "heading": "Order Update 📋",
        "message": "Your order status has been updated to pending.",
        "color": "#f59e0b",
    },
}


def get_status_template(status: str) -> Dict[str, str]:
    return STATUS_TEMPLATES.get(status, STATUS_TEMPLATES["pending"])


def _money(value) -> str:
    return f"${Decimal(str(value)).quantize(Decimal('0.01'))}"


def build_order_status_email(
    buyer_name: Optional[str],
    order_id: str,
    new_status: str,
    items: Iterable[Tuple[str, int, Decimal]],
    app_name: str = "Marketplace",
) -> Tuple[str, str]:
    """
    Render the status email.

    items are (product name, quantity, unit price) for the lines the
    notifying seller owns; the table total only covers those lines.
    Returns (subject, html).
    """
    info = get_status_template(new_status)
    short_id = order_id[:8].upper()

    rows: List[str] = []
    total = Decimal("0")
    for name, quantity, price in items:
        line = Decimal(str(price)) * quantity
        total += line
        rows.append(
            "<tr>"
            f'<td style="padding: 12px; border-bottom: 1px solid #e5e7eb;">{html.escape(name or "Product")}</td>'
            f'<td style="padding: 12px; border-bottom: 1px solid #e5e7eb; text-align: center;">{quantity}</td>'
            f'<td style="padding: 12px; border-bottom: 1px solid #e5e7eb; text-align: right;">{_money(line)}</td>'
            "</tr>"
        )

    body = f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"></head>
  <body style="margin: 0; padding: 0; font-family: 'Segoe UI', Tahoma, sans-serif; background-color: #f3f4f6;">
    <div style="max-width: 600px; margin: 0 auto; padding: 40px 20px;">
      <div style="background: {info['color']}; padding: 32px; text-align: center;">
        <h1 style="color: white; margin: 0;">{info['heading']}</h1>
      </div>
      <div style="background: white; padding: 32px;">
        <p>Hi {html.escape(buyer_name or 'there')},</p>
        <p>{info['message']}</p>
        <p style="color: #6b7280; font-size: 14px;">Order Number</p>
        <p style="font-size: 18px; font-weight: 600;">#{short_id}</p>
        <h3>Order Items</h3>
        <table style="width: 100%; border-collapse: collapse;">
          <thead>
            <tr><th style="text-align: left;">Item</th><th>Qty</th><th style="text-align: right;">Price</th></tr>
          </thead>
          <tbody>{''.join(rows)}</tbody>
          <tfoot>
            <tr>
              <td colspan="2" style="padding: 12px; font-weight: 600;">Total</td>
              <td style="padding: 12px; text-align: right; font-weight: 600;">{_money(total)}</td>
            </tr>
          </tfoot>
        </table>
        <p style="color: #6b7280; font-size: 14px;">Thank you for shopping with {html.escape(app_name)}!</p>
      </div>
    </div>
  </body>
</html>"""

    subject = f"{info['subject']} - Order #{short_id}"
    return subject, body


VERIFICATION_TEMPLATES: Dict[str, Dict[str, str]] = {
    "verified": {
        "subject": "Congratulations! {company} is now verified",
        "heading": "Your Company is Verified! 🎉",
        "message": "Great news! Your company <strong>{company}</strong> has been successfully verified.",
        "details": "You now have access to all verified seller features and your company badge "
                   "will be displayed on your products.",
        "cta": "Start selling with confidence!",
        "color": "#22c55e",
    },
    "rejected": {
        "subject": "Verification Update for {company}",
        "heading": "Verification Not Approved",
        "message": "Unfortunately, we were unable to verify your company <strong>{company}</strong> at this time.",
        "details": "This may be due to incomplete documentation or discrepancies in the provided "
                   "information. Please review your documents and resubmit for verification.",
        "cta": "Update your documents and try again.",
        "color": "#ef4444",
    },
    "under_review": {
        "subject": "{company} Verification is Under Review",
        "heading": "Your Application is Being Reviewed 📋",
        "message": "Your verification request for <strong>{company}</strong> is now being reviewed by our team.",
        "details": "We typically complete reviews within 2-3 business days. "
                   "You will receive an email once the review is complete.",
        "cta": "Thank you for your patience!",
        "color": "#eab308",
    },
}


def build_verification_email(
    company_name: str,
    status: str,
    rejection_reason: Optional[str] = None,
    app_name: str = "Marketplace",
) -> Optional[Tuple[str, str]]:
    """(subject, html) for a verification decision, or None for statuses that send nothing."""
    info = VERIFICATION_TEMPLATES.get(status)
    if info is None:
        return None

    company = html.escape(company_name)
    details = info["details"]
    if status == "rejected" and rejection_reason:
        details = f"<strong>Reason:</strong> {html.escape(rejection_reason)}"

    body = f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"></head>
  <body style="margin: 0; padding: 0; font-family: 'Segoe UI', Tahoma, sans-serif; background-color: #f4f4f5;">
    <div style="max-width: 600px; margin: 0 auto; padding: 40px 20px;">
      <div style="background: white; border-radius: 12px; padding: 40px;">
        <div style="text-align: center; margin-bottom: 30px;">
          <div style="width: 60px; height: 60px; background-color: {info['color']}; border-radius: 50%; margin: 0 auto 20px;"></div>
          <h1 style="color: #18181b; font-size: 24px; margin: 0;">{info['heading']}</h1>
        </div>
        <p style="color: #3f3f46; font-size: 16px;">{info['message'].format(company=company)}</p>
        <p style="color: #71717a; font-size: 14px;">{details}</p>
        <div style="background-color: #f4f4f5; border-radius: 8px; padding: 20px; text-align: center;">
          <p style="font-weight: 600; margin: 0;">{info['cta']}</p>
        </div>
        <p style="color: #a1a1aa; font-size: 12px; text-align: center;">{html.escape(app_name)}</p>
      </div>
    </div>
  </body>
</html>"""

    return info["subject"].format(company=company_name), body


class EmailDispatcher:
    """Best-effort delivery of one message."""

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        raise NotImplementedError


class LoggingEmailDispatcher(EmailDispatcher):
    """Used when no email provider is configured: the message is only logged."""

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        logger.info(f"Email provider not configured, dropping email to {recipient}: {subject}")


class ResendEmailDispatcher(EmailDispatcher):
    """Sends through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = settings.RESEND_API_URL,
        sender: str = settings.EMAIL_FROM,
        timeout: float = settings.EMAIL_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.sender = sender
        self.timeout = timeout

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        try:
            response = requests.post(
                self.api_url,
                json={
                    "from": self.sender,
                    "to": [recipient],
                    "subject": subject,
                    "html": html_body,
                },
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise TransientDeliveryError(f"Email API timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            raise TransientDeliveryError(f"Email API unreachable: {e}")

        if response.status_code >= 300:
            raise TransientDeliveryError(
                f"Email API error {response.status_code}: {response.text[:200]}"
            )
        logger.info(f"Email sent to {recipient}: {subject}")


def get_default_dispatcher() -> EmailDispatcher:
    if settings.RESEND_API_KEY:
        return ResendEmailDispatcher(settings.RESEND_API_KEY)
    return LoggingEmailDispatcher()
