"""Outbound email through the Resend HTTP API, plus the store's message templates."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from config import Settings

log = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


class EmailError(Exception):
    """Raised when the email provider could not accept a message."""


@dataclass
class EmailMessage:
    sender: str
    to: list[str]
    subject: str
    text: str
    reply_to: Optional[str] = None

    def to_payload(self) -> dict:
        payload = {
            "from": self.sender,
            "to": list(self.to),
            "subject": self.subject,
            "text": self.text,
        }
        if self.reply_to:
            payload["reply_to"] = self.reply_to
        return payload


class ResendMailer:
    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = 10):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, message: EmailMessage) -> Optional[str]:
        try:
            resp = self.session.post(
                RESEND_URL,
                json=message.to_payload(),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EmailError(f"email transport failed: {e}") from e

        if not resp.ok:
            raise EmailError(f"email provider returned {resp.status_code}: {resp.text[:200]}")

        try:
            body = resp.json()
        except ValueError:
            body = None
        message_id = body.get("id") if isinstance(body, dict) else None
        log.info("email sent to %s (%s)", ", ".join(message.to), message_id)
        return message_id


# ---------------- templates ----------------

def contact_email(settings: Settings, name: str, email: str, details: str) -> EmailMessage:
    return EmailMessage(
        sender=settings.sender,
        to=[settings.to_email],
        reply_to=email,
        subject=f"Custom Order Request — {name}",
        text=(
            "NEW CUSTOM REQUEST\n\n"
            f"Name: {name}\n"
            f"Email: {email}\n\n"
            f"Request:\n{details}\n\n"
            f"— {settings.store_name} Website"
        ),
    )


def merchant_order_email(settings: Settings, order) -> EmailMessage:
    """Paid-order notification for the shop owner, with everything needed to ship."""
    return EmailMessage(
        sender=settings.sender,
        to=[settings.to_email],
        subject=f"PAID Order — {settings.store_name} ({order.total_text})",
        text=(
            "PAID ORDER ✅\n\n"
            f"Customer: {order.customer_name}\n"
            f"Customer Email: {order.customer_email or 'unknown'}\n\n"
            f"Shipping:\n{order.shipping_text}\n\n"
            f"Items:\n{order.items_text or '(no items)'}\n\n"
            f"Stripe Session: {order.session_id}\n"
            f"— {settings.store_name} Website"
        ),
    )


def customer_order_email(settings: Settings, order) -> EmailMessage:
    return EmailMessage(
        sender=settings.sender,
        to=[order.customer_email],
        subject=f"Order Confirmed — {settings.store_name} ✿",
        text=(
            f"Thanks for your order, {order.customer_name}!\n\n"
            "We received your payment and will start preparing your items.\n\n"
            f"Shipping to:\n{order.shipping_text}\n\n"
            f"Your items:\n{order.items_text or '(items not available)'}\n\n"
            f"Total paid: {order.total_text}\n\n"
            "If you need anything, just reply to this email.\n"
            f"— {settings.store_name}"
        ),
    )
