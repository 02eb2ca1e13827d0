"""Celery tasks for ticketing side effects.

Notifications are delivered out of band. Every failure is logged and
swallowed: ticket and inventory state never depend on delivery.
"""

from typing import Any

import httpx
import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from ticketing.services.notifications import NotificationKind, Notifier

logger = structlog.get_logger(__name__)


def _post_webhook(payload: dict[str, Any]) -> None:
    url = settings.NOTIFICATION_WEBHOOK_URL
    if not url:
        logger.info("event_published_webhook_skipped", event_id=payload.get("event_id"))
        return
    body = {
        "content": f"A new event has been published: **{payload.get('name', 'New Event')}**",
        "event": payload,
    }
    response = httpx.post(url, json=body, timeout=settings.NOTIFICATION_TIMEOUT)
    response.raise_for_status()


def _send_ticket_email(payload: dict[str, Any]) -> None:
    recipient = payload.get("email")
    if not recipient:
        logger.info("ticket_email_skipped", ticket_id=payload.get("ticket_id"))
        return
    lines = [
        f"Your registration for {payload.get('event_name')} is confirmed.",
        f"Ticket ID: {payload.get('ticket_id')}",
    ]
    if payload.get("event_start_date"):
        lines.append(f"Starts: {payload['event_start_date']}")
    if payload.get("variant"):
        variant = payload["variant"]
        lines.append(f"Item: {variant['size']} / {variant['color']} x {payload.get('quantity', 1)}")
    send_mail(
        subject=f"Ticket confirmed: {payload.get('event_name')}",
        message="\n".join(lines),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient],
    )


_HANDLERS = {
    NotificationKind.EVENT_PUBLISHED: _post_webhook,
    NotificationKind.TICKET_CONFIRMED: _send_ticket_email,
}


@shared_task
def dispatch_notification(kind: str, payload: dict[str, Any]) -> bool:
    """Deliver one notification. Returns whether delivery succeeded."""
    try:
        handler = _HANDLERS[NotificationKind(kind)]
    except (KeyError, ValueError):
        logger.error("notification_kind_unknown", kind=kind)
        return False

    try:
        handler(payload)
    except Exception:
        logger.exception("notification_failed", kind=kind)
        return False

    logger.info("notification_sent", kind=kind)
    return True


class OnCommitNotifier(Notifier):
    """Queues ``dispatch_notification`` once the current transaction commits."""

    def notify(self, kind: NotificationKind, payload: dict[str, Any]) -> None:
        def enqueue() -> None:
            try:
                dispatch_notification.delay(kind.value, payload)
            except Exception:
                logger.exception("notification_enqueue_failed", kind=kind.value)

        transaction.on_commit(enqueue)
