# domains/notifications/tasks.py
from __future__ import annotations

from celery import shared_task


@shared_task(
    bind=True,
    max_retries=3,
    retry_backoff=True,
    retry_jitter=True,
    acks_late=True,
    name="domains.notifications.tasks.deliver_order_notification",
)
def deliver_order_notification(self, order_id: str, kind: str, actor_id=None):
    """Persist an order notification; DB errors are retried."""
    # lazy import: keeps the worker's import graph small
    from django.db import DatabaseError

    from .services import notify_order_event

    try:
        n = notify_order_event(order_id, kind, actor_id=actor_id)
    except DatabaseError as e:
        raise self.retry(exc=e)
    return str(n.pk) if n else None
