# domains/shipments/notifications.py
from __future__ import annotations

import logging
from typing import Optional

from domains.notifications.models import NotificationType

from .models import ShipmentStatus

logger = logging.getLogger(__name__)

# status transitions the buyer hears about during polling
TRANSITION_NOTIFICATIONS = {
    ShipmentStatus.OUT_FOR_DELIVERY.value: NotificationType.ORDER_OUT_FOR_DELIVERY.value,
    ShipmentStatus.DELIVERED.value: NotificationType.ORDER_DELIVERED.value,
}


def send_notification(kind: str, order, actor_id=None) -> bool:
    """
    Fire-and-forget submission of an order notification to the worker.
    A broker/submission failure is logged and reported as False, never raised.
    """
    try:
        from domains.notifications.tasks import deliver_order_notification

        deliver_order_notification.delay(str(order.pk), str(kind), str(actor_id) if actor_id else None)
        return True
    except Exception:
        logger.exception("could not submit %s notification for order %s", kind, order.pk)
        return False


def notify_transition(order, previous: Optional[str], current: str) -> Optional[str]:
    """Notify the buyer on entering out_for_delivery / delivered; other transitions are silent."""
    if previous == current:
        return None
    kind = TRANSITION_NOTIFICATIONS.get(current)
    if kind is None:
        return None
    send_notification(kind, order)
    return kind
