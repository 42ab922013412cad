# domains/notifications/services.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.utils import timezone

from domains.orders.models import Order

from .models import Notification, NotificationType

logger = logging.getLogger(__name__)

# types addressed to the buyer; the rest go to the seller
_BUYER_TYPES = {
    NotificationType.ORDER_SHIPPED.value,
    NotificationType.ORDER_OUT_FOR_DELIVERY.value,
    NotificationType.ORDER_DELIVERED.value,
}


def _render(kind: str, order: Order) -> Dict[str, str]:
    art = order.art_name
    shipping = getattr(order, "shipping", None)
    if kind == NotificationType.ORDER_SHIPPED:
        tracking = ""
        if shipping is not None and shipping.tracking_number:
            tracking = f" Tracking: {shipping.carrier or 'carrier'} {shipping.tracking_number}."
        seller = order.seller.display_name
        return {"title": "Your artwork has shipped", "message": f"{seller} shipped “{art}”.{tracking}"}
    if kind == NotificationType.ORDER_OUT_FOR_DELIVERY:
        return {"title": "Out for delivery", "message": f"“{art}” is out for delivery today."}
    if kind == NotificationType.ORDER_DELIVERED:
        return {"title": "Delivered", "message": f"“{art}” was delivered."}
    if kind == NotificationType.ORDER_PAID:
        return {"title": "Payment received", "message": f"Payment for “{art}” was confirmed."}
    if kind == NotificationType.ORDER_NEEDS_SHIPPING:
        return {"title": "Ready to ship", "message": f"“{art}” is paid. Add a tracking number once it ships."}
    return {"title": "New order started", "message": f"A buyer just submitted delivery details for “{art}”."}


def notify_order_event(order_id, kind: str, *, actor_id=None) -> Optional[Notification]:
    """
    Persist one notification about an order.

    Returns None when the order no longer exists; an unknown ``kind`` is a
    programming error and raises ValueError.
    """
    if kind not in NotificationType.values:
        raise ValueError(f"unknown notification type: {kind}")

    order = Order.objects.select_related("buyer", "seller").filter(pk=order_id).first()
    if order is None:
        logger.warning("notification %s skipped: order %s not found", kind, order_id)
        return None

    if kind in _BUYER_TYPES:
        recipient_id = order.buyer_id
        actor_id = actor_id or order.seller_id
    else:
        recipient_id = order.seller_id
        actor_id = actor_id or order.buyer_id

    data: Dict[str, Any] = {
        "art_name": order.art_name,
        "artist_name": order.artist_name,
        "price": order.price,
    }
    shipping = getattr(order, "shipping", None)
    if shipping is not None and shipping.tracking_number:
        data.update(
            tracking_number=shipping.tracking_number,
            carrier=shipping.carrier,
            shipment_status=shipping.shipment_status,
        )

    n = Notification.objects.create(
        recipient_id=recipient_id,
        actor_id=actor_id,
        type=kind,
        order=order,
        data=data,
        **_render(kind, order),
    )
    logger.info("notification %s created for user %s (order %s)", kind, recipient_id, order.pk)
    return n


def unread_count(user) -> int:
    return Notification.objects.filter(recipient=user, read_at__isnull=True).count()


def mark_read(user, notification_id) -> int:
    return Notification.objects.filter(
        pk=notification_id, recipient=user, read_at__isnull=True
    ).update(read_at=timezone.now())


def mark_all_read(user) -> int:
    return Notification.objects.filter(recipient=user, read_at__isnull=True).update(read_at=timezone.now())
