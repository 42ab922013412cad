# domains/orders/services.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied

from domains.notifications.models import NotificationType
from domains.shipments.notifications import send_notification

from .models import Order, OrderStatus

logger = logging.getLogger(__name__)

# delivery_details key → Order column
DELIVERY_FIELDS = {
    "name": "delivery_name",
    "address": "delivery_address",
    "city": "delivery_city",
    "state": "delivery_state",
    "zip_code": "delivery_zip_code",
    "country": "delivery_country",
}

# allowed status moves; anything else is a conflict
_TRANSITIONS = {
    OrderStatus.PENDING.value: {OrderStatus.PAID.value, OrderStatus.FAILED.value},
    OrderStatus.PAID.value: {OrderStatus.REFUNDED.value},
}


class OrderConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The order cannot be changed in its current state."
    default_code = "order_conflict"


def _delivery_columns(details: Dict[str, Any]) -> Dict[str, str]:
    return {column: (details.get(key) or "").strip() for key, column in DELIVERY_FIELDS.items()}


# ─────────────────────────────────────────────────────────────
# checkout
# ─────────────────────────────────────────────────────────────
def create_order(
    *,
    buyer,
    seller,
    art_name: str,
    price: int,
    delivery_details: Dict[str, Any],
    artwork_id: str = "",
    artist_name: str = "",
    currency: str = "usd",
) -> Order:
    """Pending order with the buyer's delivery details; the seller is told a checkout started."""
    with transaction.atomic():
        order = Order.objects.create(
            buyer=buyer,
            seller=seller,
            artwork_id=artwork_id or "",
            art_name=art_name,
            artist_name=artist_name or seller.display_name,
            price=price,
            currency=currency,
            status=OrderStatus.PENDING,
            **_delivery_columns(delivery_details),
        )
    logger.info("order created: order=%s buyer=%s seller=%s price=%s", order.pk, buyer.pk, seller.pk, price)

    send_notification(NotificationType.DELIVERY_DETAILS_SUBMITTED, order, actor_id=buyer.pk)
    return order


def update_delivery_details(order: Order, *, user, delivery_details: Dict[str, Any]) -> Order:
    """
    Buyer edits the delivery address. Refused once the order is failed or
    refunded, or once a tracking number is on the shipping record.
    """
    if user is None or user.pk != order.buyer_id:
        raise PermissionDenied()
    if order.is_closed:
        raise OrderConflict("Delivery details cannot change on a failed or refunded order.")
    shipping = getattr(order, "shipping", None)
    if shipping is not None and shipping.tracking_number:
        raise OrderConflict("Delivery details cannot change after the order has shipped.")

    columns = _delivery_columns(delivery_details)
    for column, value in columns.items():
        setattr(order, column, value)
    order.save(update_fields=[*columns, "updated_at"])
    logger.info("delivery details updated: order=%s", order.pk)

    send_notification(NotificationType.DELIVERY_DETAILS_SUBMITTED, order, actor_id=user.pk)
    return order


# ─────────────────────────────────────────────────────────────
# payment outcome (admin / payment callback)
# ─────────────────────────────────────────────────────────────
def set_order_status(
    order: Order,
    new_status: str,
    *,
    transaction_id: Optional[str] = None,
    failure_reason: str = "",
    now: Optional[datetime] = None,
) -> Order:
    """
    pending → paid | failed, paid → refunded. Paying the order tells the
    seller twice: payment received, then ready to ship.
    """
    current = str(order.status)
    if new_status not in _TRANSITIONS.get(current, ()):
        raise OrderConflict(f"Cannot move an order from {current} to {new_status}.")

    now = now or timezone.now()
    order.status = new_status
    fields = ["status", "updated_at"]
    if transaction_id:
        order.transaction_id = transaction_id
        fields.append("transaction_id")
    if new_status == OrderStatus.PAID:
        order.paid_at = now
        fields.append("paid_at")
    elif new_status == OrderStatus.FAILED:
        order.failure_reason = failure_reason or ""
        fields.append("failure_reason")
    elif new_status == OrderStatus.REFUNDED:
        order.refunded_at = now
        fields.append("refunded_at")
    order.save(update_fields=fields)
    logger.info("order status: order=%s %s -> %s", order.pk, current, new_status)

    if new_status == OrderStatus.PAID:
        send_notification(NotificationType.ORDER_PAID, order)
        send_notification(NotificationType.ORDER_NEEDS_SHIPPING, order)
    return order
