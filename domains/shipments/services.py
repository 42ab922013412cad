# domains/shipments/services.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from rest_framework.exceptions import PermissionDenied, ValidationError

from domains.notifications.models import NotificationType
from domains.orders.models import CLOSED_ORDER_STATUSES, Order

from .adapters import CarrierAdapter, get_adapter
from .carriers import lookup_carrier, normalize_carrier
from .exceptions import OrderNotShippable
from .models import ShipmentStatus, Shipping
from .notifications import notify_transition, send_notification

logger = logging.getLogger(__name__)

MAX_POLL_ATTEMPTS = 120
MAX_POLL_INTERVAL = timedelta(hours=24)
DEFAULT_BATCH_SIZE = 50

# base re-poll interval by status; anything else waits 12h
_BASE_INTERVALS = {
    ShipmentStatus.OUT_FOR_DELIVERY.value: timedelta(hours=2),
    ShipmentStatus.IN_TRANSIT.value: timedelta(hours=6),
}
_DEFAULT_INTERVAL = timedelta(hours=12)


# ─────────────────────────────────────────────────────────────
# backoff
# ─────────────────────────────────────────────────────────────
def compute_next_poll_at(status: str, attempts: int, now: datetime) -> Optional[datetime]:
    """
    None once delivered or after MAX_POLL_ATTEMPTS; otherwise the status base
    interval plus one hour per three attempts, capped at 24h.
    """
    if status == ShipmentStatus.DELIVERED or attempts >= MAX_POLL_ATTEMPTS:
        return None
    base = _BASE_INTERVALS.get(str(status), _DEFAULT_INTERVAL)
    interval = min(base + timedelta(hours=max(attempts, 0) // 3), MAX_POLL_INTERVAL)
    return now + interval


def get_or_create_shipping(order: Order) -> Shipping:
    shipping, _ = Shipping.objects.get_or_create(order=order)
    return shipping


def _apply_snapshot(
    shipping: Shipping,
    *,
    status: str,
    events: List[Dict[str, Any]],
    now: datetime,
) -> bool:
    """Write status/events onto ``shipping``; True when delivery is seen for the first time."""
    shipping.shipment_status = status
    shipping.tracking_events = events
    if events:
        shipping.verified = True
    first_delivery = status == ShipmentStatus.DELIVERED and shipping.delivered_at is None
    if first_delivery:
        shipping.delivered_at = now
    return first_delivery


# ─────────────────────────────────────────────────────────────
# seller attaches a tracking number
# ─────────────────────────────────────────────────────────────
def attach_tracking(
    order: Order,
    *,
    user,
    tracking_number: str,
    carrier: Optional[str] = None,
    adapter: Optional[CarrierAdapter] = None,
    now: Optional[datetime] = None,
) -> Shipping:
    """
    Verify ``tracking_number`` with the carrier and store the result on the
    order's shipping record. Re-attaching re-fetches and overwrites.

    Raises PermissionDenied (not the seller), OrderNotShippable (failed or
    refunded order), ValidationError (bad number/carrier) and CarrierError
    (carrier said no). The order is untouched on any of these.
    """
    if user is None or user.pk != order.seller_id:
        raise PermissionDenied()
    if order.status in CLOSED_ORDER_STATUSES:
        raise OrderNotShippable()

    number = (tracking_number or "").strip().upper()
    if not number:
        raise ValidationError({"tracking_number": "This field is required."})
    explicit = normalize_carrier(carrier) if carrier else None

    adapter = adapter or get_adapter(explicit, number)
    raw = adapter.fetch_tracking(number)
    status = adapter.parse_status(raw)
    events = adapter.parse_events(raw)

    resolved = explicit or adapter.resolve_carrier(raw)
    if resolved is not None:
        resolved = lookup_carrier(resolved)
    if resolved is None:
        raise ValidationError({"carrier": "The carrier for this tracking number is not supported."})

    now = now or timezone.now()
    with transaction.atomic():
        shipping = get_or_create_shipping(order)
        shipping = Shipping.objects.select_for_update().get(pk=shipping.pk)

        shipping.tracking_number = number
        shipping.carrier = resolved
        if shipping.shipped_at is None:
            shipping.shipped_at = now
        first_delivery = _apply_snapshot(shipping, status=status, events=events, now=now)
        shipping.poll_attempts = 0
        shipping.last_polled_at = None
        shipping.next_poll_at = compute_next_poll_at(status, 0, now)
        shipping.save()

    logger.info(
        "tracking attached: order=%s carrier=%s number=%s status=%s events=%d",
        order.pk, resolved, number, status, len(events),
    )

    send_notification(NotificationType.ORDER_SHIPPED, order, actor_id=order.seller_id)
    if first_delivery:
        send_notification(NotificationType.ORDER_DELIVERED, order, actor_id=order.seller_id)
    return shipping


# ─────────────────────────────────────────────────────────────
# reconciliation (beat task / cron trigger)
# ─────────────────────────────────────────────────────────────
def due_shipments(now: Optional[datetime] = None, limit: Optional[int] = None):
    now = now or timezone.now()
    limit = limit or getattr(settings, "SHIPMENTS_POLL_BATCH_SIZE", DEFAULT_BATCH_SIZE)
    return (
        Shipping.objects.select_related("order")
        .exclude(tracking_number="")
        .exclude(shipment_status=ShipmentStatus.DELIVERED)
        .exclude(order__status__in=CLOSED_ORDER_STATUSES)
        .filter(Q(next_poll_at__lte=now) | Q(next_poll_at__isnull=True))
        .filter(poll_attempts__lt=MAX_POLL_ATTEMPTS)
        .order_by(F("next_poll_at").asc(nulls_first=True), "created_at")[:limit]
    )


def reconcile_shipping(
    shipping: Shipping,
    now: Optional[datetime] = None,
    adapter: Optional[CarrierAdapter] = None,
) -> Dict[str, Any]:
    """Poll the carrier once for ``shipping`` and persist the new snapshot."""
    now = now or timezone.now()
    adapter = adapter or get_adapter(shipping.carrier or None, shipping.tracking_number)
    raw = adapter.fetch_tracking(shipping.tracking_number)
    status = adapter.parse_status(raw)
    events = adapter.parse_events(raw)

    with transaction.atomic():
        locked = Shipping.objects.select_for_update().get(pk=shipping.pk)
        previous = locked.shipment_status
        _apply_snapshot(locked, status=status, events=events, now=now)
        locked.last_polled_at = now
        locked.poll_attempts += 1
        locked.next_poll_at = compute_next_poll_at(status, locked.poll_attempts, now)
        locked.save()

    notify_transition(shipping.order, previous, locked.shipment_status)
    return {
        "order_id": str(locked.order_id),
        "previous_status": previous,
        "new_status": locked.shipment_status,
        "poll_attempts": locked.poll_attempts,
        "next_poll_at": locked.next_poll_at.isoformat() if locked.next_poll_at else None,
    }


def reconcile_due_shipments(now: Optional[datetime] = None, limit: Optional[int] = None) -> Dict[str, Any]:
    """
    Poll every due shipment, one at a time. A failing record is logged and
    reported; its state is left as it was and the batch continues.
    """
    now = now or timezone.now()
    batch = list(due_shipments(now, limit))
    results: List[Dict[str, Any]] = []

    for shipping in batch:
        try:
            results.append(reconcile_shipping(shipping, now))
        except Exception as e:
            logger.exception("reconcile failed for order %s (%s)", shipping.order_id, shipping.tracking_number)
            results.append({"order_id": str(shipping.order_id), "error": str(e)})

    logger.info("reconciled %d due shipments (%d errors)", len(batch), sum(1 for r in results if "error" in r))
    return {"processed": len(batch), "results": results}
