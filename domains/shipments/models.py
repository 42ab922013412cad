from __future__ import annotations

import uuid

from django.db import models

from .carriers import Carrier


class ShipmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    IN_TRANSIT = "in_transit", "In Transit"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out For Delivery"
    DELIVERED = "delivered", "Delivered"
    EXCEPTION = "exception", "Exception"
    RETURNED = "returned", "Returned"


class Shipping(models.Model):
    """
    Physical fulfillment of one order (``order.shipping``).

    ``tracking_events`` holds the carrier scans of the last fetch as a list of
    ``{"status", "message", "datetime"?, "location"}`` dicts and is replaced
    wholesale on every attach/poll. ``next_poll_at`` is null once delivered or
    after polling was abandoned.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(
        "orders.Order", on_delete=models.CASCADE, related_name="shipping"
    )

    tracking_number = models.CharField(max_length=64, blank=True, default="")
    carrier = models.CharField(
        max_length=20, choices=Carrier.choices, blank=True, default=""
    )
    shipment_status = models.CharField(
        max_length=24,
        choices=ShipmentStatus.choices,
        default=ShipmentStatus.PENDING,
    )

    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    tracking_events = models.JSONField(default=list, blank=True)
    verified = models.BooleanField(default=False)

    # --- reconciliation state ---
    poll_attempts = models.PositiveIntegerField(default=0)
    last_polled_at = models.DateTimeField(null=True, blank=True)
    next_poll_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "order_shipping"
        indexes = [
            models.Index(
                fields=["shipment_status", "next_poll_at"],
                name="order_shipp_status_7c1e2a_idx",
            ),
            models.Index(
                fields=["carrier", "tracking_number"],
                name="order_shipp_carrier_3b9d41_idx",
            ),
        ]

    def __str__(self) -> str:
        if not self.tracking_number:
            return f"{self.order_id}: (no tracking)"
        return f"{self.carrier}:{self.tracking_number}"

    @property
    def has_tracking(self) -> bool:
        return bool(self.tracking_number)
