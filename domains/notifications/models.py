from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    DELIVERY_DETAILS_SUBMITTED = "delivery_details_submitted", "Delivery details submitted"
    ORDER_PAID = "order_paid", "Order paid"
    ORDER_NEEDS_SHIPPING = "order_needs_shipping", "Order needs shipping"
    ORDER_SHIPPED = "order_shipped", "Order shipped"
    ORDER_OUT_FOR_DELIVERY = "order_out_for_delivery", "Order out for delivery"
    ORDER_DELIVERED = "order_delivered", "Order delivered"


class Notification(models.Model):
    """
    In-app notification. ``read_at`` null means unread.
    ``data`` carries a small render payload (art name, artist, price, ...).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    type = models.CharField(max_length=40, choices=NotificationType.choices)
    title = models.CharField(max_length=200, blank=True, default="")
    message = models.CharField(max_length=500)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )
    data = models.JSONField(default=dict, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "created_at"], name="notif_recipient_e5f6a7_idx"),
            models.Index(fields=["recipient", "read_at"], name="notif_read_b8c9d0_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} → {self.recipient_id}"

    @property
    def is_read(self) -> bool:
        return self.read_at is not None
