from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"  # created at checkout, before the payment callback
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


# no shipping work once the order ends up here
CLOSED_ORDER_STATUSES = (OrderStatus.FAILED, OrderStatus.REFUNDED)


class Order(models.Model):
    """
    One purchase of one artwork.

    Payment fields are written by the payment-processor callback; shipping state
    lives on the one-to-one ``shipments.Shipping`` record (``order.shipping``).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # --- parties ---
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="purchases",
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales",
    )

    # --- artwork snapshot (image service owns the artwork itself) ---
    artwork_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    art_name = models.CharField(max_length=200)
    artist_name = models.CharField(max_length=200, blank=True, default="")

    # --- commercial ---
    price = models.PositiveIntegerField(help_text="minor currency units (cents)")
    currency = models.CharField(max_length=3, default="usd")
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_intent_id = models.CharField(max_length=100, blank=True, null=True, default=None)
    transaction_id = models.CharField(max_length=100, blank=True, null=True, default=None)
    paid_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.CharField(max_length=255, blank=True, default="")

    # --- delivery details snapshot ---
    delivery_name = models.CharField(max_length=100, blank=True, default="")
    delivery_address = models.CharField(max_length=200, blank=True, default="")
    delivery_city = models.CharField(max_length=100, blank=True, default="")
    delivery_state = models.CharField(max_length=100, blank=True, default="")
    delivery_zip_code = models.CharField(max_length=20, blank=True, default="")
    delivery_country = models.CharField(max_length=100, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        indexes = [
            models.Index(fields=["buyer", "created_at"], name="orders_buyer_c1d2e3_idx"),
            models.Index(fields=["seller", "created_at"], name="orders_seller_f4a5b6_idx"),
            models.Index(fields=["status"], name="orders_status_9a8b7c_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0), name="ck_order_price_ge_0"
            ),
        ]

    def __str__(self) -> str:
        return f"Order({self.id}) {self.art_name} buyer={self.buyer_id} seller={self.seller_id} status={self.status}"

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_ORDER_STATUSES
