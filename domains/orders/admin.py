# domains/orders/admin.py
from django.contrib import admin

from domains.shipments.admin import ShippingInline

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    inlines = [ShippingInline]
    list_display = (
        "id",
        "art_name",
        "buyer",
        "seller",
        "price",
        "status",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = (
        "id",
        "art_name",
        "artist_name",
        "buyer__email",
        "seller__email",
        "payment_intent_id",
        "transaction_id",
    )
    ordering = ("-created_at",)
    readonly_fields = ("payment_intent_id", "transaction_id", "paid_at", "refunded_at")
