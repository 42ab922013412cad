from __future__ import annotations

import json

from django.contrib import admin
from django.utils.html import format_html

from . import models

_READONLY = (
    "shipped_at",
    "delivered_at",
    "verified",
    "poll_attempts",
    "last_polled_at",
    "next_poll_at",
    "events_display",
)


def _events_display(obj):
    if not obj or not obj.tracking_events:
        return "-"
    return format_html(
        "<pre style='white-space:pre-wrap'>{}</pre>",
        json.dumps(obj.tracking_events, indent=2, ensure_ascii=False),
    )


# ---------- Shipping inline (on Order) ----------
class ShippingInline(admin.StackedInline):
    model = models.Shipping
    extra = 0
    can_delete = False
    fields = ("tracking_number", "carrier", "shipment_status") + _READONLY
    readonly_fields = _READONLY

    @admin.display(description="Tracking events")
    def events_display(self, obj):
        return _events_display(obj)


# ---------- Shipping admin ----------
@admin.register(models.Shipping)
class ShippingAdmin(admin.ModelAdmin):
    list_display = (
        "order",
        "carrier",
        "tracking_number",
        "shipment_status",
        "poll_attempts",
        "next_poll_at",
        "updated_at",
    )
    list_filter = ("carrier", "shipment_status", "verified")
    search_fields = ("tracking_number", "order__id", "order__art_name")
    readonly_fields = ("order", "created_at", "updated_at") + _READONLY
    ordering = ("-updated_at",)
    actions = ("poll_now",)

    @admin.display(description="Tracking events")
    def events_display(self, obj):
        return _events_display(obj)

    @admin.action(description="Poll carrier now")
    def poll_now(self, request, queryset):
        from .services import reconcile_shipping

        ok = failed = 0
        for shipping in queryset.select_related("order").exclude(tracking_number=""):
            try:
                reconcile_shipping(shipping)
                ok += 1
            except Exception as e:
                failed += 1
                self.message_user(request, f"{shipping}: {e}", level="error")
        self.message_user(request, f"polled {ok}, failed {failed}")
