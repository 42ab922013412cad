from __future__ import annotations

from rest_framework import serializers

from .models import Shipping


# ---------------------------
# output: ShippingSerializer
# ---------------------------
class TrackingEventSerializer(serializers.Serializer):
    status = serializers.CharField()
    message = serializers.CharField(allow_blank=True)
    datetime = serializers.CharField(required=False)
    location = serializers.CharField(allow_blank=True)


class ShippingSerializer(serializers.ModelSerializer):
    tracking_events = TrackingEventSerializer(many=True, read_only=True)

    class Meta:
        model = Shipping
        fields = (
            "tracking_number",
            "carrier",
            "shipment_status",
            "shipped_at",
            "delivered_at",
            "tracking_events",
            "verified",
            "poll_attempts",
            "last_polled_at",
            "next_poll_at",
            "updated_at",
        )
        read_only_fields = fields


class OrderTrackingSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    shipping = ShippingSerializer()


# ---------------------------
# input: attach tracking
# tracking_number / trackingNumber both accepted,
# normalized to tracking_number in validate
# ---------------------------
class AttachTrackingSerializer(serializers.Serializer):
    tracking_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    trackingNumber = serializers.CharField(max_length=64, required=False, allow_blank=True)
    carrier = serializers.CharField(max_length=40, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        number = (attrs.get("tracking_number") or attrs.get("trackingNumber") or "").strip()
        if not number:
            raise serializers.ValidationError({"tracking_number": "This field is required."})

        attrs["tracking_number"] = number.upper()
        attrs.pop("trackingNumber", None)
        attrs["carrier"] = (attrs.get("carrier") or "").strip() or None
        return attrs


# ---------------------------
# poll-due summary
# ---------------------------
class ReconcileResultSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    previous_status = serializers.CharField(required=False)
    new_status = serializers.CharField(required=False)
    poll_attempts = serializers.IntegerField(required=False)
    next_poll_at = serializers.DateTimeField(required=False, allow_null=True)
    error = serializers.CharField(required=False)


class ReconcileSummarySerializer(serializers.Serializer):
    processed = serializers.IntegerField()
    results = ReconcileResultSerializer(many=True)


class CarrierErrorSerializer(serializers.Serializer):
    detail = serializers.CharField()
    carrier = serializers.CharField(allow_null=True)
