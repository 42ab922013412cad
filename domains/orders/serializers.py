# domains/orders/serializers.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from domains.accounts.models import UserStatus

from .models import Order, OrderStatus

User = get_user_model()


class DeliveryDetailsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    address = serializers.CharField(max_length=200)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    zip_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)


# ---------------------------
# output
# ---------------------------
class OrderReadSerializer(serializers.ModelSerializer):
    buyer_name = serializers.CharField(source="buyer.display_name", read_only=True)
    seller_name = serializers.CharField(source="seller.display_name", read_only=True)
    delivery_details = serializers.SerializerMethodField()
    shipment_status = serializers.CharField(source="shipping.shipment_status", read_only=True, default=None)
    tracking_number = serializers.CharField(source="shipping.tracking_number", read_only=True, default=None)

    class Meta:
        model = Order
        fields = (
            "id",
            "buyer",
            "buyer_name",
            "seller",
            "seller_name",
            "artwork_id",
            "art_name",
            "artist_name",
            "price",
            "currency",
            "status",
            "transaction_id",
            "paid_at",
            "refunded_at",
            "failure_reason",
            "delivery_details",
            "shipment_status",
            "tracking_number",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    @extend_schema_field(DeliveryDetailsSerializer)
    def get_delivery_details(self, obj: Order) -> dict:
        return {
            "name": obj.delivery_name,
            "address": obj.delivery_address,
            "city": obj.delivery_city,
            "state": obj.delivery_state,
            "zip_code": obj.delivery_zip_code,
            "country": obj.delivery_country,
        }


# ---------------------------
# input
# ---------------------------
class OrderCreateSerializer(serializers.Serializer):
    seller = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(status=UserStatus.ACTIVE))
    artwork_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    art_name = serializers.CharField(max_length=200)
    artist_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    price = serializers.IntegerField(min_value=0, help_text="minor currency units (cents)")
    currency = serializers.CharField(max_length=3, required=False, default="usd")
    delivery_details = DeliveryDetailsSerializer()

    def validate_currency(self, v):
        return v.strip().lower()

    def validate(self, attrs):
        request = self.context.get("request")
        if request is not None and attrs["seller"].pk == request.user.pk:
            raise serializers.ValidationError({"seller": "You cannot buy your own artwork."})
        return attrs


class DeliveryDetailsUpdateSerializer(serializers.Serializer):
    delivery_details = DeliveryDetailsSerializer()


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    transaction_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    failure_reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
