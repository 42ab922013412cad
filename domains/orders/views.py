# domains/orders/views.py
import django_filters as df
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import generics, parsers, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from shared.pagination import StandardResultsSetPagination
from shared.permissions import IsAdminRole, IsOrderBuyer, is_admin

from .models import Order, OrderStatus
from .serializers import (
    DeliveryDetailsUpdateSerializer,
    OrderCreateSerializer,
    OrderReadSerializer,
    OrderStatusUpdateSerializer,
)
from .services import create_order, set_order_status, update_delivery_details


def _orders():
    return Order.objects.select_related("buyer", "seller", "shipping")


# -------------------------------
# Filters
# -------------------------------
class OrderFilter(df.FilterSet):
    status = df.ChoiceFilter(choices=OrderStatus.choices)
    # buyer: my purchases, seller: my sales
    role = df.ChoiceFilter(choices=(("buyer", "buyer"), ("seller", "seller")), method="filter_role")

    class Meta:
        model = Order
        fields = ["status", "role"]

    def filter_role(self, queryset, name, value):
        user = self.request.user
        if value == "buyer":
            return queryset.filter(buyer=user)
        if value == "seller":
            return queryset.filter(seller=user)
        return queryset


# -------------------------------
# GET  /api/v1/orders/   my orders (admin: all), paginated
# POST /api/v1/orders/   buyer starts a checkout
# -------------------------------
class OrderListCreateAPI(generics.ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [parsers.JSONParser]
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        user = self.request.user
        qs = _orders().order_by("-created_at")
        if is_admin(user):
            return qs
        return qs.filter(Q(buyer=user) | Q(seller=user))

    def get_serializer_class(self):
        return OrderCreateSerializer if self.request.method == "POST" else OrderReadSerializer

    @extend_schema(operation_id="ListOrders")
    def get(self, *args, **kwargs):
        return super().get(*args, **kwargs)

    @extend_schema(
        operation_id="CreateOrder",
        request=OrderCreateSerializer,
        responses={201: OrderReadSerializer},
    )
    def post(self, request, *args, **kwargs):
        ser = OrderCreateSerializer(data=request.data, context={"request": request})
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        order = create_order(
            buyer=request.user,
            seller=data["seller"],
            art_name=data["art_name"],
            price=data["price"],
            delivery_details=data["delivery_details"],
            artwork_id=data.get("artwork_id", ""),
            artist_name=data.get("artist_name", ""),
            currency=data.get("currency", "usd"),
        )
        return Response(OrderReadSerializer(order).data, status=status.HTTP_201_CREATED)


# -------------------------------
# GET   /api/v1/orders/{order_id}/   buyer, seller or admin
# PATCH /api/v1/orders/{order_id}/   buyer edits delivery details
# -------------------------------
class OrderDetailAPI(APIView):
    parser_classes = [parsers.JSONParser]
    permission_classes = [permissions.IsAuthenticated, IsOrderBuyer]

    def _get_order(self, request, order_id):
        order = get_object_or_404(_orders(), pk=order_id)
        self.check_object_permissions(request, order)
        return order

    @extend_schema(operation_id="GetOrder", responses={200: OrderReadSerializer})
    def get(self, request, order_id):
        order = self._get_order(request, order_id)
        return Response(OrderReadSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="UpdateOrderDeliveryDetails",
        request=DeliveryDetailsUpdateSerializer,
        responses={200: OrderReadSerializer},
    )
    def patch(self, request, order_id):
        ser = DeliveryDetailsUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = self._get_order(request, order_id)

        order = update_delivery_details(
            order, user=request.user, delivery_details=ser.validated_data["delivery_details"]
        )
        return Response(OrderReadSerializer(order).data, status=status.HTTP_200_OK)


# -------------------------------
# PATCH /api/v1/orders/{order_id}/status/   admin records the payment outcome
# -------------------------------
class OrderStatusAPI(APIView):
    parser_classes = [parsers.JSONParser]
    permission_classes = [IsAdminRole]

    @extend_schema(
        operation_id="SetOrderStatus",
        request=OrderStatusUpdateSerializer,
        responses={200: OrderReadSerializer},
    )
    def patch(self, request, order_id):
        ser = OrderStatusUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = get_object_or_404(_orders(), pk=order_id)

        order = set_order_status(
            order,
            ser.validated_data["status"],
            transaction_id=ser.validated_data.get("transaction_id"),
            failure_reason=ser.validated_data.get("failure_reason", ""),
        )
        return Response(OrderReadSerializer(order).data, status=status.HTTP_200_OK)
