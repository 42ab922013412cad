# domains/shipments/views.py
import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import parsers, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from domains.orders.models import Order
from shared.permissions import HasPollSecret, IsOrderSeller

from .exceptions import DEFAULT_CARRIER_MESSAGE, CarrierError
from .serializers import (
    AttachTrackingSerializer,
    CarrierErrorSerializer,
    OrderTrackingSerializer,
    ReconcileSummarySerializer,
    ShippingSerializer,
)
from .services import attach_tracking, get_or_create_shipping, reconcile_due_shipments

logger = logging.getLogger(__name__)


def _carrier_error_response(e: CarrierError) -> Response:
    code = e.status_code or status.HTTP_400_BAD_REQUEST
    # only client/gateway errors are passed through as-is
    if not (400 <= code < 600):
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": e.message or DEFAULT_CARRIER_MESSAGE, "carrier": e.carrier}, status=code)


def _tracking_body(order: Order, shipping) -> dict:
    return {"order_id": str(order.pk), "shipping": ShippingSerializer(shipping).data}


# --------------------------------------------------------------------
# GET   /api/v1/orders/{order_id}/tracking/   buyer or seller
# PATCH /api/v1/orders/{order_id}/tracking/   seller attaches a number
# --------------------------------------------------------------------
class OrderTrackingAPI(APIView):
    parser_classes = [parsers.JSONParser]
    permission_classes = [permissions.IsAuthenticated, IsOrderSeller]

    def _get_order(self, request, order_id):
        order = get_object_or_404(Order.objects.select_related("buyer", "seller"), pk=order_id)
        self.check_object_permissions(request, order)
        return order

    @extend_schema(responses={200: OrderTrackingSerializer})
    def get(self, request, order_id):
        order = self._get_order(request, order_id)
        return Response(_tracking_body(order, get_or_create_shipping(order)), status=status.HTTP_200_OK)

    @extend_schema(
        request=AttachTrackingSerializer,
        responses={200: OrderTrackingSerializer, 502: CarrierErrorSerializer},
    )
    def patch(self, request, order_id):
        ser = AttachTrackingSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = self._get_order(request, order_id)

        try:
            shipping = attach_tracking(
                order,
                user=request.user,
                tracking_number=ser.validated_data["tracking_number"],
                carrier=ser.validated_data.get("carrier"),
            )
        except CarrierError as e:
            logger.warning("attach tracking rejected for order %s: %s", order.pk, e)
            return _carrier_error_response(e)

        return Response(_tracking_body(order, shipping), status=status.HTTP_200_OK)


# --------------------------------------------------------------------
# GET|POST /api/v1/orders/shipments/poll-due/
# external cron; X-Cron-Secret header or ?secret=
# --------------------------------------------------------------------
class PollDueShipmentsAPI(APIView):
    authentication_classes = []
    permission_classes = [HasPollSecret]

    @extend_schema(
        parameters=[
            OpenApiParameter(name="secret", required=False, type=str, description="shared cron secret"),
            OpenApiParameter(name="X-Cron-Secret", required=False, type=str, location=OpenApiParameter.HEADER),
        ],
        responses={200: ReconcileSummarySerializer},
    )
    def get(self, request):
        return self._run()

    @extend_schema(request=None, responses={200: ReconcileSummarySerializer})
    def post(self, request):
        return self._run()

    def _run(self):
        summary = reconcile_due_shipments()
        return Response(summary, status=status.HTTP_200_OK)
