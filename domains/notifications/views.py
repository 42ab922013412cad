# domains/notifications/views.py
import django_filters as df
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from domains.shipments.status_map import parse_iso_datetime
from shared.api_markers import EmptySerializer, ModifiedCountSerializer

from .models import Notification, NotificationType
from .serializers import NotificationPageSerializer, NotificationSerializer, UnreadCountSerializer
from .services import mark_all_read, mark_read, unread_count

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


# -------------------------------
# Filters
# -------------------------------
class NotificationFilter(df.FilterSet):
    type = df.ChoiceFilter(choices=NotificationType.choices)
    unread = df.BooleanFilter(method="filter_unread")
    # cursor: created_at of the last item of the previous page
    after = df.CharFilter(method="filter_after")

    class Meta:
        model = Notification
        fields = ["type", "unread", "after"]

    def filter_unread(self, queryset, name, value):
        if value is None:
            return queryset
        return queryset.filter(read_at__isnull=value)

    def filter_after(self, queryset, name, value):
        cursor = parse_iso_datetime(value)
        # an unparsable cursor is ignored
        return queryset.filter(created_at__lt=cursor) if cursor else queryset


def _limit(raw) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return max(1, min(value, MAX_LIMIT))


# -------------------------------
# GET /api/v1/notifications/
# -------------------------------
class NotificationListAPI(generics.ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = NotificationSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = NotificationFilter
    pagination_class = None

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Notification.objects.none()
        return (
            Notification.objects.filter(recipient=self.request.user)
            .select_related("actor")
            .order_by("-created_at")
        )

    @extend_schema(
        parameters=[OpenApiParameter(name="limit", required=False, type=int, description="1-100, default 20")],
        responses={200: NotificationPageSerializer},
    )
    def get(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        items = list(qs[: _limit(request.query_params.get("limit"))])
        next_cursor = items[-1].created_at.isoformat() if items else None
        return Response(
            {"results": self.get_serializer(items, many=True).data, "next_cursor": next_cursor},
            status=status.HTTP_200_OK,
        )


# -------------------------------
# GET /api/v1/notifications/unread-count/
# -------------------------------
class UnreadCountAPI(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: UnreadCountSerializer})
    def get(self, request):
        return Response({"count": unread_count(request.user)}, status=status.HTTP_200_OK)


# -------------------------------
# PATCH /api/v1/notifications/{id}/read/
# -------------------------------
class MarkReadAPI(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=EmptySerializer, responses={200: ModifiedCountSerializer})
    def patch(self, request, id):
        return Response({"modified": mark_read(request.user, id)}, status=status.HTTP_200_OK)


# -------------------------------
# PATCH /api/v1/notifications/read-all/
# -------------------------------
class MarkAllReadAPI(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=EmptySerializer, responses={200: ModifiedCountSerializer})
    def patch(self, request):
        return Response({"modified": mark_all_read(request.user)}, status=status.HTTP_200_OK)
