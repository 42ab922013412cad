from django.urls import path

from .views import OrderDetailAPI, OrderListCreateAPI, OrderStatusAPI

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateAPI.as_view(), name="order-list"),
    path("<uuid:order_id>/", OrderDetailAPI.as_view(), name="order-detail"),
    path("<uuid:order_id>/status/", OrderStatusAPI.as_view(), name="order-status"),
]
