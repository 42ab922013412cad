from django.urls import path

from .views import OrderTrackingAPI, PollDueShipmentsAPI

app_name = "shipments"

urlpatterns = [
    # static path before the uuid route
    path("shipments/poll-due/", PollDueShipmentsAPI.as_view(), name="shipments-poll-due"),
    path("<uuid:order_id>/tracking/", OrderTrackingAPI.as_view(), name="order-tracking"),
]
