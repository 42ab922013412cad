from django.urls import path

from .views import MarkAllReadAPI, MarkReadAPI, NotificationListAPI, UnreadCountAPI

app_name = "notifications"

urlpatterns = [
    path("", NotificationListAPI.as_view(), name="notification-list"),
    path("unread-count/", UnreadCountAPI.as_view(), name="notification-unread-count"),
    path("read-all/", MarkAllReadAPI.as_view(), name="notification-read-all"),
    path("<uuid:id>/read/", MarkReadAPI.as_view(), name="notification-read"),
]
