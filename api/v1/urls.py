# api/v1/urls.py
from django.urls import include, path

from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenRefreshView

from domains.accounts.jwt import EmailTokenObtainPairView

urlpatterns = [
    # --- Auth ---
    path("auth/token/", EmailTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    # --- Orders ---
    path("orders/", include(("domains.orders.urls", "orders"))),
    # --- Orders: tracking + cron trigger ---
    path("orders/", include(("domains.shipments.urls", "shipments"))),
    # --- Notifications ---
    path("notifications/", include(("domains.notifications.urls", "notifications"))),
    # --- API Docs ---
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
]
