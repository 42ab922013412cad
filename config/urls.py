from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path, re_path
from django.views.generic import RedirectView


def healthz(_):
    return JsonResponse({"ok": True})


urlpatterns = [
    # Admin
    path("admin/", admin.site.urls),

    # no trailing slash → 301 to the slash path
    re_path(r"^api/v1/schema$", RedirectView.as_view(url="/api/v1/schema/", permanent=True)),
    re_path(r"^api/v1/docs$", RedirectView.as_view(url="/api/v1/docs/", permanent=True)),

    # API v1
    path("api/v1/", include("api.v1.urls")),

    # root → docs
    path("", RedirectView.as_view(url="/api/v1/docs/", permanent=False)),

    # health check
    path("healthz/", healthz),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
