# shared/permissions.py
from __future__ import annotations

import hmac
from typing import Iterable, Optional

from django.conf import settings
from rest_framework.permissions import SAFE_METHODS, BasePermission

# ---- helpers ---------------------------------------------------------------


def _is_schema_generation(view) -> bool:
    """True while drf-spectacular builds the schema (let the fake view through)."""
    return bool(getattr(view, "swagger_fake_view", False))


def _user_has_role(user, roles: Iterable[str]) -> bool:
    return bool(
        getattr(user, "is_authenticated", False)
        and getattr(user, "role", None) in set(roles)
    )


def is_admin(user) -> bool:
    return _user_has_role(user, ("admin",))


def _party_ids(obj) -> tuple:
    """(buyer_id, seller_id) for an Order, or for anything hanging off one via ``order``."""
    order = getattr(obj, "order", obj)
    return getattr(order, "buyer_id", None), getattr(order, "seller_id", None)


# ---- order parties ---------------------------------------------------------


class IsOrderSeller(BasePermission):
    """Writes only by the order's seller; reads by either party (or admin)."""

    message = "You do not have permission to modify this order."

    def has_object_permission(self, request, view, obj):
        if _is_schema_generation(view):
            return True
        user = request.user
        if not getattr(user, "is_authenticated", False):
            return False

        buyer_id, seller_id = _party_ids(obj)
        if request.method in SAFE_METHODS:
            return user.pk in (buyer_id, seller_id) or _user_has_role(user, ("admin",))
        return user.pk == seller_id


class IsOrderBuyer(BasePermission):
    """Writes only by the order's buyer; reads by either party (or admin)."""

    message = "You do not have permission to modify this order."

    def has_object_permission(self, request, view, obj):
        if _is_schema_generation(view):
            return True
        user = request.user
        if not getattr(user, "is_authenticated", False):
            return False

        buyer_id, seller_id = _party_ids(obj)
        if request.method in SAFE_METHODS:
            return user.pk in (buyer_id, seller_id) or _user_has_role(user, ("admin",))
        return user.pk == buyer_id


class IsAdminRole(BasePermission):
    """role == "admin" only."""

    def has_permission(self, request, view):
        if _is_schema_generation(view):
            return True
        return _user_has_role(request.user, ("admin",))


# ---- machine callers -------------------------------------------------------


def _presented_secret(request) -> Optional[str]:
    return request.headers.get("X-Cron-Secret") or request.query_params.get("secret")


class HasPollSecret(BasePermission):
    """
    Shared-secret guard for the cron trigger. Refuses everything while
    SHIPMENTS_POLL_SECRET is not configured.
    """

    message = "Forbidden"

    def has_permission(self, request, view):
        expected = getattr(settings, "SHIPMENTS_POLL_SECRET", "") or ""
        presented = _presented_secret(request) or ""
        if not expected or not presented:
            return False
        return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


__all__ = [
    "IsOrderSeller",
    "IsOrderBuyer",
    "IsAdminRole",
    "HasPollSecret",
    "is_admin",
]
