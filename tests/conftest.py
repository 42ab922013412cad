# tests/conftest.py
import logging
from uuid import uuid4

from django.contrib.auth import get_user_model

import pytest
from rest_framework.test import APIClient

from config.celery import app as celery_app
from domains.orders.models import Order, OrderStatus
from domains.shipments.adapters import default_token_cache
from domains.shipments.adapters.base import CarrierAdapter
from domains.shipments.carriers import Carrier

User = get_user_model()


# ─────────────────────────────────────────────────────────────
# global test environment (celery / logging / token cache)
# ─────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True, scope="session")
def _celery_eager():
    """config.settings_test turns eager mode on; stop early if it did not reach the app."""
    assert celery_app.conf.task_always_eager, "run with DJANGO_SETTINGS_MODULE=config.settings_test"
    yield


@pytest.fixture(autouse=True)
def _propagate_domain_logs(monkeypatch):
    """LOGGING stops 'domains' at its own handler; let caplog see it."""
    monkeypatch.setattr(logging.getLogger("domains"), "propagate", True)


@pytest.fixture(autouse=True)
def _carrier_settings(settings):
    settings.IS_PRODUCTION = False
    settings.UPS_MOCK = False
    settings.SHIPMENTS_POLL_SECRET = "cron-secret"
    default_token_cache.clear()
    yield
    default_token_cache.clear()


# ─────────────────────────────────────────────────────────────
# clients & users
# ─────────────────────────────────────────────────────────────
@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user_factory(db):
    def _make(**kw):
        email = kw.pop("email", f"user{uuid4().hex[:6]}@example.com")
        password = kw.pop("password", "Test1234!A")
        kw.setdefault("username", f"{email.split('@')[0]}_{uuid4().hex[:6]}")
        kw.setdefault("role", "user")
        kw.setdefault("status", "active")

        u = User.objects.create_user(email=email, password=password, **kw)
        # raw password kept for login tests
        u.raw_password = password
        return u

    return _make


@pytest.fixture
def buyer(user_factory):
    return user_factory(email="buyer@example.com", name="Bea Buyer")


@pytest.fixture
def seller(user_factory):
    return user_factory(email="artist@example.com", name="Sam Artist")


@pytest.fixture
def client_for():
    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c

    return _client


# ─────────────────────────────────────────────────────────────
# orders
# ─────────────────────────────────────────────────────────────
@pytest.fixture
def order_factory(db, buyer, seller):
    def _make(**kw):
        kw.setdefault("buyer", buyer)
        kw.setdefault("seller", seller)
        kw.setdefault("art_name", "Blue Harbor")
        kw.setdefault("artist_name", "Sam Artist")
        kw.setdefault("price", 125000)
        kw.setdefault("status", OrderStatus.PAID)
        return Order.objects.create(**kw)

    return _make


@pytest.fixture
def order(order_factory):
    return order_factory()


# ─────────────────────────────────────────────────────────────
# carrier adapter double
# ─────────────────────────────────────────────────────────────
class FakeAdapter(CarrierAdapter):
    """
    Returns a fixed status/events snapshot, or raises ``error`` from fetch.
    ``calls`` records every fetched number.
    """

    name = "Fake"

    def __init__(self, status="in_transit", events=None, carrier=Carrier.USPS, error=None):
        self.status = status
        self.events = events if events is not None else []
        self.carrier = carrier
        self.error = error
        self.calls = []

    def fetch_tracking(self, tracking_number):
        self.calls.append(tracking_number)
        if self.error is not None:
            raise self.error
        return {"number": tracking_number}

    def parse_status(self, raw):
        return self.status

    def parse_events(self, raw):
        return list(self.events)

    def resolve_carrier(self, raw):
        return self.carrier


@pytest.fixture
def fake_adapter():
    return FakeAdapter


@pytest.fixture
def two_events():
    return [
        {"status": "in_transit", "message": "Departed facility", "datetime": "2024-01-02T18:30:00Z", "location": "Secaucus, NJ, US"},
        {"status": "shipped", "message": "Label created", "datetime": "2024-01-01T12:00:00Z", "location": "New York, NY, US"},
    ]
