# tests/test_notifications.py
from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone

from domains.notifications.models import Notification, NotificationType
from domains.notifications.services import mark_all_read, mark_read, notify_order_event, unread_count
from domains.notifications.tasks import deliver_order_notification
from domains.shipments.models import Shipping

LIST_URL = "/api/v1/notifications/"


@pytest.fixture
def notes_for(order):
    """n buyer-facing notifications, newest first, one minute apart."""

    def _make(n, kind=NotificationType.ORDER_SHIPPED):
        made = [notify_order_event(order.pk, kind) for _ in range(n)]
        base = timezone.now() - timedelta(hours=1)
        for i, note in enumerate(made):
            Notification.objects.filter(pk=note.pk).update(created_at=base + timedelta(minutes=i))
        return list(reversed(made))

    return _make


# ─────────────────────────────────────────────────────────────
# service
# ─────────────────────────────────────────────────────────────
@pytest.mark.django_db
def test_shipped_notification_goes_to_buyer(order, buyer, seller):
    Shipping.objects.filter(order=order).update(tracking_number="9400ABC", carrier="USPS", shipment_status="in_transit")

    n = notify_order_event(order.pk, "order_shipped")

    assert n.recipient_id == buyer.pk
    assert n.actor_id == seller.pk
    assert n.title == "Your artwork has shipped"
    assert "Sam Artist" in n.message and "Blue Harbor" in n.message
    assert "USPS 9400ABC" in n.message
    assert n.data == {
        "art_name": "Blue Harbor",
        "artist_name": "Sam Artist",
        "price": 125000,
        "tracking_number": "9400ABC",
        "carrier": "USPS",
        "shipment_status": "in_transit",
    }
    assert n.is_read is False


@pytest.mark.django_db
@pytest.mark.parametrize("kind", ["order_out_for_delivery", "order_delivered"])
def test_delivery_progress_goes_to_buyer(order, buyer, kind):
    n = notify_order_event(order.pk, kind)
    assert n.recipient_id == buyer.pk
    assert "Blue Harbor" in n.message
    assert "tracking_number" not in n.data


@pytest.mark.django_db
@pytest.mark.parametrize("kind", ["order_paid", "order_needs_shipping", "delivery_details_submitted"])
def test_seller_facing_types(order, buyer, seller, kind):
    n = notify_order_event(order.pk, kind)
    assert n.recipient_id == seller.pk
    assert n.actor_id == buyer.pk


@pytest.mark.django_db
def test_explicit_actor_wins(order, user_factory):
    admin = user_factory(role="admin")
    n = notify_order_event(order.pk, "order_delivered", actor_id=admin.pk)
    assert n.actor_id == admin.pk


@pytest.mark.django_db
def test_unknown_kind_raises(order):
    with pytest.raises(ValueError):
        notify_order_event(order.pk, "order_teleported")


@pytest.mark.django_db
def test_missing_order_is_skipped():
    assert notify_order_event(uuid4(), "order_shipped") is None
    assert Notification.objects.count() == 0


@pytest.mark.django_db
def test_read_helpers(buyer, seller, notes_for):
    notes = notes_for(3)
    assert unread_count(buyer) == 3

    assert mark_read(buyer, notes[0].pk) == 1
    assert mark_read(buyer, notes[0].pk) == 0  # already read
    assert mark_read(seller, notes[1].pk) == 0  # not theirs
    assert unread_count(buyer) == 2

    assert mark_all_read(buyer) == 2
    assert unread_count(buyer) == 0


@pytest.mark.django_db
def test_delivery_task_persists(order, buyer):
    result = deliver_order_notification.apply(args=(str(order.pk), "order_delivered"))
    note = Notification.objects.get(pk=result.get())
    assert note.recipient_id == buyer.pk
    assert note.type == "order_delivered"


# ─────────────────────────────────────────────────────────────
# API
# ─────────────────────────────────────────────────────────────
@pytest.mark.django_db
def test_list_requires_login(api_client):
    assert api_client.get(LIST_URL).status_code == 401


@pytest.mark.django_db
def test_list_newest_first_with_cursor(client_for, buyer, notes_for):
    notes = notes_for(5)
    c = client_for(buyer)

    r = c.get(LIST_URL, {"limit": 2})
    assert r.status_code == 200
    assert [row["id"] for row in r.data["results"]] == [str(n.pk) for n in notes[:2]]
    first = r.data["results"][0]
    assert first["actor_name"] == "Sam Artist"
    assert first["is_read"] is False
    assert first["order_id"] is not None

    r = c.get(LIST_URL, {"limit": 2, "after": r.data["next_cursor"]})
    assert [row["id"] for row in r.data["results"]] == [str(n.pk) for n in notes[2:4]]

    r = c.get(LIST_URL, {"limit": 2, "after": r.data["next_cursor"]})
    assert [row["id"] for row in r.data["results"]] == [str(notes[4].pk)]

    r = c.get(LIST_URL, {"after": r.data["next_cursor"]})
    assert r.data == {"results": [], "next_cursor": None}


@pytest.mark.django_db
def test_list_limit_is_clamped_and_bad_cursor_ignored(client_for, buyer, notes_for):
    notes_for(3)
    c = client_for(buyer)
    assert len(c.get(LIST_URL, {"limit": 0}).data["results"]) == 1
    assert len(c.get(LIST_URL, {"limit": "lots"}).data["results"]) == 3
    assert len(c.get(LIST_URL, {"after": "yesterday-ish"}).data["results"]) == 3


@pytest.mark.django_db
def test_list_filters(client_for, buyer, seller, order, notes_for):
    notes = notes_for(2)
    notify_order_event(order.pk, "order_delivered")
    mark_read(buyer, notes[0].pk)
    c = client_for(buyer)

    r = c.get(LIST_URL, {"type": "order_delivered"})
    assert [row["type"] for row in r.data["results"]] == ["order_delivered"]

    r = c.get(LIST_URL, {"unread": "true"})
    assert str(notes[0].pk) not in {row["id"] for row in r.data["results"]}
    assert len(r.data["results"]) == 2

    r = c.get(LIST_URL, {"unread": "false"})
    assert [row["id"] for row in r.data["results"]] == [str(notes[0].pk)]

    # seller sees nothing of the buyer's
    assert client_for(seller).get(LIST_URL).data["results"] == []


@pytest.mark.django_db
def test_unread_count_and_mark_endpoints(client_for, buyer, seller, notes_for):
    notes = notes_for(3)
    c = client_for(buyer)

    assert c.get(f"{LIST_URL}unread-count/").data == {"count": 3}

    r = c.patch(f"{LIST_URL}{notes[0].pk}/read/")
    assert r.status_code == 200
    assert r.data == {"modified": 1}

    r = client_for(seller).patch(f"{LIST_URL}{notes[1].pk}/read/")
    assert r.data == {"modified": 0}
    assert client_for(seller).patch(f"{LIST_URL}{uuid4()}/read/").data == {"modified": 0}

    r = c.patch(f"{LIST_URL}read-all/")
    assert r.data == {"modified": 2}
    assert c.get(f"{LIST_URL}unread-count/").data == {"count": 0}
