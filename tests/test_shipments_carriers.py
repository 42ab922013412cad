# tests/test_shipments_carriers.py
import pytest
from rest_framework.exceptions import ValidationError

from domains.shipments.adapters import AfterShipAdapter, FedExAdapter, UPSAdapter, get_adapter
from domains.shipments.carriers import Carrier, aggregator_slug, lookup_carrier, normalize_carrier


@pytest.mark.parametrize(
    "value, expected",
    [
        ("usps", Carrier.USPS),
        (" USPS ", Carrier.USPS),
        ("UPS", Carrier.UPS),
        ("fedex", Carrier.FEDEX),
        ("Fed-Ex", Carrier.FEDEX),
        ("canada-post", Carrier.CANADA_POST),
        ("Royal Mail", Carrier.ROYAL_MAIL),
        ("la-poste-colissimo", Carrier.LA_POSTE),
        ("deutsch-post", Carrier.DEUTSCHE_POST),
        ("AustraliaPost", Carrier.AUSTRALIA_POST),
    ],
)
def test_normalize_carrier_accepts_variants(value, expected):
    assert normalize_carrier(value) == expected


@pytest.mark.parametrize("value", ["pigeon", "", None, "DHL Global Forwarding Ltd"])
def test_normalize_carrier_rejects_unknown(value):
    with pytest.raises(ValidationError) as exc:
        normalize_carrier(value)
    assert "carrier" in exc.value.detail


def test_lookup_carrier_returns_none_for_unknown():
    assert lookup_carrier("pigeon") is None
    assert lookup_carrier("dhl") == Carrier.DHL


def test_every_carrier_has_an_aggregator_slug():
    for carrier in Carrier:
        assert aggregator_slug(carrier)
        # slugs map back to the same carrier
        assert lookup_carrier(aggregator_slug(carrier)) == carrier


# ─────────────────────────────────────────────────────────────
# adapter selection
# ─────────────────────────────────────────────────────────────
def test_get_adapter_explicit_carrier_wins():
    assert isinstance(get_adapter("UPS", "9400100000000000000000"), UPSAdapter)
    assert isinstance(get_adapter("fedex", "1Z12345E0291980793"), FedExAdapter)

    adapter = get_adapter("USPS", "1Z12345E0291980793")
    assert isinstance(adapter, AfterShipAdapter)
    assert adapter.slug == "usps"


def test_get_adapter_ups_number_without_carrier():
    assert isinstance(get_adapter(None, "1Z12345E0291980793"), UPSAdapter)
    assert isinstance(get_adapter(None, " 1z12345e0291980793 "), UPSAdapter)


def test_get_adapter_falls_back_to_auto_detection():
    adapter = get_adapter(None, "9400100000000000000000")
    assert isinstance(adapter, AfterShipAdapter)
    assert adapter.slug == "auto"

    # 1Z prefix but wrong length
    assert isinstance(get_adapter(None, "1Z123"), AfterShipAdapter)


def test_get_adapter_rejects_unknown_carrier():
    with pytest.raises(ValidationError):
        get_adapter("pigeon", "123")
