# tests/test_shipments_adapters.py
from unittest.mock import MagicMock, patch

import pytest
import requests

from domains.shipments.adapters import AfterShipAdapter, FedExAdapter, UPSAdapter
from domains.shipments.adapters.oauth import TokenCache
from domains.shipments.carriers import Carrier
from domains.shipments.exceptions import CarrierAuthError, CarrierError


def _resp(status_code=200, body=None):
    r = MagicMock()
    r.status_code = status_code
    if isinstance(body, Exception):
        r.json.side_effect = body
    else:
        r.json.return_value = body
    return r


TOKEN_OK = _resp(200, {"access_token": "tok-1", "expires_in": 3600})


# ─────────────────────────────────────────────────────────────
# token cache
# ─────────────────────────────────────────────────────────────
class _Clock:
    def __init__(self, t=1000.0):
        self.t = t

    def __call__(self):
        return self.t


def test_token_cache_reuses_until_margin():
    clock = _Clock()
    cache = TokenCache(clock=clock)
    calls = []

    def fetch():
        calls.append(clock.t)
        return f"tok-{len(calls)}", 3600

    assert cache.get_or_refresh("UPS", None, fetch) == "tok-1"
    clock.t += 3600 - 61
    assert cache.get_or_refresh("UPS", None, fetch) == "tok-1"
    # within 60s of expiry → refresh
    clock.t += 2
    assert cache.get_or_refresh("UPS", None, fetch) == "tok-2"
    assert len(calls) == 2


def test_token_cache_keys_by_provider_and_scopes():
    cache = TokenCache(clock=_Clock())
    n = iter(range(10))

    def fetch():
        return f"tok-{next(n)}", 3600

    a = cache.get_or_refresh("UPS", ["read"], fetch)
    b = cache.get_or_refresh("UPS", ["read", "write"], fetch)
    c = cache.get_or_refresh("FedEx", ["read"], fetch)
    assert len({a, b, c}) == 3
    # scope order does not matter
    assert cache.get_or_refresh("UPS", ["write", "read"], fetch) == b


# ─────────────────────────────────────────────────────────────
# UPS
# ─────────────────────────────────────────────────────────────
UPS_BODY = {
    "trackResponse": {
        "shipment": [
            {
                "package": [
                    {
                        "trackingNumber": "1Z999AA10123456784",
                        "currentStatus": {"type": "D", "code": "KB", "description": "DELIVERED"},
                        "activity": [
                            {
                                "date": "20240105",
                                "time": "143000",
                                "status": {"type": "D", "description": "DELIVERED"},
                                "location": {"address": {"city": "Austin", "stateProvince": "TX", "country": "US"}},
                            },
                            {
                                "date": "20240104",
                                "time": "80000",
                                "status": {"type": "I", "description": "Out For Delivery Today"},
                                "location": {"address": {"city": "Austin", "stateProvince": "TX", "country": "US"}},
                            },
                        ],
                    }
                ]
            }
        ]
    }
}


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_fetch_and_parse(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(200, UPS_BODY)

    adapter = UPSAdapter(token_cache=TokenCache())
    raw = adapter.fetch_tracking("1Z999AA10123456784")

    assert adapter.parse_status(raw) == "delivered"
    events = adapter.parse_events(raw)
    assert [e["status"] for e in events] == ["delivered", "out_for_delivery"]
    assert events[1]["datetime"] == "2024-01-04T08:00:00Z"
    assert adapter.resolve_carrier(raw) == Carrier.UPS

    method, url = mock_request.call_args.args
    assert method == "GET"
    assert url.endswith("/api/track/v1/details/1Z999AA10123456784")
    assert mock_request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok-1"
    assert mock_request.call_args.kwargs["timeout"] == 10
    # token endpoint uses HTTP basic client auth
    assert mock_post.call_args.args[0].endswith("/security/v1/oauth/token")
    assert mock_post.call_args.kwargs["auth"] is not None


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_token_is_cached_between_calls(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(200, UPS_BODY)

    adapter = UPSAdapter(token_cache=TokenCache())
    adapter.fetch_tracking("1Z999AA10123456784")
    adapter.fetch_tracking("1Z999AA10123456784")
    assert mock_post.call_count == 1
    assert mock_request.call_count == 2


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_error_envelope_message(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(
        404, {"response": {"errors": [{"code": "TW0001", "message": "Tracking Information Not Found"}]}}
    )

    with pytest.raises(CarrierError) as exc:
        UPSAdapter(token_cache=TokenCache()).fetch_tracking("1Z999AA10123456784")
    assert exc.value.status_code == 404
    assert exc.value.message == "Tracking Information Not Found"
    assert exc.value.carrier == "UPS"


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_error_without_envelope_uses_default_message(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(500, ValueError("not json"))

    with pytest.raises(CarrierError) as exc:
        UPSAdapter(token_cache=TokenCache()).fetch_tracking("1Z999AA10123456784")
    assert exc.value.status_code == 500
    assert exc.value.message == "Invalid or unsupported tracking number"


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_warning_only_response_is_an_error(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(
        200, {"trackResponse": {"shipment": [{"warnings": [{"code": "TW0001", "message": "Tracking Information Not Found"}]}]}}
    )

    with pytest.raises(CarrierError) as exc:
        UPSAdapter(token_cache=TokenCache()).fetch_tracking("1Z999AA10123456784")
    assert exc.value.status_code == 404
    assert exc.value.message == "Tracking Information Not Found"


@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_rejected_credentials_raise_auth_error(mock_post):
    mock_post.return_value = _resp(401, {"response": {"errors": [{"message": "Invalid Authentication Information."}]}})

    with pytest.raises(CarrierAuthError) as exc:
        UPSAdapter(token_cache=TokenCache()).fetch_tracking("1Z999AA10123456784")
    assert exc.value.status_code == 502
    assert exc.value.payload == {"upstream_status": 401}


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_timeout_maps_to_504_and_transport_error_to_502(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    adapter = UPSAdapter(token_cache=TokenCache())

    mock_request.side_effect = requests.Timeout("slow")
    with pytest.raises(CarrierError) as exc:
        adapter.fetch_tracking("1Z999AA10123456784")
    assert exc.value.status_code == 504

    mock_request.side_effect = requests.ConnectionError("down")
    with pytest.raises(CarrierError) as exc:
        adapter.fetch_tracking("1Z999AA10123456784")
    assert exc.value.status_code == 502


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_mock_numbers_never_touch_the_network(mock_post, mock_request):
    adapter = UPSAdapter(token_cache=TokenCache())
    raw = adapter.fetch_tracking("1Z12345E0291980793")

    assert adapter.parse_status(raw) == "in_transit"
    assert len(adapter.parse_events(raw)) == 3
    mock_post.assert_not_called()
    mock_request.assert_not_called()


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_ups_mock_disabled_in_production(mock_post, mock_request, settings):
    settings.IS_PRODUCTION = True
    settings.UPS_MOCK = True
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(200, UPS_BODY)

    UPSAdapter(token_cache=TokenCache()).fetch_tracking("1Z12345E0291980793")
    assert mock_request.called


# ─────────────────────────────────────────────────────────────
# FedEx
# ─────────────────────────────────────────────────────────────
FEDEX_BODY = {
    "output": {
        "completeTrackResults": [
            {
                "trackingNumber": "794843185271",
                "trackResults": [
                    {
                        "latestStatusDetail": {"code": "IT", "derivedCode": "IT", "description": "In transit"},
                        "scanEvents": [
                            {
                                "date": "2024-02-01T08:00:00-06:00",
                                "eventType": "AR",
                                "eventDescription": "Arrived at FedEx location",
                                "scanLocation": {"city": "MEMPHIS", "stateOrProvinceCode": "TN", "countryCode": "US"},
                            }
                        ],
                    }
                ],
            }
        ]
    }
}


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_fedex_fetch_and_parse(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(200, FEDEX_BODY)

    adapter = FedExAdapter(token_cache=TokenCache())
    raw = adapter.fetch_tracking("794843185271")

    assert adapter.parse_status(raw) == "in_transit"
    assert adapter.parse_events(raw)[0]["location"] == "MEMPHIS, TN, US"
    method, url = mock_request.call_args.args
    assert method == "POST"
    assert url.endswith("/track/v1/trackingnumbers")
    body = mock_request.call_args.kwargs["json"]
    assert body["includeDetailedScans"] is True
    assert body["trackingInfo"][0]["trackingNumberInfo"]["trackingNumber"] == "794843185271"
    # client credentials travel in the form body
    assert mock_post.call_args.kwargs["data"]["grant_type"] == "client_credentials"
    assert "client_id" in mock_post.call_args.kwargs["data"]


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_fedex_per_number_error_in_2xx(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    body = {
        "output": {
            "completeTrackResults": [
                {"trackResults": [{"error": {"code": "TRACKING.TRACKINGNUMBER.NOTFOUND", "message": "Tracking number cannot be found."}}]}
            ]
        }
    }
    mock_request.return_value = _resp(200, body)

    with pytest.raises(CarrierError) as exc:
        FedExAdapter(token_cache=TokenCache()).fetch_tracking("000")
    assert exc.value.status_code == 404
    assert exc.value.message == "Tracking number cannot be found."


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_fedex_error_envelope(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(400, {"errors": [{"code": "X", "message": "Please provide a valid tracking number."}]})

    with pytest.raises(CarrierError) as exc:
        FedExAdapter(token_cache=TokenCache()).fetch_tracking("bad")
    assert exc.value.status_code == 400
    assert exc.value.message == "Please provide a valid tracking number."


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_unauthorized_tracking_call_drops_cached_token(mock_post, mock_request):
    mock_post.side_effect = [
        _resp(200, {"access_token": "revoked", "expires_in": 3600}),
        _resp(200, {"access_token": "fresh", "expires_in": 3600}),
    ]
    mock_request.side_effect = [_resp(401, {"errors": [{"message": "Unauthorized"}]}), _resp(200, FEDEX_BODY)]
    cache = TokenCache()
    adapter = FedExAdapter(token_cache=cache)

    with pytest.raises(CarrierError) as exc:
        adapter.fetch_tracking("794843185271")
    assert exc.value.status_code == 401
    assert cache.get("FedEx") is None

    adapter.fetch_tracking("794843185271")
    assert mock_post.call_count == 2
    assert mock_request.call_args.kwargs["headers"]["Authorization"] == "Bearer fresh"


@patch("domains.shipments.adapters.base.requests.request")
@patch("domains.shipments.adapters.oauth.requests.post")
def test_other_tracking_errors_keep_cached_token(mock_post, mock_request):
    mock_post.return_value = TOKEN_OK
    mock_request.return_value = _resp(503, None)
    cache = TokenCache()

    with pytest.raises(CarrierError):
        UPSAdapter(token_cache=cache).fetch_tracking("1Z999AA10123456784")
    assert cache.get("UPS").value == "tok-1"


# ─────────────────────────────────────────────────────────────
# AfterShip
# ─────────────────────────────────────────────────────────────
def _aftership_tracking(slug="usps", tag="InTransit"):
    return {
        "meta": {"code": 200},
        "data": {
            "tracking": {
                "slug": slug,
                "tag": tag,
                "checkpoints": [
                    {"tag": tag, "message": "Departed", "checkpoint_time": "2024-01-02T00:00:00+00:00", "city": "Chicago"},
                ],
            }
        },
    }


@patch("domains.shipments.adapters.base.requests.request")
def test_aftership_known_slug_uses_get(mock_request):
    mock_request.return_value = _resp(200, _aftership_tracking())

    adapter = AfterShipAdapter(slug="usps")
    raw = adapter.fetch_tracking("9400100000000000000000")

    assert mock_request.call_count == 1
    method, url = mock_request.call_args.args
    assert method == "GET"
    assert url.endswith("/trackings/usps/9400100000000000000000")
    assert "aftership-api-key" in mock_request.call_args.kwargs["headers"]
    assert adapter.parse_status(raw) == "in_transit"
    assert adapter.resolve_carrier(raw) == Carrier.USPS


@patch("domains.shipments.adapters.base.requests.request")
def test_aftership_unknown_tracking_is_registered(mock_request):
    mock_request.side_effect = [
        _resp(404, {"meta": {"code": 4004, "message": "Tracking does not exist."}}),
        _resp(201, _aftership_tracking(slug="usps", tag="InfoReceived")),
    ]

    raw = AfterShipAdapter(slug="usps").fetch_tracking("9400100000000000000000")

    assert [c.args[0] for c in mock_request.call_args_list] == ["GET", "POST"]
    assert mock_request.call_args.kwargs["json"] == {
        "tracking": {"tracking_number": "9400100000000000000000", "slug": "usps"}
    }
    assert raw["tag"] == "InfoReceived"


@patch("domains.shipments.adapters.base.requests.request")
def test_aftership_auto_detects_courier(mock_request):
    mock_request.return_value = _resp(201, _aftership_tracking(slug="canada-post"))

    adapter = AfterShipAdapter()
    raw = adapter.fetch_tracking("7023210039414604")

    method, url = mock_request.call_args.args
    assert method == "POST"
    assert url.endswith("/trackings")
    assert mock_request.call_args.kwargs["json"] == {"tracking": {"tracking_number": "7023210039414604"}}
    assert adapter.resolve_carrier(raw) == Carrier.CANADA_POST


@patch("domains.shipments.adapters.base.requests.request")
def test_aftership_unsupported_detected_courier_resolves_to_none(mock_request):
    mock_request.return_value = _resp(201, _aftership_tracking(slug="pigeon-express"))

    adapter = AfterShipAdapter()
    assert adapter.resolve_carrier(adapter.fetch_tracking("123")) is None


@patch("domains.shipments.adapters.base.requests.request")
def test_aftership_error_meta_message(mock_request):
    mock_request.return_value = _resp(401, {"meta": {"code": 401, "message": "Invalid API key."}})

    with pytest.raises(CarrierError) as exc:
        AfterShipAdapter(slug="usps").fetch_tracking("123")
    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid API key."
