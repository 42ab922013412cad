# domains/shipments/status_map.py
from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Iterable, List, Optional

from django.utils.dateparse import parse_datetime

from .models import ShipmentStatus

# ─────────────────────────────────────────────────────────────
# keyword tables (lowercase substrings, checked in order)
# ─────────────────────────────────────────────────────────────
_RETURNED_WORDS = ("returned to shipper", "returned to sender")
# negated delivery ("undelivered", "not delivered") is an exception, never delivered
_UNDELIVERED_WORDS = (
    "undeliver",
    "not delivered",
    "not be delivered",
    "failed attempt",
    "delivery attempt",
    "attempted delivery",
)
_OUT_FOR_DELIVERY_WORDS = ("out for delivery", "on vehicle for delivery")
_DELIVERED_WORDS = ("delivered",)
_EXCEPTION_WORDS = ("exception", "failed attempt", "return to sender", "hold")
_IN_TRANSIT_WORDS = (
    "in transit",
    "departed",
    "arrived",
    "on the way",
    "processing at",
    "origin scan",
    "destination scan",
    "loaded",
    "picked up",
)
_SHIPPED_WORDS = (
    "label created",
    "shipper created a label",
    "pre-transit",
    "order processed",
    "billing information received",
    "shipment information sent",
)

# UPS activity type codes
_UPS_TYPE_CODES = {
    "D": ShipmentStatus.DELIVERED,
    "I": ShipmentStatus.IN_TRANSIT,
    "X": ShipmentStatus.EXCEPTION,
    "M": ShipmentStatus.SHIPPED,
    "P": ShipmentStatus.SHIPPED,
    "RS": ShipmentStatus.RETURNED,
}

# FedEx status / derived codes
_FEDEX_CODES = {
    "DL": ShipmentStatus.DELIVERED,
    "OD": ShipmentStatus.OUT_FOR_DELIVERY,
    "IT": ShipmentStatus.IN_TRANSIT,
    "AR": ShipmentStatus.IN_TRANSIT,
    "DP": ShipmentStatus.IN_TRANSIT,
    "AF": ShipmentStatus.IN_TRANSIT,
    "PU": ShipmentStatus.IN_TRANSIT,
    "DE": ShipmentStatus.EXCEPTION,
    "SE": ShipmentStatus.EXCEPTION,
    "DY": ShipmentStatus.EXCEPTION,
    "HL": ShipmentStatus.EXCEPTION,
    "CA": ShipmentStatus.EXCEPTION,
    "RS": ShipmentStatus.RETURNED,
    "OC": ShipmentStatus.SHIPPED,
}

# AfterShip tags
_AGGREGATOR_TAGS = {
    "delivered": ShipmentStatus.DELIVERED,
    "outfordelivery": ShipmentStatus.OUT_FOR_DELIVERY,
    "availableforpickup": ShipmentStatus.OUT_FOR_DELIVERY,
    "intransit": ShipmentStatus.IN_TRANSIT,
    "attemptfail": ShipmentStatus.EXCEPTION,
    "exception": ShipmentStatus.EXCEPTION,
    "expired": ShipmentStatus.EXCEPTION,
    "inforeceived": ShipmentStatus.SHIPPED,
    "pending": ShipmentStatus.SHIPPED,
}


def _text(*parts: Any) -> str:
    return " ".join(str(p) for p in parts if p).strip().lower()


def _contains(text: str, words: Iterable[str]) -> bool:
    return any(w in text for w in words)


def _by_keywords(text: str) -> Optional[str]:
    if not text:
        return None
    if _contains(text, _RETURNED_WORDS):
        return ShipmentStatus.RETURNED
    if _contains(text, _UNDELIVERED_WORDS):
        return ShipmentStatus.EXCEPTION
    if _contains(text, _OUT_FOR_DELIVERY_WORDS):
        return ShipmentStatus.OUT_FOR_DELIVERY
    if _contains(text, _DELIVERED_WORDS):
        return ShipmentStatus.DELIVERED
    if _contains(text, _EXCEPTION_WORDS):
        return ShipmentStatus.EXCEPTION
    if _contains(text, _IN_TRANSIT_WORDS):
        return ShipmentStatus.IN_TRANSIT
    if _contains(text, _SHIPPED_WORDS):
        return ShipmentStatus.SHIPPED
    return None


# ─────────────────────────────────────────────────────────────
# status normalizers: never raise, unknown → shipped
# ─────────────────────────────────────────────────────────────
def map_ups_status(status: Optional[Dict[str, Any]]) -> str:
    """UPS ``{type, code, description}`` → ShipmentStatus value."""
    status = status if isinstance(status, dict) else {}
    hit = _by_keywords(_text(status.get("description")))
    if hit:
        return hit
    code = str(status.get("type") or "").strip().upper()
    if code in _UPS_TYPE_CODES:
        return _UPS_TYPE_CODES[code]
    code = str(status.get("code") or "").strip().upper()
    return _UPS_TYPE_CODES.get(code, ShipmentStatus.SHIPPED)


def map_fedex_status(status: Optional[Dict[str, Any]]) -> str:
    """FedEx ``{code, derivedCode, description, statusByLocale}`` → ShipmentStatus value."""
    status = status if isinstance(status, dict) else {}
    for key in ("derivedCode", "code"):
        code = str(status.get(key) or "").strip().upper()
        if code in _FEDEX_CODES:
            return _FEDEX_CODES[code]
    hit = _by_keywords(_text(status.get("description"), status.get("statusByLocale")))
    return hit or ShipmentStatus.SHIPPED


def map_aggregator_status(tag: Optional[str], message: Optional[str] = None) -> str:
    key = str(tag or "").replace("_", "").replace(" ", "").strip().lower()
    if key in _AGGREGATOR_TAGS:
        return _AGGREGATOR_TAGS[key]
    hit = _by_keywords(_text(message, tag))
    return hit or ShipmentStatus.SHIPPED


# ─────────────────────────────────────────────────────────────
# dates
# ─────────────────────────────────────────────────────────────
def parse_ups_datetime(date: Any, time: Any = None) -> Optional[datetime]:
    """UPS ``date`` (YYYYMMDD) + ``time`` (HHMMSS, may be short) as UTC."""
    d = str(date or "").strip()
    if len(d) != 8 or not d.isdigit():
        return None
    t = str(time or "").strip() or "0"
    if not t.isdigit() or len(t) > 6:
        return None
    t = t.zfill(6)
    try:
        return datetime(
            int(d[0:4]), int(d[4:6]), int(d[6:8]),
            int(t[0:2]), int(t[2:4]), int(t[4:6]),
            tzinfo=dt_timezone.utc,
        )
    except ValueError:
        return None


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        dt = parse_datetime(str(value).strip())
    except ValueError:
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)


# ─────────────────────────────────────────────────────────────
# events
# ─────────────────────────────────────────────────────────────
def build_event(status: Any, message: Any, when: Optional[datetime], *location_parts: Any) -> Dict[str, Any]:
    event: Dict[str, Any] = {
        "status": str(status or "").strip().lower(),
        "message": str(message or "").strip(),
    }
    if when is not None:
        event["datetime"] = when.isoformat().replace("+00:00", "Z")
    event["location"] = ", ".join(str(p).strip() for p in location_parts if p and str(p).strip())
    return event


def map_ups_events(activities: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    out = []
    for a in activities or []:
        status = a.get("status") or {}
        addr = (a.get("location") or {}).get("address") or {}
        out.append(
            build_event(
                map_ups_status(status),
                status.get("description"),
                parse_ups_datetime(a.get("date"), a.get("time")),
                addr.get("city"),
                addr.get("stateProvince"),
                addr.get("country") or addr.get("countryCode"),
            )
        )
    return out


def map_fedex_events(scans: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    out = []
    for s in scans or []:
        addr = s.get("scanLocation") or {}
        status = {
            "code": s.get("eventType"),
            "derivedCode": s.get("derivedStatusCode"),
            "description": s.get("eventDescription") or s.get("derivedStatus"),
        }
        out.append(
            build_event(
                map_fedex_status(status),
                status["description"],
                parse_iso_datetime(s.get("date")),
                addr.get("city"),
                addr.get("stateOrProvinceCode"),
                addr.get("countryName") or addr.get("countryCode"),
            )
        )
    return out


def map_aggregator_events(checkpoints: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    out = []
    for c in checkpoints or []:
        out.append(
            build_event(
                map_aggregator_status(c.get("tag"), c.get("message")),
                c.get("message"),
                parse_iso_datetime(c.get("checkpoint_time")),
                c.get("city"),
                c.get("state"),
                c.get("country_name") or c.get("country_iso3"),
            )
        )
    return out
