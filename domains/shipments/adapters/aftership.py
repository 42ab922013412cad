# domains/shipments/adapters/aftership.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from django.conf import settings

from ..carriers import lookup_carrier
from ..exceptions import CarrierError
from ..status_map import map_aggregator_events, map_aggregator_status
from .base import CarrierAdapter

logger = logging.getLogger(__name__)

AUTO_SLUG = "auto"

# meta.code values
TRACKING_NOT_FOUND = 4004
TRACKING_ALREADY_EXISTS = 4003


class AfterShipAdapter(CarrierAdapter):
    """
    Tracking aggregator used for every carrier without a direct integration.

    With slug ``auto`` (or when the aggregator does not know the number yet)
    the number is registered with ``POST /trackings`` and the aggregator picks
    the courier.
    """

    name = "AfterShip"

    def __init__(self, slug: str = AUTO_SLUG):
        self.slug = slug or AUTO_SLUG
        self.base_url = str(getattr(settings, "AFTERSHIP_API_BASE", "https://api.aftership.com/v4")).rstrip("/")
        self.api_key = getattr(settings, "AFTERSHIP_API_KEY", "")

    def _headers(self) -> Dict[str, str]:
        return {"aftership-api-key": self.api_key, "Content-Type": "application/json"}

    def _error_message(self, body: Any) -> Optional[str]:
        try:
            return body["meta"].get("message") or None
        except (KeyError, TypeError, AttributeError):
            return None

    @staticmethod
    def _meta_code(body: Any) -> Optional[int]:
        try:
            return int(body["meta"]["code"])
        except (KeyError, TypeError, ValueError):
            return None

    @staticmethod
    def _tracking(body: Any) -> Dict[str, Any]:
        try:
            return body["data"]["tracking"] or {}
        except (KeyError, TypeError):
            return {}

    def _get(self, slug: str, tracking_number: str):
        return self._request("GET", f"{self.base_url}/trackings/{slug}/{tracking_number}", headers=self._headers())

    def _create(self, tracking_number: str):
        tracking: Dict[str, Any] = {"tracking_number": tracking_number}
        if self.slug != AUTO_SLUG:
            tracking["slug"] = self.slug
        return self._request("POST", f"{self.base_url}/trackings", json={"tracking": tracking}, headers=self._headers())

    def fetch_tracking(self, tracking_number: str) -> Dict[str, Any]:
        if self.slug != AUTO_SLUG:
            res = self._get(self.slug, tracking_number)
            body = self._json(res)
            if self._meta_code(body) != TRACKING_NOT_FOUND:
                return self._tracking(self._raise_for_status(res))
            logger.info("AfterShip does not know %s/%s yet, registering", self.slug, tracking_number)

        res = self._create(tracking_number)
        body = self._json(res)
        if self._meta_code(body) == TRACKING_ALREADY_EXISTS:
            slug = self._tracking(body).get("slug") or self.slug
            if slug == AUTO_SLUG:
                raise CarrierError(self._error_message(body), status_code=res.status_code, carrier=self.name, payload=body)
            return self._tracking(self._raise_for_status(self._get(slug, tracking_number)))

        tracking = self._tracking(self._raise_for_status(res))
        if not tracking:
            raise CarrierError(status_code=404, carrier=self.name, payload=body)
        return tracking

    def parse_status(self, raw: Dict[str, Any]) -> str:
        return map_aggregator_status(raw.get("tag"), raw.get("subtag_message"))

    def parse_events(self, raw: Dict[str, Any]) -> List[Dict[str, Any]]:
        return map_aggregator_events(raw.get("checkpoints"))

    def resolve_carrier(self, raw: Dict[str, Any]) -> Optional[str]:
        return lookup_carrier(raw.get("slug") or (None if self.slug == AUTO_SLUG else self.slug))
