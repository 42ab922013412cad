# domains/shipments/adapters/fedex.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from django.conf import settings

from ..carriers import Carrier
from ..exceptions import CarrierError
from ..status_map import map_fedex_events, map_fedex_status
from .base import CarrierAdapter
from .oauth import TokenCache, default_token_cache, request_client_credentials_token

logger = logging.getLogger(__name__)


class FedExAdapter(CarrierAdapter):
    name = Carrier.FEDEX.value
    token_path = "/oauth/token"
    track_path = "/track/v1/trackingnumbers"

    def __init__(self, token_cache: Optional[TokenCache] = None):
        self.token_cache = token_cache or default_token_cache
        self.base_url = str(getattr(settings, "FEDEX_API_BASE", "https://apis.fedex.com")).rstrip("/")
        self.client_id = getattr(settings, "FEDEX_CLIENT_ID", "")
        self.client_secret = getattr(settings, "FEDEX_CLIENT_SECRET", "")

    def _fetch_token(self):
        return request_client_credentials_token(
            self.name,
            f"{self.base_url}{self.token_path}",
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def _error_message(self, body: Any) -> Optional[str]:
        try:
            return body["errors"][0].get("message") or None
        except (KeyError, IndexError, TypeError, AttributeError):
            return None

    def fetch_tracking(self, tracking_number: str) -> Dict[str, Any]:
        token = self.token_cache.get_or_refresh(self.name, None, self._fetch_token)
        payload = {
            "includeDetailedScans": True,
            "trackingInfo": [{"trackingNumberInfo": {"trackingNumber": tracking_number}}],
        }
        res = self._request(
            "POST",
            f"{self.base_url}{self.track_path}",
            json=payload,
            headers={"Authorization": f"Bearer {token}", "X-locale": "en_US"},
        )
        body = self._raise_for_status(res) or {}

        results = (body.get("output") or {}).get("completeTrackResults") or []
        track_results = results[0].get("trackResults") if results else None
        if not track_results:
            raise CarrierError(status_code=404, carrier=self.name, payload=body)

        result = track_results[0]
        # per-number errors come back inside a 2xx envelope
        error = result.get("error")
        if error:
            raise CarrierError(error.get("message"), status_code=404, carrier=self.name, payload=body)
        return result

    def parse_status(self, raw: Dict[str, Any]) -> str:
        return map_fedex_status(raw.get("latestStatusDetail"))

    def parse_events(self, raw: Dict[str, Any]) -> List[Dict[str, Any]]:
        return map_fedex_events(raw.get("scanEvents"))

    def resolve_carrier(self, raw: Dict[str, Any]) -> Optional[str]:
        return Carrier.FEDEX
