# domains/shipments/adapters/base.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from ..exceptions import DEFAULT_CARRIER_MESSAGE, CarrierError

logger = logging.getLogger(__name__)


def http_timeout() -> float:
    return float(getattr(settings, "CARRIER_HTTP_TIMEOUT", 10) or 10)


class CarrierAdapter:
    """
    Minimal interface shared by every carrier adapter.

    ``fetch_tracking`` returns the carrier-native payload; the ``parse_*``
    methods turn that payload into the internal status/event shape.
    """

    name = "carrier"

    def fetch_tracking(self, tracking_number: str) -> Dict[str, Any]:
        raise NotImplementedError

    def parse_status(self, raw: Dict[str, Any]) -> str:
        raise NotImplementedError

    def parse_events(self, raw: Dict[str, Any]) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def resolve_carrier(self, raw: Dict[str, Any]) -> Optional[str]:
        """Carrier that actually handles the parcel, when the payload says so."""
        return None

    # ----- HTTP helpers -----
    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", http_timeout())
        try:
            return requests.request(method, url, **kwargs)
        except requests.Timeout as e:
            logger.warning("%s timeout: %s %s", self.name, method, url)
            raise CarrierError(f"{self.name} did not respond in time", status_code=504, carrier=self.name) from e
        except requests.RequestException as e:
            logger.warning("%s request error: %s %s (%s)", self.name, method, url, e)
            raise CarrierError(f"{self.name} is unreachable", status_code=502, carrier=self.name) from e

    def _json(self, res: requests.Response) -> Any:
        try:
            return res.json()
        except ValueError:
            return None

    def _error_message(self, body: Any) -> Optional[str]:
        """Best-effort message from the carrier's error envelope."""
        return None

    def _drop_token(self) -> None:
        # OAuth adapters carry a token_cache; API-key adapters have nothing to drop
        cache = getattr(self, "token_cache", None)
        if cache is not None:
            cache.invalidate(self.name)

    def _raise_for_status(self, res: requests.Response) -> Any:
        body = self._json(res)
        if 200 <= res.status_code < 300:
            return body
        message = self._error_message(body) if body is not None else None
        logger.info("%s returned HTTP %s: %s", self.name, res.status_code, message or "-")
        if res.status_code == 401:
            self._drop_token()
        raise CarrierError(
            message or DEFAULT_CARRIER_MESSAGE,
            status_code=res.status_code,
            carrier=self.name,
            payload=body,
        )
