# domains/shipments/adapters/__init__.py
from __future__ import annotations

import re
from typing import Optional

from ..carriers import Carrier, aggregator_slug, normalize_carrier
from .aftership import AUTO_SLUG, AfterShipAdapter
from .base import CarrierAdapter
from .fedex import FedExAdapter
from .oauth import TokenCache, default_token_cache
from .ups import UPSAdapter

UPS_NUMBER_RE = re.compile(r"^1Z[0-9A-Z]{16}$")

# carriers with a direct integration; everything else goes through the aggregator
_DIRECT_ADAPTERS = {
    Carrier.UPS: UPSAdapter,
    Carrier.FEDEX: FedExAdapter,
}


def get_adapter(
    carrier: Optional[str] = None,
    tracking_number: str = "",
    token_cache: Optional[TokenCache] = None,
) -> CarrierAdapter:
    """
    Explicit carrier wins; otherwise a UPS-shaped number goes to UPS and the
    rest to the aggregator with courier auto-detection.
    """
    if carrier:
        carrier = normalize_carrier(carrier)
        cls = _DIRECT_ADAPTERS.get(carrier)
        if cls is not None:
            return cls(token_cache=token_cache)
        return AfterShipAdapter(slug=aggregator_slug(carrier))

    if UPS_NUMBER_RE.match((tracking_number or "").strip().upper()):
        return UPSAdapter(token_cache=token_cache)
    return AfterShipAdapter(slug=AUTO_SLUG)


__all__ = [
    "get_adapter",
    "CarrierAdapter",
    "UPSAdapter",
    "FedExAdapter",
    "AfterShipAdapter",
    "TokenCache",
    "default_token_cache",
]
