# domains/shipments/carriers.py
from __future__ import annotations

import re
from typing import Optional

from django.db import models

from rest_framework.exceptions import ValidationError


class Carrier(models.TextChoices):
    USPS = "USPS", "USPS"
    UPS = "UPS", "UPS"
    FEDEX = "FedEx", "FedEx"
    DHL = "DHL", "DHL"
    CANADA_POST = "CanadaPost", "Canada Post"
    ROYAL_MAIL = "RoyalMail", "Royal Mail"
    AUSTRALIA_POST = "AustraliaPost", "Australia Post"
    LA_POSTE = "LaPoste", "La Poste"
    DEUTSCHE_POST = "DeutschePost", "Deutsche Post"


# carrier → aggregator (AfterShip) courier slug
AGGREGATOR_SLUGS = {
    Carrier.USPS: "usps",
    Carrier.UPS: "ups",
    Carrier.FEDEX: "fedex",
    Carrier.DHL: "dhl",
    Carrier.CANADA_POST: "canada-post",
    Carrier.ROYAL_MAIL: "royal-mail",
    Carrier.AUSTRALIA_POST: "australia-post",
    Carrier.LA_POSTE: "la-poste-colissimo",
    Carrier.DEUTSCHE_POST: "deutsch-post",
}


def _key(value: str) -> str:
    return re.sub(r"[\s\-_.]", "", (value or "").strip().lower())


# common spellings / aggregator slugs → canonical carrier
_ALIASES = {
    "usps": Carrier.USPS,
    "unitedstatespostalservice": Carrier.USPS,
    "ups": Carrier.UPS,
    "unitedparcelservice": Carrier.UPS,
    "fedex": Carrier.FEDEX,
    "federalexpress": Carrier.FEDEX,
    "dhl": Carrier.DHL,
    "dhlexpress": Carrier.DHL,
    "canadapost": Carrier.CANADA_POST,
    "royalmail": Carrier.ROYAL_MAIL,
    "australiapost": Carrier.AUSTRALIA_POST,
    "auspost": Carrier.AUSTRALIA_POST,
    "laposte": Carrier.LA_POSTE,
    "lapostecolissimo": Carrier.LA_POSTE,
    "colissimo": Carrier.LA_POSTE,
    "deutschepost": Carrier.DEUTSCHE_POST,
    "deutschpost": Carrier.DEUTSCHE_POST,
}


def lookup_carrier(value: Optional[str]) -> Optional[Carrier]:
    """Canonical carrier for a name/slug, or None when it is not supported."""
    return _ALIASES.get(_key(value or ""))


def normalize_carrier(value: Optional[str]) -> Carrier:
    """
    Name/slug → Carrier; unsupported values fail validation instead of being
    stored as free text.
    """
    carrier = lookup_carrier(value)
    if carrier is None:
        raise ValidationError({"carrier": f"Unsupported carrier: {str(value or '').strip()!r}"})
    return carrier


def aggregator_slug(carrier: Carrier) -> str:
    return AGGREGATOR_SLUGS[carrier]
