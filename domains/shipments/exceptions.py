# domains/shipments/exceptions.py
from __future__ import annotations

from typing import Any, Optional

from rest_framework import status
from rest_framework.exceptions import APIException

DEFAULT_CARRIER_MESSAGE = "Invalid or unsupported tracking number"


class CarrierError(Exception):
    """
    A carrier (or the aggregator) rejected the request or returned nothing usable.
    status_code is the carrier's HTTP status when there was one.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        carrier: Optional[str] = None,
        payload: Any = None,
    ):
        self.message = message or DEFAULT_CARRIER_MESSAGE
        self.status_code = status_code
        self.carrier = carrier
        self.payload = payload
        super().__init__(self.message)

    def __str__(self) -> str:
        prefix = f"[{self.carrier}] " if self.carrier else ""
        code = f" (HTTP {self.status_code})" if self.status_code else ""
        return f"{prefix}{self.message}{code}"


class CarrierAuthError(CarrierError):
    """Token endpoint refused the credentials; a configuration problem, not retried."""


class OrderNotShippable(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Shipping cannot be updated for a failed or refunded order."
    default_code = "order_not_shippable"
