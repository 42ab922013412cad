# domains/shipments/adapters/oauth.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Tuple

import requests

from ..exceptions import CarrierAuthError, CarrierError
from .base import http_timeout

logger = logging.getLogger(__name__)

REFRESH_MARGIN_SECONDS = 60


@dataclass
class AccessToken:
    value: str
    expires_at: float


class TokenCache:
    """
    OAuth2 client-credentials tokens keyed by (provider, scopes).

    A token is reused until it is within ``margin_seconds`` of expiry. No lock:
    two callers racing a refresh both fetch and the last write wins.
    """

    def __init__(self, margin_seconds: int = REFRESH_MARGIN_SECONDS, clock: Callable[[], float] = time.time):
        self.margin_seconds = margin_seconds
        self.clock = clock
        self._tokens: Dict[Tuple[str, FrozenSet[str]], AccessToken] = {}

    @staticmethod
    def _key(provider: str, scopes: Optional[Iterable[str]]) -> Tuple[str, FrozenSet[str]]:
        return provider, frozenset(scopes or ())

    def get(self, provider: str, scopes: Optional[Iterable[str]] = None) -> Optional[AccessToken]:
        return self._tokens.get(self._key(provider, scopes))

    def get_or_refresh(
        self,
        provider: str,
        scopes: Optional[Iterable[str]],
        fetch: Callable[[], Tuple[str, int]],
    ) -> str:
        """
        ``fetch`` returns ``(access_token, expires_in_seconds)`` and is only
        called when there is no usable cached token.
        """
        key = self._key(provider, scopes)
        now = self.clock()
        token = self._tokens.get(key)
        if token is not None and token.expires_at - now > self.margin_seconds:
            return token.value

        value, expires_in = fetch()
        self._tokens[key] = AccessToken(value=value, expires_at=now + int(expires_in or 0))
        logger.debug("refreshed %s token (expires in %ss)", provider, expires_in)
        return value

    def invalidate(self, provider: str, scopes: Optional[Iterable[str]] = None) -> None:
        """Drop a token the provider rejected; the next call fetches a fresh one."""
        if self._tokens.pop(self._key(provider, scopes), None) is not None:
            logger.info("dropped rejected %s token", provider)

    def clear(self) -> None:
        self._tokens.clear()


# process-wide default, used when an adapter is built without one
default_token_cache = TokenCache()


def request_client_credentials_token(
    provider: str,
    url: str,
    *,
    data: Dict[str, str],
    auth: Optional[Tuple[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[str, int]:
    """POST to a token endpoint → ``(access_token, expires_in)``."""
    try:
        res = requests.post(url, data=data, auth=auth, headers=headers, timeout=http_timeout())
    except requests.Timeout as e:
        raise CarrierError(f"{provider} did not respond in time", status_code=504, carrier=provider) from e
    except requests.RequestException as e:
        raise CarrierError(f"{provider} is unreachable", status_code=502, carrier=provider) from e

    if not (200 <= res.status_code < 300):
        logger.error("%s token request failed: HTTP %s", provider, res.status_code)
        # surfaced as a gateway error; the caller's request was fine
        raise CarrierAuthError(
            f"{provider} rejected the API credentials",
            status_code=502,
            carrier=provider,
            payload={"upstream_status": res.status_code},
        )
    try:
        body = res.json()
    except ValueError as e:
        raise CarrierAuthError(
            f"{provider} returned an unreadable token response", status_code=502, carrier=provider
        ) from e

    body = body if isinstance(body, dict) else {}
    token = body.get("access_token")
    if not token:
        raise CarrierAuthError(f"{provider} token response had no access_token", status_code=502, carrier=provider)
    return token, int(body.get("expires_in") or 0)
