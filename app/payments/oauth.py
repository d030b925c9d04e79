"""
Stateless OAuth "state" tokens for provider account connection.

The token binds the OAuth callback to the tenant that started the flow
without a server-side session:

    <tenant_id>.<timestamp_ms>.<base64url(HMAC-SHA256(secret, "<tenant_id>.<timestamp_ms>"))>

Usage:
    from payments.oauth import OAuthStateSigner

    signer = OAuthStateSigner.from_settings()
    state = signer.sign_state(str(tenant.id))

    # In the callback
    tenant_id = signer.verify_state(request.GET["state"])
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import timedelta

from django.conf import settings

from core.clock import Clock, SystemClock
from payments.exceptions import ExpiredOAuthStateError, InvalidOAuthStateError

STATE_TTL = timedelta(minutes=10)

_SEPARATOR = "."


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class OAuthStateSigner:
    """
    Signs and verifies OAuth state tokens.

    The secret and clock are passed in so the signer can be tested
    without settings or wall-clock time.
    """

    def __init__(self, secret: str, clock: Clock | None = None, ttl: timedelta = STATE_TTL):
        if not secret:
            raise ValueError("OAuth state secret is required")
        self._secret = secret.encode("utf-8")
        self._clock = clock or SystemClock()
        self._ttl = ttl

    @classmethod
    def from_settings(cls, clock: Clock | None = None) -> OAuthStateSigner:
        secret = settings.MERCADOPAGO_OAUTH_STATE_SECRET or settings.MERCADOPAGO_CLIENT_SECRET
        return cls(secret, clock=clock)

    def _signature(self, payload: str) -> str:
        digest = hmac.new(self._secret, payload.encode("utf-8"), hashlib.sha256).digest()
        return _b64url(digest)

    def _now_ms(self) -> int:
        return int(self._clock.now().timestamp() * 1000)

    def sign_state(self, tenant_id: str) -> str:
        tenant_id = str(tenant_id)
        if not tenant_id or _SEPARATOR in tenant_id:
            raise ValueError("tenant_id must be non-empty and must not contain '.'")
        payload = f"{tenant_id}{_SEPARATOR}{self._now_ms()}"
        return f"{payload}{_SEPARATOR}{self._signature(payload)}"

    def verify_state(self, token: str) -> str:
        """
        Return the tenant id carried by a valid token.

        Raises:
            InvalidOAuthStateError: Malformed token or signature mismatch
            ExpiredOAuthStateError: Token older than the TTL
        """
        parts = (token or "").split(_SEPARATOR)
        if len(parts) != 3 or not all(parts):
            raise InvalidOAuthStateError("Malformed OAuth state")

        tenant_id, timestamp, signature = parts
        expected = self._signature(f"{tenant_id}{_SEPARATOR}{timestamp}")
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
            raise InvalidOAuthStateError("Invalid OAuth state signature")

        try:
            issued_ms = int(timestamp)
        except ValueError:
            raise InvalidOAuthStateError("Malformed OAuth state timestamp")

        age_ms = self._now_ms() - issued_ms
        if age_ms < 0 or age_ms > self._ttl.total_seconds() * 1000:
            raise ExpiredOAuthStateError(
                "OAuth state expired",
                details={"age_seconds": age_ms // 1000},
            )
        return tenant_id
