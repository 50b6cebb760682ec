"""Self-signed JWTs for service-account style credentials."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Sequence

import jwt

from cloudauth.auth.token import TOKEN_TYPE_BEARER, Token

DEFAULT_LIFETIME = timedelta(hours=1)
SIGNING_ALGORITHM = "RS256"


def sign_assertion(
    *,
    issuer: str,
    private_key: str | bytes,
    audience: str,
    key_id: str | None = None,
    lifetime: timedelta = DEFAULT_LIFETIME,
    now: datetime | None = None,
) -> str:
    """Sign a client assertion (RFC 7523) for ``audience``."""
    now = now or datetime.now(timezone.utc)
    claims = {
        "iss": issuer,
        "sub": issuer,
        "aud": audience,
        "jti": str(uuid.uuid4()),
        "iat": now,
        "nbf": now,
        "exp": now + lifetime,
    }
    headers = {"kid": key_id} if key_id else None
    return jwt.encode(claims, private_key, algorithm=SIGNING_ALGORITHM, headers=headers)


class SelfSignedJWTProvider:
    """Token provider that mints its own JWTs instead of calling a token endpoint.

    When scopes are given they are sent as a space-separated ``scope`` claim;
    otherwise the token is bound to ``audience`` through ``aud``.
    """

    def __init__(
        self,
        *,
        issuer: str,
        private_key: str | bytes,
        key_id: str | None = None,
        audience: str | None = None,
        scopes: Sequence[str] = (),
        lifetime: timedelta = DEFAULT_LIFETIME,
    ) -> None:
        if not scopes and not audience:
            raise ValueError("self-signed JWTs need an audience or scopes")
        self.issuer = issuer
        self.key_id = key_id
        self.audience = audience
        self.scopes = list(scopes)
        self.lifetime = lifetime
        self._private_key = private_key

    def token(self) -> Token:
        now = datetime.now(timezone.utc)
        expiry = now + self.lifetime
        claims: dict[str, object] = {
            "iss": self.issuer,
            "sub": self.issuer,
            "iat": now,
            "exp": expiry,
        }
        if self.scopes:
            claims["scope"] = " ".join(self.scopes)
        else:
            claims["aud"] = self.audience
        headers = {"kid": self.key_id} if self.key_id else None
        value = jwt.encode(
            claims, self._private_key, algorithm=SIGNING_ALGORITHM, headers=headers
        )
        return Token(value=value, type=TOKEN_TYPE_BEARER, expiry=expiry)
