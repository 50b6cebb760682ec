from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Final, Mapping, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential

logger = logging.getLogger(__name__)

TOKEN_TYPE_BEARER: Final[str] = "Bearer"

# Tokens are treated as expired this long before their real expiry.
DEFAULT_EXPIRE_EARLY: Final[timedelta] = timedelta(seconds=225)


@dataclass(frozen=True)
class Token:
    """An access token and the scheme it is presented with.

    An empty ``type`` means the token is a Bearer token.
    """

    value: str
    type: str = ""
    expiry: datetime | None = None
    metadata: Mapping[str, Any] | None = None

    def is_valid(
        self,
        now: datetime | None = None,
        expire_early: timedelta = DEFAULT_EXPIRE_EARLY,
    ) -> bool:
        """Return True if the token has a value and is not about to expire.

        A naive ``expiry`` or ``now`` is taken to be UTC.
        """
        if not self.value:
            return False
        if self.expiry is None:
            return True
        now = _as_utc(now or datetime.now(timezone.utc))
        return now < _as_utc(self.expiry) - expire_early


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


@runtime_checkable
class TokenProvider(Protocol):
    """Anything that can produce a :class:`Token` or raise trying."""

    def token(self) -> Token:
        raise NotImplementedError


@dataclass
class CachedTokenProviderOptions:
    disable_auto_refresh: bool = False
    expire_early: timedelta | None = None


class CachedTokenProvider:
    """Token provider that reuses a token until it is no longer valid.

    Refreshes are serialised, so concurrent callers that find the cache stale
    share a single call to the wrapped provider.
    """

    def __init__(
        self,
        provider: TokenProvider,
        options: CachedTokenProviderOptions | None = None,
    ) -> None:
        self._provider = provider
        self._options = options or CachedTokenProviderOptions()
        self._lock = threading.Lock()
        self._cached: Token | None = None

    @property
    def _expire_early(self) -> timedelta:
        if self._options.expire_early is None:
            return DEFAULT_EXPIRE_EARLY
        return self._options.expire_early

    def token(self) -> Token:
        with self._lock:
            cached = self._cached
            if cached is not None:
                if self._options.disable_auto_refresh:
                    return cached
                if cached.is_valid(expire_early=self._expire_early):
                    return cached
            logger.debug("Refreshing token from %s", type(self._provider).__name__)
            tok = self._provider.token()
            self._cached = tok
            return tok


def new_cached_token_provider(
    provider: TokenProvider,
    options: CachedTokenProviderOptions | None = None,
) -> CachedTokenProvider:
    """Wrap ``provider`` in a cache, unless it already is one."""
    if isinstance(provider, CachedTokenProvider):
        return provider
    return CachedTokenProvider(provider, options)


class CredentialTokenProvider:
    """Adapt an Azure :class:`TokenCredential` to :class:`TokenProvider`."""

    def __init__(self, credential: "TokenCredential", scopes: Sequence[str]) -> None:
        self.credential = credential
        self.scopes = list(scopes)

    def token(self) -> Token:
        access = self.credential.get_token(*self.scopes)
        return Token(
            value=access.token,
            type=TOKEN_TYPE_BEARER,
            expiry=datetime.fromtimestamp(access.expires_on, tz=timezone.utc),
        )
