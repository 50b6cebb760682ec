"""Tokens and token providers.

Public API:
- Token, TokenProvider
- CachedTokenProvider, new_cached_token_provider() (refresh only when stale)
- CredentialTokenProvider (adapts an Azure TokenCredential)
"""

from .token import (
    TOKEN_TYPE_BEARER,
    CachedTokenProvider,
    CachedTokenProviderOptions,
    CredentialTokenProvider,
    Token,
    TokenProvider,
    new_cached_token_provider,
)

__all__ = [
    "TOKEN_TYPE_BEARER",
    "CachedTokenProvider",
    "CachedTokenProviderOptions",
    "CredentialTokenProvider",
    "Token",
    "TokenProvider",
    "new_cached_token_provider",
]
