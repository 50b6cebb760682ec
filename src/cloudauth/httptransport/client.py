from __future__ import annotations

import logging
from urllib.parse import urlsplit

import requests
from requests.adapters import BaseAdapter, HTTPAdapter

from cloudauth.auth.token import TokenProvider, new_cached_token_provider

from .options import (
    Options,
    resolve_client_cert_provider,
    resolve_endpoint,
    validate_options,
)
from .transport import AuthTransport, default_base_transport, new_transport

logger = logging.getLogger(__name__)

_PREFIXES = ("https://", "http://")


class AuthorizedSession(requests.Session):
    """A :class:`requests.Session` bound to a service endpoint.

    Relative URLs are resolved against ``endpoint`` when one is set.
    """

    def __init__(self, transport: BaseAdapter, endpoint: str | None = None) -> None:
        super().__init__()
        self.endpoint = endpoint
        for prefix in _PREFIXES:
            self.mount(prefix, transport)

    def request(self, method, url, *args, **kwargs):
        if self.endpoint and not urlsplit(url).scheme:
            url = f"{self.endpoint.rstrip('/')}/{url.lstrip('/')}"
        return super().request(method, url, *args, **kwargs)


def new_client(opts: Options | None) -> AuthorizedSession:
    """Return a session for talking to a cloud service, configured by ``opts``.

    Every request sent through the session carries an Authorization header,
    unless authentication is disabled or an API key is used instead.

    Raises:
        ValueError: If ``opts`` is missing or inconsistent, or credentials
            cannot be detected from it.
    """
    validate_options(opts)

    cert_provider = resolve_client_cert_provider(opts)
    endpoint = resolve_endpoint(opts, uses_client_cert=cert_provider is not None)
    logger.debug(
        "Building client: endpoint=%s mtls=%s auth=%s",
        endpoint,
        cert_provider is not None,
        _auth_mode(opts),
    )

    trans = new_transport(default_base_transport(cert_provider), opts)
    return AuthorizedSession(trans, endpoint=endpoint)


def add_authorization_middleware(
    session: requests.Session, provider: TokenProvider
) -> None:
    """Authorize every request ``session`` sends with tokens from ``provider``.

    Each mounted adapter is wrapped in an :class:`AuthTransport`; all of them
    share one cached provider. A session without adapters gets a fresh
    :class:`HTTPAdapter` for ``https://`` and ``http://``.

    Raises:
        ValueError: If ``session`` or ``provider`` is None.
    """
    if session is None or provider is None:
        raise ValueError("httptransport: session and provider must not be None")
    cached = new_cached_token_provider(provider)
    if not session.adapters:
        base = HTTPAdapter()
        for prefix in _PREFIXES:
            session.mount(prefix, base)
    # One wrapper per distinct adapter, so adapters shared by prefixes stay shared.
    wrapped: dict[int, AuthTransport] = {}
    for prefix, adapter in list(session.adapters.items()):
        if id(adapter) not in wrapped:
            wrapped[id(adapter)] = AuthTransport(cached, adapter)
        session.mount(prefix, wrapped[id(adapter)])


def _auth_mode(opts: Options) -> str:
    if opts.disable_authentication:
        return "disabled"
    if opts.uses_api_key:
        return "api_key"
    if opts.token_provider is not None:
        return "token_provider"
    return "detected"
