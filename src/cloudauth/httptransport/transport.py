from __future__ import annotations

import logging
import os
import tempfile
import time
from typing import Mapping

from requests import PreparedRequest, Response
from requests.adapters import BaseAdapter, HTTPAdapter
from urllib3.util.ssl_ import create_urllib3_context

from cloudauth.auth.token import (
    TOKEN_TYPE_BEARER,
    Token,
    TokenProvider,
    new_cached_token_provider,
)
from cloudauth.detect import factory

from .options import ClientCertProvider, Options, resolve_detect_options

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


def set_auth_header(token: Token, request: PreparedRequest) -> None:
    """Set the Authorization header on ``request`` from ``token``.

    If ``token.type`` is empty, the type is assumed to be Bearer.
    """
    typ = token.type or TOKEN_TYPE_BEARER
    request.headers["Authorization"] = f"{typ} {token.value}"


class AuthTransport(BaseAdapter):
    """Adapter that authorizes each request before handing it to ``base``.

    The token provider is always wrapped in a cache, so a still-valid token is
    reused across requests.
    """

    def __init__(self, provider: TokenProvider, base: BaseAdapter) -> None:
        if provider is None or base is None:
            raise ValueError("httptransport: provider and base must not be None")
        super().__init__()
        self.provider = new_cached_token_provider(provider)
        self.base = base

    def send(self, request: PreparedRequest, **kwargs) -> Response:
        token = self.provider.token()
        req = request.copy()
        set_auth_header(token, req)
        return self.base.send(req, **kwargs)

    def close(self) -> None:
        self.base.close()


class HeaderTransport(BaseAdapter):
    """Adapter that adds a fixed set of headers to every request."""

    def __init__(self, headers: Mapping[str, str], base: BaseAdapter) -> None:
        super().__init__()
        self.headers = dict(headers)
        self.base = base

    def send(self, request: PreparedRequest, **kwargs) -> Response:
        req = request.copy()
        req.headers.update(self.headers)
        return self.base.send(req, **kwargs)

    def close(self) -> None:
        self.base.close()


class TelemetryTransport(BaseAdapter):
    """Adapter that logs each request with its status and latency."""

    def __init__(self, base: BaseAdapter) -> None:
        super().__init__()
        self.base = base

    def send(self, request: PreparedRequest, **kwargs) -> Response:
        start = time.monotonic()
        try:
            response = self.base.send(request, **kwargs)
        except Exception:
            logger.debug(
                "%s %s failed after %.3fs",
                request.method,
                request.url,
                time.monotonic() - start,
            )
            raise
        logger.debug(
            "%s %s -> %s in %.3fs",
            request.method,
            request.url,
            response.status_code,
            time.monotonic() - start,
        )
        return response

    def close(self) -> None:
        self.base.close()


class MTLSAdapter(HTTPAdapter):
    """HTTP adapter that presents a client certificate on TLS connections.

    The certificate provider is called once, when the pool manager is built.
    Any error it raises propagates out of the constructor. Proxy pool managers
    share the same SSL context.
    """

    def __init__(self, client_cert_provider: ClientCertProvider, **kwargs) -> None:
        self._client_cert_provider = client_cert_provider
        self._ssl_context = None
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        cert = self._client_cert_provider()
        ctx = create_urllib3_context()
        # load_cert_chain only reads from files; they are gone once loaded.
        with tempfile.TemporaryDirectory() as tmp:
            cert_file = os.path.join(tmp, "client.crt")
            key_file = os.path.join(tmp, "client.key")
            with open(cert_file, "wb") as fh:
                fh.write(cert.cert_pem)
            with open(key_file, "wb") as fh:
                fh.write(cert.key_pem)
            ctx.load_cert_chain(cert_file, key_file)

        self._ssl_context = ctx
        kwargs["ssl_context"] = ctx
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        proxy_kwargs["ssl_context"] = self._ssl_context
        return super().proxy_manager_for(proxy, **proxy_kwargs)


def default_base_transport(
    client_cert_provider: ClientCertProvider | None = None,
) -> HTTPAdapter:
    """Return a fresh base adapter, presenting a client certificate if given."""
    if client_cert_provider is not None:
        return MTLSAdapter(client_cert_provider)
    return HTTPAdapter()


def new_transport(base: BaseAdapter, opts: Options) -> BaseAdapter:
    """Wrap ``base`` in the decorators ``opts`` asks for.

    Order, innermost first: telemetry, static headers, authorization.
    """
    trans: BaseAdapter = base
    if not opts.disable_telemetry:
        trans = TelemetryTransport(trans)

    headers = dict(opts.headers)
    if opts.uses_api_key:
        headers[API_KEY_HEADER] = opts.api_key.get_secret_value()
    if headers:
        trans = HeaderTransport(headers, trans)

    if opts.disable_authentication or opts.uses_api_key:
        return trans

    provider = opts.token_provider
    if provider is None:
        provider = factory.detect_default_credentials(resolve_detect_options(opts))
    return AuthTransport(provider, trans)
