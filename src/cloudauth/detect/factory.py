from __future__ import annotations

import logging
from typing import Any

from azure.core.credentials import TokenCredential
from azure.core.pipeline.transport import RequestsTransport
from azure.identity import (
    AzureCliCredential,
    CertificateCredential,
    ClientAssertionCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    InteractiveBrowserCredential,
    ManagedIdentityCredential,
    WorkloadIdentityCredential,
)

from cloudauth.auth.token import CredentialTokenProvider, TokenProvider

from . import scopes
from .config import DetectOptions, Strategy
from .credentials_file import CredentialsFile, CredentialsType, load_credentials
from .selfsigned import SelfSignedJWTProvider, sign_assertion

logger = logging.getLogger(__name__)


def _transport_kwargs(opts: DetectOptions) -> dict[str, Any]:
    """Route credential HTTP traffic through the configured session, if any."""
    if opts.session is None:
        return {}
    return {"transport": RequestsTransport(session=opts.session, session_owner=False)}


def get_credential(opts: DetectOptions | None = None) -> TokenCredential:
    """Construct a :class:`TokenCredential` based on :class:`DetectOptions`.

    Args:
        opts: Detection options. If ``None``, options are read from the
            environment.

    Returns:
        A concrete :class:`TokenCredential`.
    """
    cfg = opts or DetectOptions()
    authority = cfg.authority  # may be None
    extra = _transport_kwargs(cfg)

    match cfg.strategy:
        case Strategy.CLI:
            return AzureCliCredential(authority=authority)
        case Strategy.MANAGED_IDENTITY:
            return ManagedIdentityCredential(
                client_id=cfg.client_id, authority=authority, **extra
            )
        case Strategy.CLIENT_SECRET:
            return ClientSecretCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                client_secret=cfg.client_secret.get_secret_value(),
                authority=authority,
                **extra,
            )
        case Strategy.CLIENT_CERTIFICATE:
            return CertificateCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                certificate_path=str(cfg.certificate_path),
                password=(
                    cfg.certificate_password.get_secret_value()
                    if cfg.certificate_password
                    else None
                ),
                authority=authority,
                **extra,
            )
        case Strategy.WORKLOAD_IDENTITY:
            return WorkloadIdentityCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                token_file_path=str(cfg.federated_token_file),
                authority=authority,
                **extra,
            )
        case Strategy.INTERACTIVE_BROWSER:
            return InteractiveBrowserCredential(
                tenant_id=cfg.tenant_id,
                client_id=cfg.client_id,
                authority=authority,
                redirect_uri=cfg.redirect_uri,
                **extra,
            )
        case _:
            return DefaultAzureCredential(authority=authority, **extra)


def credential_from_file(
    creds: CredentialsFile, opts: DetectOptions
) -> TokenCredential:
    """Construct a :class:`TokenCredential` from a credentials document.

    ``authority`` in the document wins over the one on ``opts``.
    """
    authority = creds.authority or opts.authority
    extra = _transport_kwargs(opts)

    match creds.type:
        case CredentialsType.CLIENT_SECRET:
            return ClientSecretCredential(
                tenant_id=creds.tenant_id,
                client_id=creds.client_id,
                client_secret=creds.client_secret.get_secret_value(),
                authority=authority,
                **extra,
            )
        case CredentialsType.CLIENT_CERTIFICATE:
            return CertificateCredential(
                tenant_id=creds.tenant_id,
                client_id=creds.client_id,
                certificate_path=str(creds.certificate_path),
                password=(
                    creds.certificate_password.get_secret_value()
                    if creds.certificate_password
                    else None
                ),
                authority=authority,
                **extra,
            )
        case CredentialsType.WORKLOAD_IDENTITY:
            return WorkloadIdentityCredential(
                tenant_id=creds.tenant_id,
                client_id=creds.client_id,
                token_file_path=str(creds.federated_token_file),
                authority=authority,
                **extra,
            )
        case CredentialsType.MANAGED_IDENTITY:
            return ManagedIdentityCredential(
                client_id=creds.client_id, authority=authority, **extra
            )
        case CredentialsType.SERVICE_ACCOUNT:
            if not creds.tenant_id:
                raise ValueError(
                    "service_account credentials require tenant_id unless "
                    "self-signed JWTs are enabled."
                )
            audience = scopes.token_endpoint(creds.tenant_id, authority)
            private_key = creds.private_key.get_secret_value()

            def _assertion() -> str:
                return sign_assertion(
                    issuer=creds.client_id,
                    private_key=private_key,
                    audience=audience,
                    key_id=creds.private_key_id,
                )

            return ClientAssertionCredential(
                tenant_id=creds.tenant_id,
                client_id=creds.client_id,
                func=_assertion,
                authority=authority,
                **extra,
            )
    raise ValueError(f"Unsupported credentials type: {creds.type!r}")


def _token_scopes(opts: DetectOptions) -> list[str]:
    if opts.scopes:
        return list(opts.scopes)
    return [scopes.scope_from_audience(opts.audience)]


def detect_default_credentials(opts: DetectOptions | None = None) -> TokenProvider:
    """Detect credentials and return a provider of tokens for them.

    A credentials document on ``opts`` takes precedence over the strategy
    fields. Service-account documents mint self-signed JWTs when
    ``use_self_signed_jwt`` is set.

    Args:
        opts: Detection options. If ``None``, options are read from the
            environment.

    Raises:
        ValueError: If neither scopes nor an audience is configured, or the
            credentials document is invalid.
    """
    opts = opts or DetectOptions()
    if not opts.scopes and not opts.audience:
        raise ValueError("detect: options must provide scopes or an audience")

    creds = load_credentials(opts)
    if creds is None:
        logger.debug("Detecting credentials with strategy %s", opts.strategy.value)
        return CredentialTokenProvider(get_credential(opts), _token_scopes(opts))

    logger.debug("Using %s credentials from credentials document", creds.type.value)
    if creds.type is CredentialsType.SERVICE_ACCOUNT and opts.use_self_signed_jwt:
        return SelfSignedJWTProvider(
            issuer=creds.client_id,
            private_key=creds.private_key.get_secret_value(),
            key_id=creds.private_key_id,
            audience=opts.audience,
            scopes=opts.scopes,
        )
    return CredentialTokenProvider(
        credential_from_file(creds, opts), _token_scopes(opts)
    )
