from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudauth.auth.token import TokenProvider
from cloudauth.detect.config import DetectOptions, clone_detect_options
from cloudauth.tls import ClientCertificate

# Called when the TLS context is built; returns the client certificate to
# present or raises.
ClientCertProvider = Callable[[], ClientCertificate]


@dataclass
class InternalOptions:
    """Defaults supplied by generated client code.

    Not meant to be set by consumers of this package. Configuration in this
    type is experimental and may change without warning.
    """

    # Allow scopes in self-signed JWTs.
    enable_jwt_with_scope: bool = False
    # Audience ("aud") used when no scopes apply.
    default_audience: str | None = None
    default_endpoint: str | None = None
    default_mtls_endpoint: str | None = None
    default_scopes: list[str] = field(default_factory=list)


class Options(BaseModel):
    """Options used to configure a session from :func:`new_client`.

    Attributes:
        disable_telemetry: Skip the request logging transport.
        disable_authentication: Send requests without credentials. Suitable
            only for tests and public resources; incompatible with every
            credential-supplying option.
        headers: Extra headers added to every outgoing request.
        endpoint: Overrides the service endpoint.
        api_key: API key sent instead of a token. Detection is skipped.
        token_provider: Provider used for the Authorization header.
            Detection is skipped.
        client_cert_provider: Supplies the client certificate for mTLS.
        detect_opts: Settings for credential detection.
        internal_options: Set by generated client code only.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    disable_telemetry: bool = False
    disable_authentication: bool = False
    headers: dict[str, str] = Field(default_factory=dict)
    endpoint: str | None = None
    api_key: SecretStr | None = None
    token_provider: TokenProvider | None = None
    client_cert_provider: ClientCertProvider | None = None
    detect_opts: DetectOptions | None = None
    internal_options: InternalOptions | None = None

    @property
    def uses_api_key(self) -> bool:
        """True when a non-empty API key is set."""
        return bool(self.api_key and self.api_key.get_secret_value())

    @property
    def has_credentials(self) -> bool:
        """True when any option sets or detects credentials."""
        do = self.detect_opts
        return (
            self.uses_api_key
            or self.token_provider is not None
            or (do is not None and bool(do.credentials_json))
            or (do is not None and do.credentials_file is not None)
        )

    @model_validator(mode="after")
    def _cross_field_validation(self) -> "Options":
        validate_options(self)
        return self


def validate_options(opts: Options | None) -> None:
    """Raise ``ValueError`` if ``opts`` is missing or self-contradictory."""
    if opts is None:
        raise ValueError("httptransport: opts required to be non-None")
    if opts.disable_authentication and opts.has_credentials:
        raise ValueError(
            "httptransport: disable_authentication is incompatible with options "
            "that set or detect credentials"
        )


def resolve_detect_options(opts: Options) -> DetectOptions:
    """Apply internal defaults to a copy of the user's detect options."""
    io = opts.internal_options
    do = clone_detect_options(opts.detect_opts)

    # Scoped JWTs enabled or an explicit audience: allow self-signed JWTs.
    if (io is not None and io.enable_jwt_with_scope) or do.audience:
        do.use_self_signed_jwt = True
    # Only default scopes if the user did not also set an audience.
    if not do.scopes and not do.audience and io is not None and io.default_scopes:
        do.scopes = list(io.default_scopes)
    if not do.scopes and not do.audience and io is not None:
        do.audience = io.default_audience
    return do


class TransportSettings(BaseSettings):
    """Environment switches for client certificates and mTLS endpoints.

    Environment variables:
        - CLOUDAUTH_USE_CLIENT_CERTIFICATE: ``false`` ignores any configured
          client certificate.
        - CLOUDAUTH_USE_MTLS_ENDPOINT: ``auto`` (default), ``never`` or
          ``always``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLOUDAUTH_",
        case_sensitive=False,
        extra="ignore",
    )

    use_client_certificate: bool | None = None
    use_mtls_endpoint: Literal["auto", "never", "always"] = "auto"


def resolve_client_cert_provider(
    opts: Options, settings: TransportSettings | None = None
) -> ClientCertProvider | None:
    """Return the certificate provider to use, honouring the env switch."""
    settings = settings or TransportSettings()
    if settings.use_client_certificate is False:
        return None
    return opts.client_cert_provider


def resolve_endpoint(
    opts: Options,
    uses_client_cert: bool,
    settings: TransportSettings | None = None,
) -> str | None:
    """Pick the endpoint requests are sent to.

    The user's endpoint always wins. Otherwise the mTLS endpoint is chosen when
    forced by ``use_mtls_endpoint=always``, or under ``auto`` when a client
    certificate is in use and the service defines one.
    """
    if opts.endpoint:
        return opts.endpoint
    io = opts.internal_options
    if io is None:
        return None
    settings = settings or TransportSettings()
    mode = settings.use_mtls_endpoint
    if mode == "always":
        return io.default_mtls_endpoint
    if mode == "auto" and uses_client_cert and io.default_mtls_endpoint:
        return io.default_mtls_endpoint
    return io.default_endpoint
