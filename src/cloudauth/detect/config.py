from __future__ import annotations

from enum import Enum
from pathlib import Path

import requests
from pydantic import (
    AliasChoices,
    Field,
    PrivateAttr,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class Strategy(str, Enum):
    """Supported credential detection strategies."""

    DEFAULT = "default"
    CLI = "cli"
    MANAGED_IDENTITY = "managed_identity"
    CLIENT_SECRET = "client_secret"
    CLIENT_CERTIFICATE = "client_certificate"
    WORKLOAD_IDENTITY = "workload_identity"
    INTERACTIVE_BROWSER = "interactive_browser"


class DetectOptions(BaseSettings):
    """Settings used to detect credentials and request tokens with them.

    Values are read from the environment when not passed explicitly. A
    credentials document (``credentials_json`` or ``credentials_file``) takes
    precedence over the strategy fields.

    Environment variables (aliases supported where noted):
        - SCOPES (JSON list)
        - AUDIENCE
        - USE_SELF_SIGNED_JWT
        - CREDENTIALS_JSON
        - CREDENTIALS_FILE
        - AUTH_STRATEGY (alias: STRATEGY)
        - TENANT_ID
        - CLIENT_ID (alias: MANAGED_IDENTITY_CLIENT_ID)
        - CLIENT_SECRET
        - CLIENT_CERTIFICATE_PATH
        - CLIENT_CERTIFICATE_PASSWORD
        - FEDERATED_TOKEN_FILE
        - AUTHORITY_HOST
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # Field names are listed in every AliasChoices so keyword construction
    # keeps working alongside the environment names.

    scopes: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("scopes", "SCOPES")
    )
    audience: str | None = Field(
        default=None, validation_alias=AliasChoices("audience", "AUDIENCE")
    )
    use_self_signed_jwt: bool = Field(
        default=False,
        validation_alias=AliasChoices("use_self_signed_jwt", "USE_SELF_SIGNED_JWT"),
    )
    credentials_json: str | None = Field(
        default=None,
        validation_alias=AliasChoices("credentials_json", "CREDENTIALS_JSON"),
    )
    credentials_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("credentials_file", "CREDENTIALS_FILE"),
    )
    strategy: Strategy = Field(
        default=Strategy.DEFAULT,
        validation_alias=AliasChoices("strategy", "AUTH_STRATEGY", "STRATEGY"),
    )
    tenant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("tenant_id", "TENANT_ID")
    )
    client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "client_id", "CLIENT_ID", "MANAGED_IDENTITY_CLIENT_ID"
        ),
    )
    client_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("client_secret", "CLIENT_SECRET"),
    )
    certificate_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("certificate_path", "CLIENT_CERTIFICATE_PATH"),
    )
    certificate_password: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "certificate_password", "CLIENT_CERTIFICATE_PASSWORD"
        ),
    )
    federated_token_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("federated_token_file", "FEDERATED_TOKEN_FILE"),
    )
    redirect_uri: str | None = Field(
        default="http://localhost:8400",
        validation_alias=AliasChoices("redirect_uri", "REDIRECT_URI"),
    )
    authority: str | None = Field(
        default=None,
        validation_alias=AliasChoices("authority", "AUTHORITY_HOST"),
    )
    _session: requests.Session | None = PrivateAttr(default=None)

    def __init__(self, *, session: requests.Session | None = None, **data) -> None:
        super().__init__(**data)
        self._session = session

    @property
    def session(self) -> requests.Session | None:
        """Session credentials use to fetch tokens. Never read from env."""
        return self._session

    @property
    def has_explicit_credentials(self) -> bool:
        """True when a credentials document was supplied."""
        return bool(self.credentials_json) or self.credentials_file is not None

    @field_validator("certificate_path", "federated_token_file", "credentials_file")
    @classmethod
    def _ensure_existing_path(cls, v: Path | None) -> Path | None:
        """Ensure configured paths exist if provided."""
        if v is not None and not v.exists():
            raise ValueError(f"Path does not exist: {v}")
        return v

    @model_validator(mode="after")
    def _cross_field_validation(self) -> "DetectOptions":
        """Validate required fields for the selected strategy."""
        if self.has_explicit_credentials:
            # The document carries its own inputs; checked when it is loaded.
            return self
        s = self.strategy
        if s is Strategy.CLIENT_SECRET:
            if not (self.tenant_id and self.client_id and self.client_secret):
                raise ValueError(
                    "client_secret requires tenant_id, client_id, and client_secret."
                )
        elif s is Strategy.CLIENT_CERTIFICATE:
            if not (self.tenant_id and self.client_id and self.certificate_path):
                raise ValueError(
                    "client_certificate requires tenant_id, client_id, and certificate_path."
                )
        elif s is Strategy.WORKLOAD_IDENTITY:
            if not (self.tenant_id and self.client_id and self.federated_token_file):
                raise ValueError(
                    "workload_identity requires tenant_id, client_id, and federated_token_file."
                )
        elif s is Strategy.INTERACTIVE_BROWSER:
            if not (self.tenant_id and self.client_id and self.redirect_uri):
                raise ValueError(
                    "interactive_browser requires tenant_id, client_id and redirect_uri."
                )
        # DEFAULT, CLI, MANAGED_IDENTITY validated at runtime.
        return self


def clone_detect_options(opts: DetectOptions | None) -> DetectOptions:
    """Return a copy of ``opts`` that is safe to modify.

    The copy is shallow apart from ``scopes``, which gets its own list. The
    session, if any, is shared. ``None`` yields empty options; the
    environment is not consulted.
    """
    if opts is None:
        return DetectOptions.model_construct()
    return opts.model_copy(update={"scopes": list(opts.scopes)})
