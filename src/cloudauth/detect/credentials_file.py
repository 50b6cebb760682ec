"""Loader for credentials documents (``credentials_json`` / ``credentials_file``)."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, SecretStr, model_validator

from .config import DetectOptions

logger = logging.getLogger(__name__)


class CredentialsType(str, Enum):
    CLIENT_SECRET = "client_secret"
    CLIENT_CERTIFICATE = "client_certificate"
    WORKLOAD_IDENTITY = "workload_identity"
    MANAGED_IDENTITY = "managed_identity"
    SERVICE_ACCOUNT = "service_account"


_REQUIRED: dict[CredentialsType, tuple[str, ...]] = {
    CredentialsType.CLIENT_SECRET: ("tenant_id", "client_id", "client_secret"),
    CredentialsType.CLIENT_CERTIFICATE: ("tenant_id", "client_id", "certificate_path"),
    CredentialsType.WORKLOAD_IDENTITY: (
        "tenant_id",
        "client_id",
        "federated_token_file",
    ),
    CredentialsType.MANAGED_IDENTITY: (),
    CredentialsType.SERVICE_ACCOUNT: ("client_id", "private_key"),
}


class CredentialsFile(BaseModel):
    """A parsed credentials document.

    Only the fields relevant to ``type`` need to be present, e.g.::

        {"type": "client_secret", "tenant_id": "...", "client_id": "...",
         "client_secret": "..."}
    """

    model_config = ConfigDict(extra="ignore")

    type: CredentialsType
    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: SecretStr | None = None
    certificate_path: Path | None = None
    certificate_password: SecretStr | None = None
    federated_token_file: Path | None = None
    private_key: SecretStr | None = None
    private_key_id: str | None = None
    authority: str | None = None

    @model_validator(mode="after")
    def _required_fields(self) -> "CredentialsFile":
        missing = [name for name in _REQUIRED[self.type] if not getattr(self, name)]
        if missing:
            raise ValueError(
                f"{self.type.value} credentials require: {', '.join(missing)}."
            )
        return self


def load_credentials(opts: DetectOptions) -> CredentialsFile | None:
    """Return the credentials document configured on ``opts``, if any.

    ``credentials_json`` wins over ``credentials_file``.

    Raises:
        ValueError: If the document is not valid JSON or misses fields.
        OSError: If the file cannot be read.
    """
    if opts.credentials_json:
        logger.debug("Loading credentials from inline JSON")
        return CredentialsFile.model_validate_json(opts.credentials_json)
    if opts.credentials_file is not None:
        logger.debug("Loading credentials from %s", opts.credentials_file)
        return CredentialsFile.model_validate_json(
            Path(opts.credentials_file).read_text(encoding="utf-8")
        )
    return None
