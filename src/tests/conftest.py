from __future__ import annotations

import os
from typing import Iterator

import pytest

# Variables read by DetectOptions / TransportSettings.
_SETTINGS_ENV = {
    "SCOPES",
    "AUDIENCE",
    "USE_SELF_SIGNED_JWT",
    "CREDENTIALS_JSON",
    "CREDENTIALS_FILE",
    "AUTH_STRATEGY",
    "STRATEGY",
    "TENANT_ID",
    "CLIENT_ID",
    "MANAGED_IDENTITY_CLIENT_ID",
    "CLIENT_SECRET",
    "CLIENT_CERTIFICATE_PATH",
    "CLIENT_CERTIFICATE_PASSWORD",
    "FEDERATED_TOKEN_FILE",
    "REDIRECT_URI",
    "AUTHORITY_HOST",
}


@pytest.fixture(autouse=True)
def clear_settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove settings variables to prevent cross-test leakage.

    Yields:
        Iterator[None]: Context manager semantics for pytest.
    """
    for k in list(os.environ.keys()):
        if k.upper() in _SETTINGS_ENV or k.upper().startswith("CLOUDAUTH_"):
            monkeypatch.delenv(k, raising=False)
    yield
