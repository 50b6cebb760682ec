from __future__ import annotations

import json
from pathlib import Path

import pytest

from cloudauth.detect.config import DetectOptions
from cloudauth.detect.credentials_file import CredentialsType, load_credentials


def test_load__none_without_document() -> None:
    assert load_credentials(DetectOptions()) is None


def test_load__inline_json_wins_over_file(tmp_path: Path) -> None:
    path = tmp_path / "creds.json"
    path.write_text(json.dumps({"type": "managed_identity", "client_id": "file"}))

    opts = DetectOptions(
        credentials_json=json.dumps({"type": "managed_identity", "client_id": "inline"}),
        credentials_file=path,
    )
    creds = load_credentials(opts)

    assert creds is not None
    assert creds.type is CredentialsType.MANAGED_IDENTITY
    assert creds.client_id == "inline"


def test_load__file(tmp_path: Path) -> None:
    path = tmp_path / "creds.json"
    path.write_text(
        json.dumps(
            {
                "type": "client_secret",
                "tenant_id": "t",
                "client_id": "c",
                "client_secret": "s",
                "unknown": "ignored",
            }
        )
    )

    creds = load_credentials(DetectOptions(credentials_file=path))

    assert creds is not None
    assert creds.client_secret is not None
    assert creds.client_secret.get_secret_value() == "s"


@pytest.mark.parametrize(
    ("doc", "missing"),
    [
        ({"type": "client_secret", "tenant_id": "t"}, "client_id, client_secret"),
        ({"type": "client_certificate", "client_id": "c"}, "tenant_id, certificate_path"),
        ({"type": "service_account", "client_id": "c"}, "private_key"),
    ],
)
def test_load__missing_fields_raise(doc: dict, missing: str) -> None:
    opts = DetectOptions(credentials_json=json.dumps(doc))
    with pytest.raises(ValueError, match=missing):
        load_credentials(opts)


def test_load__bad_json_and_unknown_type_raise() -> None:
    with pytest.raises(ValueError):
        load_credentials(DetectOptions(credentials_json="{not json"))
    with pytest.raises(ValueError):
        load_credentials(DetectOptions(credentials_json='{"type": "password"}'))
