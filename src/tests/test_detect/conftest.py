from __future__ import annotations

import importlib
import sys
from types import ModuleType
from typing import Any, Iterator

import pytest


@pytest.fixture()
def stub_azure(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Inject minimal azure.* stubs so tests never talk to Azure.

    Returns:
        dict[str, Any]: Exposes stub classes for assertion (e.g., call kwargs).
    """
    mod_azure = ModuleType("azure")
    mod_identity = ModuleType("azure.identity")
    mod_core = ModuleType("azure.core")
    mod_core_creds = ModuleType("azure.core.credentials")
    mod_pipeline = ModuleType("azure.core.pipeline")
    mod_pipeline_transport = ModuleType("azure.core.pipeline.transport")

    class TokenCredential:  # pragma: no cover - trivial stub
        """Base stub compatible with Azure credential typing."""

    mod_core_creds.TokenCredential = TokenCredential

    def _make(name: str, base: type = TokenCredential) -> type:
        class _C(base):  # type: ignore[misc, valid-type]
            last_args: tuple[Any, ...] | None = None
            last_kwargs: dict[str, Any] | None = None
            call_count: int = 0

            def __init__(self, *args: Any, **kwargs: Any) -> None:
                type(self).last_args = args
                type(self).last_kwargs = dict(kwargs)
                type(self).call_count += 1
                self.kwargs = dict(kwargs)

        _C.__name__ = name
        _C.__qualname__ = name
        return _C

    # Create recorders for each credential type the factory uses
    names = [
        "DefaultAzureCredential",
        "AzureCliCredential",
        "ManagedIdentityCredential",
        "ClientSecretCredential",
        "CertificateCredential",
        "ClientAssertionCredential",
        "WorkloadIdentityCredential",
        "InteractiveBrowserCredential",
    ]
    recorders = {n: _make(n) for n in names}
    for n, cls in recorders.items():
        setattr(mod_identity, n, cls)

    recorders["RequestsTransport"] = _make("RequestsTransport", object)
    mod_pipeline_transport.RequestsTransport = recorders["RequestsTransport"]

    # Wire up module tree
    mod_azure.identity = mod_identity  # type: ignore[attr-defined]
    mod_azure.core = mod_core  # type: ignore[attr-defined]
    mod_core.credentials = mod_core_creds  # type: ignore[attr-defined]
    mod_core.pipeline = mod_pipeline  # type: ignore[attr-defined]
    mod_pipeline.transport = mod_pipeline_transport  # type: ignore[attr-defined]

    monkeypatch.setitem(sys.modules, "azure", mod_azure)
    monkeypatch.setitem(sys.modules, "azure.identity", mod_identity)
    monkeypatch.setitem(sys.modules, "azure.core", mod_core)
    monkeypatch.setitem(sys.modules, "azure.core.credentials", mod_core_creds)
    monkeypatch.setitem(sys.modules, "azure.core.pipeline", mod_pipeline)
    monkeypatch.setitem(
        sys.modules, "azure.core.pipeline.transport", mod_pipeline_transport
    )

    return recorders


@pytest.fixture()
def reload_factory(
    stub_azure: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> Iterator[ModuleType]:
    """Yield the cloudauth.detect.factory module reloaded against stubs.

    On teardown the stubs are removed and the module is reloaded against the
    real azure packages again.

    Args:
        stub_azure: Ensures stubs are installed first.
    """
    import cloudauth.detect.factory as factory

    yield importlib.reload(factory)
    monkeypatch.undo()
    importlib.reload(factory)
