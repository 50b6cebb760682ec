from typing import Final
from urllib.parse import urlparse

DEFAULT_SCOPE_SUFFIX: Final[str] = "/.default"
DEFAULT_AUTHORITY: Final[str] = "https://login.microsoftonline.com"


def authority_from_url(url: str) -> str:
    """Return the URL authority (scheme + host).

    Args:
        url: Absolute URL (e.g., "https://storage.example.com/container").

    Returns:
        The "<scheme>://<host>" portion of the URL.

    Raises:
        ValueError: If ``url`` is not absolute or lacks a host.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("url must be an absolute URL")
    return f"{parsed.scheme}://{parsed.netloc}"


def scope_from_audience(audience: str) -> str:
    """Turn an audience into the resource's default scope.

    URLs are reduced to their authority; anything else (an application ID
    URI such as ``api://my-app``) is used as is.
    """
    if "://" in audience and not audience.startswith("api://"):
        return f"{authority_from_url(audience)}{DEFAULT_SCOPE_SUFFIX}"
    return f"{audience.rstrip('/')}{DEFAULT_SCOPE_SUFFIX}"


def token_endpoint(tenant_id: str, authority: str | None = None) -> str:
    """Return the v2 token endpoint for ``tenant_id``."""
    authority = authority or DEFAULT_AUTHORITY
    # azure-identity accepts bare hosts such as "login.microsoftonline.us"
    if "://" not in authority:
        authority = f"https://{authority}"
    host = authority_from_url(authority)
    return f"{host}/{tenant_id}/oauth2/v2.0/token"
