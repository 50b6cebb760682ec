"""Authorized HTTP sessions for cloud services.

Public API:
- new_client() → AuthorizedSession
- add_authorization_middleware() (authorize a session you built yourself)
- set_auth_header()
- Options, InternalOptions (settings)
"""

from .client import AuthorizedSession, add_authorization_middleware, new_client
from .options import ClientCertProvider, InternalOptions, Options
from .transport import set_auth_header

__all__ = [
    "AuthorizedSession",
    "ClientCertProvider",
    "InternalOptions",
    "Options",
    "add_authorization_middleware",
    "new_client",
    "set_auth_header",
]
