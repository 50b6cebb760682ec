"""Credential detection.

Public API:
- detect_default_credentials() → TokenProvider
- get_credential() → TokenCredential
- DetectOptions (settings), Strategy (enum of detection strategies)
- clone_detect_options()
- scope_from_audience(), authority_from_url() (scope helpers)
"""

from .config import DetectOptions, Strategy, clone_detect_options
from .factory import detect_default_credentials, get_credential
from .scopes import authority_from_url, scope_from_audience

__all__ = [
    "DetectOptions",
    "Strategy",
    "clone_detect_options",
    "detect_default_credentials",
    "get_credential",
    "authority_from_url",
    "scope_from_audience",
]
