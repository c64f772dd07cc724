"""
OAuth helpers for building new providers
"""

from typing import NamedTuple, List, Optional

from .oauth_config import *


class OAuthProviderInfo(NamedTuple):
    """
    Providers set their ._oauth_info protected member to one of these.

    device_url is only used by device-code providers.
    """
    auth_url: Optional[str]
    token_url: str
    scopes: List[str]
    device_url: Optional[str] = None
