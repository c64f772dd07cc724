"""

keepsync uploads a KeePass database to one or more cloud storage providers

External modules:

keepsync.Provider
keepsync.JsonStore
keepsync.Syncer

Example:

import keepsync

store = keepsync.JsonStore(keepsync.default_store_path())
console = keepsync.Console()
source = "/home/me/passwords.kdbx"
syncer = keepsync.Syncer(store, keepsync.create_providers(store, console, source), console, source)
syncer.start()
"""

__version__ = "1.0.0"

# must be imported before other keepsync imports
from .log import logger

# import modules into top level for convenience
from .exceptions import *
from .types import *
from .store import *
from .console import *
from .oauth import OAuthConfig, OAuthToken, OAuthError, OAuthProviderInfo
from .provider import *
from .registry import *
from .providers import *
from .syncer import *
