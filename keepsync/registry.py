"""
The registry maintains the ordered map of provider classes by name.

Providers are driven in registration order.
"""

from typing import List, Type, Dict
from keepsync.provider import Provider
from keepsync.store import JsonStore
from keepsync.console import Console

__all__ = ["create_provider", "create_providers", "get_provider", "known_providers", "register_provider"]


providers: Dict[str, Type[Provider]] = {}


def register_provider(prov: Type[Provider]):
    """Add a provider class to the registry, usable as a class decorator"""
    providers[prov.name] = prov
    return prov


def get_provider(name: str) -> Type[Provider]:
    """Get a provider class with the given name"""
    if name not in providers:
        raise RuntimeError("%s not a registered provider" % name)
    return providers[name]


def create_provider(name: str, *args, **kws) -> Provider:
    """Construct a provider instance"""
    return get_provider(name)(*args, **kws)


def create_providers(store: JsonStore, console: Console, source: str) -> List[Provider]:
    """One instance of every registered provider, in registration order"""
    return [create_provider(name, store, console, source) for name in known_providers()]


def known_providers() -> List[str]:
    """List all known provider names, in registration order."""
    return list(providers.keys())
