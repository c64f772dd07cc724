import os
from unittest.mock import patch
from typing import Any, Dict, Type

import arrow
import pytest

from keepsync.store import JsonStore
from keepsync.provider import Provider
from keepsync.oauth import OAuthProviderInfo

from .fake_api import FakeApi
from .fake_console import FakeConsole

__all__ = ["fixture_store", "fixture_source", "fixture_console", "fixture_no_browser", "complete_record", "fake_provider"]


@pytest.fixture(name="store")
def fixture_store(tmp_path):
    return JsonStore(str(tmp_path / "cfg" / "config.json"))


@pytest.fixture(name="source")
def fixture_source(tmp_path):
    path = tmp_path / "db" / "passwords.kdbx"
    os.makedirs(str(path.parent))
    path.write_bytes(b"kdbx-bytes")
    return str(path)


@pytest.fixture(name="console")
def fixture_console():
    return FakeConsole()


@pytest.fixture(name="no_browser", autouse=True)
def fixture_no_browser():
    with patch('webbrowser.open') as wb:
        yield wb


def complete_record(expiry_offset: int = 3600, **overrides) -> Dict[str, Any]:
    """A valid, complete, enabled record whose token expires expiry_offset seconds from now"""
    rec: Dict[str, Any] = {
        "client_id": "cid",
        "client_secret": "csecret",
        "target_location": "disk:/KeePass",
        "access_token": "a0",
        "refresh_token": "r0",
        "token_expiry": arrow.utcnow().int_timestamp + expiry_offset,
        "enabled": True,
    }
    rec.update(overrides)
    return rec


def fake_provider(srv: FakeApi, provider_class: Type[Provider], store, console, source) -> Provider:
    """
    Calling this returns an instance of the provider class with its endpoints pointed at the fake server.
    """
    base_url = srv.uri()
    prov = provider_class(store, console, source)
    info = provider_class._oauth_info       # pylint: disable=protected-access
    prov._oauth_info = OAuthProviderInfo(   # pylint: disable=protected-access
            auth_url=info.auth_url and base_url + "auth",
            token_url=base_url + "token",
            scopes=info.scopes,
            device_url=info.device_url and base_url + "device/code",
            )
    return prov
