import os
import time
import logging
from typing import Optional, List, NamedTuple
import webbrowser

import requests
from oauthlib.oauth2 import OAuth2Error
from requests_oauthlib import OAuth2Session

from keepsync.utils import debug_sig

__all__ = ["OAuthConfig", "OAuthToken", "OAuthError", "DeviceAuth", "DEVICE_GRANT_TYPE"]

log = logging.getLogger(__name__)

OAuthError = OAuth2Error

DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"


class OAuthToken:       # pylint: disable=too-few-public-methods
    """
    Just a class representation of the oauth2 standard token.

    See: https://www.oauth.com/oauth2-servers/access-tokens/access-token-response/
    """
    def __init__(self, data=None, **kwargs):
        if data is None:
            data = kwargs
        self.access_token = data["access_token"]
        self.token_type = data.get("token_type")
        self.expires_in = data.get("expires_in")
        self.refresh_token = data.get("refresh_token")
        self.scope = data.get("scope")

    def __repr__(self):
        return "OAuthToken(access=%s, refresh=%s, expires_in=%s)" % (
            debug_sig(self.access_token), debug_sig(self.refresh_token), self.expires_in)


class DeviceAuth(NamedTuple):
    """What the backend hands out at the start of a device-code flow."""
    device_code: str
    user_code: str
    verification_url: str
    expires_in: int
    interval: int


class OAuthConfig:
    """
    Client identity plus the token exchanges a provider needs.

    Args:
        app_id: also known as "client id", provided for your application by the cloud provider
        app_secret: also known as "client secret", provided for your application by the cloud provider
        open_browser: pop a browser on the authorization/verification url
    """
    def __init__(self, *, app_id: str, app_secret: str, open_browser: bool = True):
        self.app_id = app_id
        self.app_secret = app_secret
        self.open_browser = open_browser
        self.authorization_url: Optional[str] = None
        self._session: Optional[OAuth2Session] = None

    def _check_app(self):
        if not self.app_id:
            raise OAuthError("app id missing")
        if not self.app_secret:
            raise OAuthError("app secret missing")

    def _open(self, url):
        if self.open_browser:
            try:
                webbrowser.open(url)
            except webbrowser.Error as e:
                log.debug("no browser: %s", e)

    # authorization-code flow, the operator pastes the code back

    def start_auth(self, auth_url, scope: Optional[List[str]] = None, **kwargs) -> str:
        """
        Build the authorize url for the operator to visit.  Follow with wait_auth(code).
        """
        self._check_app()
        if auth_url is None:
            raise OAuthError("auth url bad")
        os.environ["OAUTHLIB_RELAX_TOKEN_SCOPE"] = "1"
        self._session = OAuth2Session(client_id=self.app_id, scope=scope, **kwargs)
        self.authorization_url, _unused_state = self._session.authorization_url(auth_url)
        log.debug("start oauth url %s, appid %s", self.authorization_url, self.app_id)
        self._open(self.authorization_url)
        return self.authorization_url

    def wait_auth(self, token_url, code: str, **kwargs) -> OAuthToken:
        """
        Exchange the pasted authorization code.  Returns an OAuthToken object, or raises a OAuthError
        """
        assert self._session
        if not code:
            raise OAuthError("authorization code missing")
        token = OAuthToken(self._session.fetch_token(token_url,
                                                     include_client_id=True,
                                                     client_secret=self.app_secret,
                                                     code=code,
                                                     timeout=60,
                                                     **kwargs))
        log.debug("exchanged code: %s", token)
        return token

    def refresh(self, refresh_url, token, scope: Optional[List[str]] = None, **extra) -> OAuthToken:
        """
        Given a refresh url (often the same as token_url), will refresh the token.

        Backends that don't rotate the refresh token leave it out of the response, the old one is kept.
        """
        self._check_app()
        os.environ["OAUTHLIB_RELAX_TOKEN_SCOPE"] = "1"
        if isinstance(token, OAuthToken):
            token = token.refresh_token
        if not token:
            raise OAuthError("refresh token missing")
        if not self._session:
            self._session = OAuth2Session(client_id=self.app_id, scope=scope)
        extra["client_id"] = self.app_id
        extra["client_secret"] = self.app_secret
        extra["timeout"] = 60
        new = OAuthToken(self._session.refresh_token(refresh_url, refresh_token=token, **extra))
        if not new.refresh_token:
            new.refresh_token = token
        log.debug("refreshed: %s", new)
        return new

    # device-code flow, the operator confirms in a separate browser session

    def start_device_auth(self, device_url, scope: Optional[List[str]] = None) -> DeviceAuth:
        """
        Request a device code and user code.
        """
        self._check_app()
        data = {"client_id": self.app_id}
        if scope:
            data["scope"] = " ".join(scope)
        res = requests.post(device_url, data=data, timeout=60)
        info = _json_or_error(res)
        try:
            dev = DeviceAuth(device_code=info["device_code"],
                             user_code=info["user_code"],
                             verification_url=info.get("verification_url") or info["verification_uri"],
                             expires_in=int(info.get("expires_in", 1800)),
                             interval=int(info.get("interval", 5)))
        except (KeyError, TypeError, ValueError) as e:
            raise OAuthError("bad device code response: %s" % e)
        log.debug("device auth url %s, expires in %s", dev.verification_url, dev.expires_in)
        self._open(dev.verification_url)
        return dev

    def wait_device_auth(self, token_url, device: DeviceAuth) -> OAuthToken:
        """
        Poll the token endpoint until the operator approves, denies, or the device code expires.
        """
        deadline = time.monotonic() + device.expires_in
        interval = device.interval
        data = {
            "client_id": self.app_id,
            "client_secret": self.app_secret,
            "device_code": device.device_code,
            "grant_type": DEVICE_GRANT_TYPE,
        }
        while True:
            res = requests.post(token_url, data=data, timeout=60)
            try:
                info = res.json()
            except ValueError:
                info = {}
            error = info.get("error") if isinstance(info, dict) else None
            if res.ok and not error:
                if "access_token" not in info:
                    raise OAuthError("no access token in device response")
                token = OAuthToken(info)
                log.debug("device authorized: %s", token)
                return token
            if error == "slow_down":
                interval += 5
            elif error != "authorization_pending":
                raise OAuthError(description=info.get("error_description") or error or res.text,
                                 status_code=res.status_code)
            if time.monotonic() + interval > deadline:
                raise OAuthError("device code expired")
            log.debug("waiting for device approval, %s", error)
            time.sleep(interval)


def _json_or_error(res):
    try:
        info = res.json()
    except ValueError:
        info = None
    if not res.ok or not isinstance(info, dict):
        desc = res.text
        if isinstance(info, dict):
            desc = info.get("error_description") or info.get("error") or desc
        raise OAuthError(description=desc, status_code=res.status_code)
    return info
