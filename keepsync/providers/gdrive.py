"""
Provider "gdrive", exports GDriveProvider

Device-code flow: the operator enters a short user code at the verification url,
no code is pasted back.  Uploads use the resumable protocol, and remember the file id
so later runs update the same remote file.
"""
# pylint: disable=missing-docstring

# https://developers.google.com/identity/protocols/oauth2/limited-input-device
# https://developers.google.com/drive/api/guides/manage-uploads#resumable

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import requests

from keepsync.provider import Provider
from keepsync.types import Profile
from keepsync.exceptions import CloudException, CloudTokenError, CloudDisconnectedError, CloudFileNotFoundError, \
    CloudTemporaryError
from keepsync.oauth import OAuthConfig, OAuthProviderInfo, OAuthToken
from keepsync.registry import register_provider
from keepsync.utils import debug_args, debug_sig

log = logging.getLogger(__name__)


@dataclass
class GDriveProfile(Profile):
    known_remote_files: Dict[str, str] = field(default_factory=dict)    # local path -> drive file id


@register_provider
class GDriveProvider(Provider):
    name = "gdrive"
    title = "Google Drive"
    profile_type = GDriveProfile
    token_lifetime_cap = 3600
    target_prompt = "Google Drive folder id"

    _upload_url = "https://www.googleapis.com/upload/drive/v3/files"
    _oauth_info = OAuthProviderInfo(
        auth_url=None,
        token_url="https://oauth2.googleapis.com/token",
        scopes=["https://www.googleapis.com/auth/drive.file"],
        device_url="https://oauth2.googleapis.com/device/code",
    )
    _io_mime_type = "application/octet-stream"

    profile: GDriveProfile

    # names of args are compat with requests module
    def _api(self, action, url, *, params=None, data=None, json=None, headers=None, auth=True):  # pylint: disable=arguments-differ, redefined-outer-name
        head = {}
        if auth:
            head["Authorization"] = "Bearer " + self.profile.access_token
        if headers:
            head.update(headers)

        log.debug("api %s %s %s", action, url, debug_args(params, json))
        try:
            res = requests.request(action, url, params=params, data=data, json=json, headers=head)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise CloudDisconnectedError("cannot connect %s" % e, original_exception=e)

        if res.status_code >= 300:
            self._raise_converted_error(res)

        return res

    @staticmethod
    def _raise_converted_error(res):
        status = res.status_code
        reason = ""
        try:
            dat = res.json()
            err = dat.get("error") if isinstance(dat, dict) else None
            if isinstance(err, dict):
                msg = err.get("message", "")
                errors = err.get("errors") or [{}]
                reason = errors[0].get("reason", "")
            else:
                msg = str(err or res.text)
        except (ValueError, AttributeError, IndexError):
            msg = res.text or res.reason

        msg = "%s %s" % (status, msg)
        if status == 401:
            raise CloudTokenError(msg, code=reason)
        if status == 404:
            raise CloudFileNotFoundError(msg, code=reason)
        if status == 429 or status >= 500:
            raise CloudTemporaryError(msg, code=reason)
        if status == 403 and reason in ('userRateLimitExceeded', 'rateLimitExceeded'):
            raise CloudTemporaryError(msg, code=reason)
        raise CloudException(msg, code=reason)

    def authorize(self, oauth_config: OAuthConfig) -> OAuthToken:
        device = oauth_config.start_device_auth(self._oauth_info.device_url, scope=self._oauth_info.scopes)
        log.info("Open %s and enter the code %s", device.verification_url, device.user_code)
        self._console.prompt("Press enter once you have allowed access.")
        return oauth_config.wait_device_auth(self._oauth_info.token_url, device)

    def _carry_over(self, profile: Profile):
        # ids are only good for the same folder
        if isinstance(profile, GDriveProfile) and profile.target_location == self.profile.target_location:
            profile.known_remote_files = dict(getattr(self.profile, "known_remote_files", {}))

    def _open_session(self, oid: Optional[str]) -> str:
        headers = {"X-Upload-Content-Type": self._io_mime_type,
                   "X-Upload-Content-Length": str(os.path.getsize(self._source))}
        params = {"uploadType": "resumable", "fields": "id"}
        if oid:
            res = self._api("patch", self._upload_url + "/" + oid, params=params, json={}, headers=headers)
        else:
            metadata = {"name": os.path.basename(self._source), "parents": [self.profile.target_location]}
            res = self._api("post", self._upload_url, params=params, json=metadata, headers=headers)

        location = res.headers.get("Location")
        if not location:
            raise CloudException("no upload session returned")
        return location

    def _send(self, location: str) -> str:
        with open(self._source, "rb") as f:
            res = self._api("put", location, data=f, headers={"Content-Type": self._io_mime_type})
        try:
            return res.json()["id"]
        except (ValueError, KeyError, TypeError):
            raise CloudException("unknown response from drive on upload")

    def upload_file(self):
        oid = self.profile.known_remote_files.get(self._source)

        if oid:
            try:
                location = self._open_session(oid)
            except CloudFileNotFoundError:
                log.warning("%s is gone from the drive, uploading a new copy", debug_sig(oid))
                self.profile.known_remote_files.pop(self._source, None)
                oid = None
                location = self._open_session(None)
        else:
            location = self._open_session(None)

        new_oid = self._send(location)
        log.debug("drive file id %s", debug_sig(new_oid))

        if new_oid != oid:
            self.profile.known_remote_files[self._source] = new_oid
            self._persist()
