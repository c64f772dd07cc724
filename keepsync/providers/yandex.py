"""
Provider "yandex", exports YandexDiskProvider

Authorization-code flow: the operator opens the authorize url and pastes the confirmation code back.
"""
# pylint: disable=missing-docstring

# https://yandex.ru/dev/id/doc/en/codes/code-url
# https://yandex.ru/dev/disk-api/doc/en/reference/upload
# https://yandex.ru/dev/disk-api/doc/en/reference/create-folder

import os
import logging
from typing import Optional

import requests

from keepsync.provider import Provider
from keepsync.exceptions import CloudException, CloudTokenError, CloudDisconnectedError, CloudFileNotFoundError, \
    CloudFileExistsError, CloudTemporaryError
from keepsync.oauth import OAuthConfig, OAuthProviderInfo, OAuthToken
from keepsync.registry import register_provider
from keepsync.utils import debug_args, path_hash

log = logging.getLogger(__name__)


def remote_name(source: str) -> str:
    """
    Name the file gets on the disk: base name plus a hash of the full local path.

    Same-named databases from different folders don't collide, and the name never changes
    between runs, so every upload overwrites the previous one.
    """
    stem, ext = os.path.splitext(os.path.basename(source))
    return "%s-%s%s" % (stem, path_hash(source), ext)


@register_provider
class YandexDiskProvider(Provider):
    name = "yandex"
    title = "Yandex.Disk"
    token_lifetime_cap = 24 * 3600
    target_prompt = "Yandex.Disk folder (e.g. app:/ or disk:/KeePass)"

    _base_url = "https://cloud-api.yandex.net/v1/disk/"
    _oauth_info = OAuthProviderInfo(
        auth_url="https://oauth.yandex.ru/authorize",
        token_url="https://oauth.yandex.ru/token",
        scopes=[],
    )

    # names of args are compat with requests module
    def _api(self, action, path=None, *, url=None, params=None, data=None, headers=None, auth=True):  # pylint: disable=arguments-differ
        assert path or url

        if not url:
            url = self._base_url + path.lstrip("/")

        head = {}
        if auth:
            head["Authorization"] = "OAuth " + self.profile.access_token
        if headers:
            head.update(headers)

        log.debug("api %s %s %s", action, url, debug_args(params))
        try:
            res = requests.request(action, url, params=params, data=data, headers=head)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise CloudDisconnectedError("cannot connect %s" % e, original_exception=e)

        if res.status_code >= 300:
            self._raise_converted_error(res)

        return res

    @staticmethod
    def _raise_converted_error(res):
        status = res.status_code
        try:
            dat = res.json()
            if not isinstance(dat, dict):
                dat = {}
            code = dat.get("error", "")
            msg = dat.get("description") or dat.get("message") or code
        except ValueError:
            code = ""
            msg = res.text or res.reason

        msg = "%s %s" % (status, msg)
        if status == 401:
            raise CloudTokenError(msg)
        if status == 404:
            raise CloudFileNotFoundError(msg)
        if status == 409:
            raise CloudFileExistsError(msg, code=code)
        if status == 429 or status >= 500:
            raise CloudTemporaryError(msg)
        raise CloudException(msg)

    def authorize(self, oauth_config: OAuthConfig) -> OAuthToken:
        url = oauth_config.start_auth(self._oauth_info.auth_url, scope=self._oauth_info.scopes or None)
        log.info("Open %s, allow access and copy the confirmation code", url)
        code = self._ask("Confirmation code:")
        return oauth_config.wait_auth(self._oauth_info.token_url, code)

    def remote_path(self, source: Optional[str] = None) -> str:
        folder = self.profile.target_location.rstrip("/")
        return folder + "/" + remote_name(source or self._source)

    def _ensure_folder(self, folder: str):
        # "disk:/a/b" -> create "disk:/a", then "disk:/a/b"
        prefix, sep, rest = folder.partition(":/")
        if not sep:
            prefix, rest = "", folder
        parts = [p for p in rest.split("/") if p]
        current = prefix + sep if sep else ""
        for part in parts:
            current = current.rstrip("/") + "/" + part if current else part
            try:
                self._api("put", "resources", params={"path": current})
                log.debug("created folder %s", current)
            except CloudFileExistsError as e:
                if e.code not in ("", "DiskPathPointsToExistentDirectoryError"):
                    raise

    def upload_file(self):
        self._ensure_folder(self.profile.target_location)

        path = self.remote_path()
        res = self._api("get", "resources/upload", params={"path": path, "overwrite": "true"})
        try:
            link = res.json()
            href = link["href"]
            method = link.get("method") or "PUT"
        except (ValueError, KeyError, TypeError):
            raise CloudException("no upload link for %s" % path)

        log.debug("uploading %s to %s", self._source, path)
        with open(self._source, "rb") as f:
            self._api(method.lower(), url=href, data=f, auth=False)
