"""
Module exports the 'Provider' abstract base class.

A provider drives one cloud backend through the same lifecycle:

    bootstrap -> install -> (validate -> refresh -> upload) on every later run

and owns exactly one record in the store, keyed by its name.
"""
from abc import ABC, abstractmethod
import os
import logging
from typing import Any, Type, Optional

import arrow
import requests

from .types import Profile, record_is_valid, record_is_complete
from .exceptions import CloudException, StoreSaveError
from .oauth import OAuthConfig, OAuthProviderInfo, OAuthToken, OAuthError
from .store import JsonStore
from .console import Console
from .log import SUCCESS, TIP

log = logging.getLogger(__name__)

__all__ = ["Provider", "PROVIDER_ERRORS"]

# anything a single provider may fail with, none of these leave the provider
PROVIDER_ERRORS = (CloudException, OAuthError, requests.RequestException, OSError)

YES = ("y", "yes")
NO = ("n", "no")


class Provider(ABC):
    """
    Cloud storage backend.

    Override this to implement a provider capable of being driven by the syncer.

    Implementors supply the authorization handshake, and the upload protocol.
    Token refresh defaults to a standard refresh-token exchange.
    """

    # pylint: disable=multiple-statements
    name: str = None                          ; """Provider name, and key of its record in the store"""
    title: str = None                         ; """Name shown to the operator"""
    profile_type: Type[Profile] = Profile     ; """Record schema"""
    token_lifetime_cap: int = 24 * 3600       ; """Tokens are treated as expired after this many seconds, at most"""
    target_prompt: str = "Remote folder"      ; """Prompt for target_location"""
    _oauth_info: OAuthProviderInfo = None     ; """OAuth endpoints and scopes"""
    # pylint: enable=multiple-statements

    def __init__(self, store: JsonStore, console: Console, source: str):
        self._store = store
        self._console = console
        self._source = source
        self.profile: Profile = self.profile_type()

    @property
    def source(self) -> str:
        """Absolute path of the file being synced"""
        return self._source

    @abstractmethod
    def _api(self, *args, **kwargs):
        """Central function that wraps calls to the provider's api.

        Use this function on all calls that involve a network connection to the provider.

        Implementations should catch provider specific errors and turn them into CloudException types.
        """
        ...

    @abstractmethod
    def authorize(self, oauth_config: OAuthConfig) -> OAuthToken:
        """Run the backend's authorization handshake, interactively.

        Raises:
            OAuthError, CloudException on failure
        """
        ...

    @abstractmethod
    def upload_file(self):
        """Transfer the source file with the current tokens.

        Raises:
            CloudException, OSError on failure
        """
        ...

    def oauth_config(self, profile: Optional[Profile] = None) -> OAuthConfig:
        profile = profile or self.profile
        return OAuthConfig(app_id=profile.client_id, app_secret=profile.client_secret)

    def refresh_token(self) -> OAuthToken:
        """Exchange the stored refresh token for a new access token."""
        return self.oauth_config().refresh(self._oauth_info.token_url, self.profile.refresh_token,
                                           scope=self._oauth_info.scopes)

    # record checks

    def is_record_valid(self, record: Any) -> bool:
        """Every field the provider expects is present and has the right shape."""
        return record_is_valid(self.profile_type, record)

    def is_record_complete(self, record: Any) -> bool:
        """Every required field is filled in."""
        return record_is_complete(self.profile_type, record)

    # lifecycle

    def use(self):
        """Steady-state entry point: validate the record, refresh, upload.  Falls back to bootstrap()."""
        record = self._store.get(self.name)

        if record is None:
            log.info("%s is not configured yet", self.title)
            self.bootstrap()
            return

        if not self.is_record_valid(record):
            log.warning("%s settings are invalid, setting up again", self.title)
            self.bootstrap()
            return

        if not record["enabled"]:
            log.info("%s is disabled, skipped", self.title)
            return

        if not self.is_record_complete(record):
            log.warning("%s settings are incomplete, setting up again", self.title)
            self.bootstrap()
            return

        self.profile = self.profile_type.from_record(record)

        if not self.refresh_auth():
            log.warning("%s authorization expired, setting up again", self.title)
            self.bootstrap()
            return

        self.upload()

    def bootstrap(self):
        """Ask whether to use this provider.  'no' is remembered so we don't ask every run."""
        question = "Sync %s to %s? [y/n]" % (os.path.basename(self._source), self.title)
        try:
            while True:
                answer = self._console.prompt(question).strip().lower()
                if answer in YES:
                    self.install()
                    return
                if answer in NO:
                    break
        except EOFError:
            # stdin closed, e.g. run from a trigger: the record is left as it was
            log.warning("No operator input, %s left unsynced this run", self.title)
            return

        self.profile = self.profile_type()
        self._persist()
        log.info("%s disabled, delete its entry from %s to be asked again", self.title, self._store.filename)

    def install(self):
        """Interactive first-time setup: identity, authorization, initial upload."""
        log.info("Setting up %s", self.title)

        profile = self.profile_type()
        profile.client_id = self._ask("%s client id:" % self.title)
        profile.client_secret = self._ask("%s client secret:" % self.title)
        profile.target_location = self._ask("%s:" % self.target_prompt)

        try:
            token = self.authorize(self.oauth_config(profile))
        except PROVIDER_ERRORS as e:
            log.error("%s authorization failed: %s", self.title, e)
            return

        self._carry_over(profile)
        profile.enabled = True
        self._apply_token(profile, token)
        self.profile = profile
        self._persist()

        log.log(SUCCESS, "%s is set up", self.title)
        log.log(TIP, "Later runs will refresh %s authorization without asking", self.title)
        self.upload()

    def refresh_auth(self) -> bool:
        """Refresh tokens if they expired.  Returns False if the backend refused."""
        now = arrow.utcnow().int_timestamp
        if self.profile.token_expiry > now:
            log.debug("%s token valid for %ss", self.title, self.profile.token_expiry - now)
            return True

        try:
            token = self.refresh_token()
        except PROVIDER_ERRORS as e:
            log.error("%s token refresh failed: %s", self.title, e)
            return False

        self._apply_token(self.profile, token)
        self._persist()
        log.debug("%s token refreshed", self.title)
        return True

    def upload(self) -> bool:
        """Upload the source file.  Failures are logged, never raised."""
        try:
            self.upload_file()
        except PROVIDER_ERRORS as e:
            log.error("%s upload failed: %s", self.title, e)
            return False
        log.log(SUCCESS, "%s uploaded to %s", os.path.basename(self._source), self.title)
        return True

    # helpers

    def _ask(self, text: str) -> str:
        # blocks until the operator gives a non-empty answer
        while True:
            value = self._console.prompt(text).strip()
            if value:
                return value
            log.warning("A value is required")

    def _carry_over(self, profile: Profile):
        """Keep state from the previous record across a re-install.  Override as needed."""

    def _apply_token(self, profile: Profile, token: OAuthToken):
        try:
            expires_in = int(token.expires_in or self.token_lifetime_cap)
        except (TypeError, ValueError):
            expires_in = self.token_lifetime_cap
        profile.access_token = token.access_token
        profile.refresh_token = token.refresh_token or profile.refresh_token
        profile.token_expiry = arrow.utcnow().int_timestamp + min(expires_in, self.token_lifetime_cap)

    def _persist(self):
        self._store.set(self.name, self.profile.to_record())
        try:
            self._store.save()
        except StoreSaveError as e:
            log.error("%s settings were not saved: %s", self.title, e)
