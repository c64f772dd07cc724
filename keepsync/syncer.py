"""
The syncer validates the source file, loads the store, and drives each provider.
"""

import os
import logging
from typing import List

from pystrict import strict

from .exceptions import StoreLoadError, SourceFileError
from .provider import Provider
from .store import JsonStore
from .console import Console

__all__ = ["Syncer", "SOURCE_EXTENSION"]

log = logging.getLogger(__name__)

SOURCE_EXTENSION = ".kdbx"


@strict
class Syncer:
    """
    Orchestrates one run.

    Args:
        store: state shared by the providers, each owns one key
        providers: driven strictly in order, one at a time
        console: operator prompts
        source: absolute path of the database to upload
    """
    def __init__(self, store: JsonStore, providers: List[Provider], console: Console, source: str):
        self._store = store
        self._providers = providers
        self._console = console
        self._source = source

    @staticmethod
    def check_source_path(path: str):
        """
        Raises:
            SourceFileError: path is not absolute, missing, not a file, or not a database
        """
        if not path:
            raise SourceFileError("no database path given")
        if not os.path.isabs(path):
            raise SourceFileError("%s is not an absolute path" % path)
        if not os.path.isfile(path):
            raise SourceFileError("%s does not exist or is not a file" % path)
        if os.path.splitext(path)[1].lower() != SOURCE_EXTENSION:
            raise SourceFileError("%s is not a %s file" % (path, SOURCE_EXTENSION))

    @classmethod
    def validate_source_path(cls, path: str) -> bool:
        try:
            cls.check_source_path(path)
        except SourceFileError as e:
            log.debug("invalid source: %s", e)
            return False
        return True

    def _load(self) -> bool:
        if not self._store.exists():
            log.info("No settings found at %s, first run", self._store.filename)
            return False
        try:
            self._store.load()
        except StoreLoadError as e:
            log.error("Settings unusable, setting up again: %s", e)
            return False
        return True

    def start(self):
        """Run every provider once.  Exits the process only on a bad source path."""
        try:
            self.check_source_path(self._source)
        except SourceFileError as e:
            self._console.confirm_and_exit(str(e))
            return

        if not self._load():
            for prov in self._providers:
                log.debug("bootstrap %s", prov.name)
                prov.bootstrap()
            return

        for prov in self._providers:
            log.debug("use %s", prov.name)
            prov.use()
