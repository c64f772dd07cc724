"""
Persistent state for keepsync: one JSON document holding a record per provider.
"""

import os
import json
import logging
from typing import Dict, Any, Optional

import arrow
from pystrict import strict

from .exceptions import StoreLoadError, StoreSaveError

__all__ = ["JsonStore", "default_store_path"]

log = logging.getLogger(__name__)

TIMESTAMP_KEY = "last_updated"


def default_store_path() -> str:
    return os.path.expanduser("~/.config/keepsync/config.json")


@strict
class JsonStore:
    """
    Key/value state backed by a single JSON file.

    Each provider owns exactly one top-level key.  The whole map is serialized on every save,
    written to a temporary file next to the target and moved into place.

    Args:
        filename: path of the state file, its directory is created on first save
    """
    def __init__(self, filename: str):
        self._filename = filename
        self.records: Dict[str, Any] = {}
        self.last_updated: Optional[str] = None

    @property
    def filename(self) -> str:
        return self._filename

    def exists(self) -> bool:
        """True if a previous save is present."""
        return os.path.isfile(self._filename)

    def get(self, key: str) -> Any:
        return self.records.get(key)

    def set(self, key: str, record: Any):
        self.records[key] = record

    def load(self):
        """
        Replace the in-memory map with the file contents.

        Raises:
            StoreLoadError: file unreadable or malformed, in-memory state is left untouched
        """
        try:
            with open(self._filename, "r", encoding="utf8") as f:
                doc = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreLoadError("cannot read %s: %s" % (self._filename, e), original_exception=e)

        if not isinstance(doc, dict):
            raise StoreLoadError("%s is not a JSON object" % self._filename)

        stamp = doc.pop(TIMESTAMP_KEY, None)
        if stamp is not None and not isinstance(stamp, str):
            raise StoreLoadError("%s has an invalid %s" % (self._filename, TIMESTAMP_KEY))

        self.records = doc
        self.last_updated = stamp
        log.debug("loaded %s, records %s", self._filename, sorted(self.records))

    def dumps(self) -> str:
        """Deterministic, human-readable serialization of the full map"""
        doc: Dict[str, Any] = dict(self.records)
        doc[TIMESTAMP_KEY] = self.last_updated
        return json.dumps(doc, indent=2, sort_keys=True) + "\n"

    def save(self):
        """
        Stamp and write the full map, replacing the prior contents.

        Raises:
            StoreSaveError: on any write failure, the previous file is left intact
        """
        self.last_updated = arrow.utcnow().isoformat()
        data = self.dumps()
        tmp = self._filename + ".tmp"
        was = os.umask(0o77)
        try:
            dirname = os.path.dirname(self._filename)
            if dirname:
                os.makedirs(dirname, mode=0o700, exist_ok=True)
            with open(tmp, "w", encoding="utf8") as f:
                f.write(data)
            os.replace(tmp, self._filename)
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise StoreSaveError("cannot write %s: %s" % (self._filename, e), original_exception=e)
        finally:
            os.umask(was)
        log.debug("saved %s", self._filename)
