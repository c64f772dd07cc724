"""
The ubuquitous "misc utilities" file
"""

import os
import logging
from base64 import b64encode
from typing import Any, List, Dict

import xxhash

log = logging.getLogger(__name__)


MAX_DEBUG_STR = 64


def _debug_arg(val: Any):
    ret: Any = val
    if isinstance(val, dict):
        r: Dict[Any, Any] = {}
        for k, v in val.items():
            r[k] = _debug_arg(v)
        ret = r
    elif isinstance(val, str):
        if len(val) > MAX_DEBUG_STR:
            ret = val[0:MAX_DEBUG_STR - 3] + "..."
    elif isinstance(val, bytes):
        if len(val) > MAX_DEBUG_STR:
            ret = val[0:MAX_DEBUG_STR - 3] + b"..."
    elif isinstance(val, (list, tuple)):
        rlist: List[Any] = []
        for v in val:
            rlist.append(_debug_arg(v))
        ret = rlist
    return ret


def debug_args(*stuff: Any):
    """
    Use this when logging stuff that might be too long.  It truncates them.
    """
    if log.isEnabledFor(logging.DEBUG):
        r = _debug_arg(stuff)
        if len(r) == 1:
            return r[0]
        return tuple(r)
    if len(stuff) == 1:
        return "N/A"
    return tuple(["N/A"] * len(stuff))


def debug_sig(t: Any, size: int = 3) -> str:
    """
    Useful for converting tokens and ids into short digestible nonces
    """
    if not t:
        return "0"
    th = xxhash.xxh64()
    th.update(str(t).encode("utf8"))
    return b64encode(th.digest()).decode("utf8")[0:size]


def path_hash(path: str) -> str:
    """
    Stable hex digest of a local path.  Depends on the path only, never on the file contents.
    """
    return xxhash.xxh64(os.path.normpath(path).encode("utf8")).hexdigest()
