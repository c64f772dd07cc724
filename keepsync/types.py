"""
Base types for keepsync
"""
import typing
from typing import Any, Dict, Mapping, Type
from dataclasses import dataclass, fields, asdict

__all__ = ["Profile", "record_is_valid", "record_is_complete", "MAP_SHAPE"]

MAP_SHAPE = dict


@dataclass
class Profile:  # pylint: disable=too-many-instance-attributes
    """
    Credentials and settings one provider keeps in its record.

    Providers with extra state derive from this class and add fields.  A default-constructed
    profile is the "configured off" placeholder: every field empty and enabled False.
    """
    client_id: str = ""                    # also known as "app id"
    client_secret: str = ""
    target_location: str = ""              # remote folder (path or id, provider specific)
    access_token: str = ""
    refresh_token: str = ""
    token_expiry: int = 0                  # absolute unix time, 0 for none
    enabled: bool = False

    @classmethod
    def schema(cls) -> Dict[str, Type]:
        """Map of field name to the primitive shape stored on disk"""
        ret = {}
        for f in fields(cls):
            ret[f.name] = typing.get_origin(f.type) or f.type
        return ret

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Profile":
        """Working copy of a valid record, surplus keys are ignored"""
        known = {}
        for name, shape in cls.schema().items():
            value = record[name]
            known[name] = dict(value) if shape is MAP_SHAPE else value
        return cls(**known)

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)


def _has_shape(value: Any, shape: Type) -> bool:
    # bool is an int, but an int field holding True is drift, not data
    if shape is bool:
        return type(value) is bool
    if shape is int:
        return isinstance(value, int) and type(value) is not bool
    if shape is MAP_SHAPE:
        return isinstance(value, dict) and all(isinstance(k, str) and isinstance(v, str) for k, v in value.items())
    return isinstance(value, shape)


def record_is_valid(profile_type: Type[Profile], record: Any) -> bool:
    """True if every field of the profile schema is present and has the expected shape."""
    if not isinstance(record, dict):
        return False
    for name, shape in profile_type.schema().items():
        if name not in record:
            return False
        if not _has_shape(record[name], shape):
            return False
    return True


def record_is_complete(profile_type: Type[Profile], record: Mapping[str, Any]) -> bool:
    """True if every required field is non-empty.  'enabled' and map caches are not required."""
    for name, shape in profile_type.schema().items():
        if name == "enabled" or shape is MAP_SHAPE:
            continue
        if not record.get(name):
            return False
    return True
