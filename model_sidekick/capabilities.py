"""
Capability tags that mixins stamp onto mapped classes.

A model opts into a key strategy or pivot behaviour by inheriting one of the
mixins below, e.g.::

    class Membership(Pivot, Base):
        __tablename__ = "memberships"
        ...

    class Invoice(HasUlids, Base):
        __tablename__ = "invoices"
        ...

The union of tags along the MRO is computed once per class and cached.
"""
from __future__ import annotations

import enum
from functools import lru_cache

__all__ = [
    "Capability",
    "KeyType",
    "HasUuids",
    "HasUlids",
    "AsPivot",
    "Pivot",
    "capabilities_of",
]


class Capability(enum.Flag):
    NONE = 0
    HAS_UUIDS = enum.auto()
    HAS_ULIDS = enum.auto()
    AS_PIVOT = enum.auto()


class KeyType(str, enum.Enum):
    INT = "int"
    STRING = "string"
    UUID = "uuid"
    ULID = "ulid"


class HasUuids:
    """Primary key is a UUID string."""

    __capability__ = Capability.HAS_UUIDS


class HasUlids:
    """Primary key is a ULID string."""

    __capability__ = Capability.HAS_ULIDS


class AsPivot:
    """Model is a row of an association (join) table."""

    __capability__ = Capability.AS_PIVOT


class Pivot(AsPivot):
    """Base mixin for dedicated association-table models."""


@lru_cache(maxsize=None)
def capabilities_of(cls: type) -> Capability:
    caps = Capability.NONE
    for klass in cls.__mro__:
        caps |= vars(klass).get("__capability__", Capability.NONE)
    return caps
