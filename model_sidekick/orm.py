"""
Helpers that inspect and normalize SQLAlchemy model state.

The typical consumer is an audit trail: after mutating a model (and before
committing, while its attribute history is still available) call
``model_state(obj)`` to get ``(original, changes)`` where every value is a
storage-safe scalar and hidden attributes are wrapped in ``SensitiveValue``.

Functions taking a "model" accept a mapped instance, a mapped class, or an
import string (``"pkg.module:Class"`` / ``"pkg.module.Class"``). Classes and
strings are instantiated with no arguments. ``model_diff`` and
``model_state`` need a live instance.

None of these helpers emit SQL: expired or unloaded attributes are treated
as absent rather than loaded.
"""
from __future__ import annotations

import dataclasses
import enum
import importlib
import json
import logging
from datetime import date, time
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import Integer, inspect
from sqlalchemy.orm import InstanceState, Mapper

from .capabilities import Capability, KeyType, Pivot, capabilities_of
from .config import get_settings
from .errors import InvalidDescriptor
from .sensitive import SensitiveValue

__all__ = [
    "column_name",
    "hidden_attributes",
    "is_pivot_model",
    "mark_recently_created",
    "model_diff",
    "model_exists",
    "model_key_type",
    "model_state",
    "model_was_recently_created",
    "normalize_value",
    "summarize_changes",
    "table_name",
]

logger = logging.getLogger(__name__)

RECENTLY_CREATED = "model_sidekick.recently_created"

_SCALARS = (str, int, float, bool, bytes, type(None))

AttributeSummary = Dict[str, Any]


# ---------------------------------------------------------------------------
# descriptor resolution
# ---------------------------------------------------------------------------


def _import_string(path: str) -> Any:
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise InvalidDescriptor(f"Cannot resolve a model class from {path!r}.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidDescriptor(f"Cannot import module {module_name!r} for model {path!r}.") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise InvalidDescriptor(f"Module {module_name!r} has no attribute {attr!r}.") from exc


def _as_model(model: Any) -> Any:
    if isinstance(model, str):
        model = _import_string(model)
    if isinstance(model, type):
        if not isinstance(inspect(model, raiseerr=False), Mapper):
            raise InvalidDescriptor(f"Given model {model!r} is not a mapped SQLAlchemy class.")
        try:
            model = model()
        except TypeError as exc:
            raise InvalidDescriptor(f"Cannot construct a default instance of {model!r}.") from exc
    _instance_state(model)
    return model


def _instance_state(model: Any) -> InstanceState:
    state = inspect(model, raiseerr=False)
    if not isinstance(state, InstanceState):
        raise InvalidDescriptor(f"Given model {model!r} is not a mapped SQLAlchemy instance.")
    return state


# ---------------------------------------------------------------------------
# classification / lookups
# ---------------------------------------------------------------------------


def table_name(model: Any) -> str:
    """Schema-qualified table name of a model."""
    model = _as_model(model)
    return inspect(model).mapper.local_table.fullname


def column_name(model: Any, attribute: str) -> str:
    """Qualify ``attribute`` with the model's table, e.g. ``users.email``.

    Mapped attribute keys are translated to their column names. Names that are
    already qualified come back untouched.
    """
    model = _as_model(model)
    if "." in attribute:
        return attribute
    mapper = inspect(model).mapper
    column = attribute
    if attribute in mapper.column_attrs:
        column = getattr(mapper.column_attrs[attribute].columns[0], "name", attribute)
    return f"{mapper.local_table.fullname}.{column}"


def model_exists(model: Any) -> bool:
    state = inspect(model, raiseerr=False)
    return isinstance(state, InstanceState) and state.has_identity and not state.was_deleted


def model_key_type(model: Any) -> KeyType:
    model = _as_model(model)
    caps = capabilities_of(type(model))
    if Capability.HAS_ULIDS in caps:
        key_type = KeyType.ULID
    elif Capability.HAS_UUIDS in caps:
        key_type = KeyType.UUID
    else:
        key_type = _declared_key_type(model)
    logger.debug("model_key_type: %s -> %s", type(model).__name__, key_type.value)
    return key_type


def _declared_key_type(model: Any) -> KeyType:
    declared = getattr(model, "__key_type__", None)
    if declared is not None:
        return KeyType(declared)
    primary_key = inspect(model).mapper.primary_key
    if primary_key and all(isinstance(col.type, Integer) for col in primary_key):
        return KeyType.INT
    return KeyType.STRING


def is_pivot_model(model: Any) -> bool:
    model = _as_model(model)
    if isinstance(model, Pivot):
        return True
    return Capability.AS_PIVOT in capabilities_of(type(model))


def hidden_attributes(model: Any) -> Tuple[str, ...]:
    """Attribute names the model always redacts (``__hidden__``)."""
    return tuple(getattr(model, "__hidden__", None) or ())


def _timestamp_attributes(model: Any) -> Tuple[Optional[str], Optional[str]]:
    s = get_settings()
    created = getattr(model, "__created_at__", s.CREATED_AT_COLUMN)
    updated = getattr(model, "__updated_at__", s.UPDATED_AT_COLUMN)
    return created, updated


def mark_recently_created(model: Any) -> None:
    """Flag an instance as inserted during this unit of work."""
    _instance_state(model).info[RECENTLY_CREATED] = True


def model_was_recently_created(model: Any) -> bool:
    return bool(_instance_state(model).info.get(RECENTLY_CREATED))


# ---------------------------------------------------------------------------
# value normalization
# ---------------------------------------------------------------------------


def _json_compatible(value: Any) -> Any:
    if isinstance(value, type):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value):
        return dataclasses.asdict(value)
    to_json = getattr(value, "__json__", None)
    if callable(to_json):
        return to_json()
    return value


def _unwrap(value: Any) -> Any:
    try:
        return _json_compatible(value)
    except Exception as exc:
        logger.debug("normalize_value: cannot serialize %s (%s)", type(value).__name__, exc)
        return value


def _is_backed_enum(value: Any) -> bool:
    return isinstance(value, enum.Enum) and isinstance(value.value, _SCALARS)


def _is_stringable(value: Any) -> bool:
    # Plain scalars are never "rendered"; for everything else an own __str__
    # anywhere below object in the MRO counts (datetime, Decimal, UUID, ...).
    if isinstance(value, _SCALARS):
        return False
    return any("__str__" in vars(klass) for klass in type(value).__mro__[:-1])


def _as_text(value: Any) -> str:
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _encode_nested(obj: Any) -> Any:
    unwrapped = _unwrap(obj)
    if unwrapped is not obj:
        return unwrapped
    if _is_backed_enum(obj):
        return obj.value
    if _is_stringable(obj):
        return _as_text(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    if hasattr(obj, "__dict__"):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def normalize_value(value: Any) -> Any:
    """Collapse ``value`` into something a database column (or log line) can hold.

    Never raises: values that cannot be serialized or JSON encoded are
    returned as-is.
    """
    value = _unwrap(value)

    if _is_backed_enum(value):
        return value.value
    if _is_stringable(value):
        return _as_text(value)
    if not isinstance(value, _SCALARS):
        try:
            return json.dumps(value, default=_encode_nested)
        except (TypeError, ValueError, OverflowError, RecursionError) as exc:
            logger.debug("normalize_value: leaving %s unencoded (%s)", type(value).__name__, exc)
            return value
    return value


def summarize_changes(changes: Mapping[str, Any], hidden: Iterable[str] = ()) -> AttributeSummary:
    hidden = frozenset(hidden)
    return {
        attribute: SensitiveValue(value) if attribute in hidden else normalize_value(value)
        for attribute, value in changes.items()
    }


# ---------------------------------------------------------------------------
# diff / state
# ---------------------------------------------------------------------------


def _is_fresh(model: Any, state: InstanceState) -> bool:
    return not model_exists(model) or bool(state.info.get(RECENTLY_CREATED))


def _current_attributes(state: InstanceState) -> Dict[str, Any]:
    loaded = state.dict
    return {prop.key: loaded[prop.key] for prop in state.mapper.column_attrs if prop.key in loaded}


def _dirty_attributes(state: InstanceState) -> Dict[str, Any]:
    loaded = state.dict
    return {
        prop.key: loaded[prop.key]
        for prop in state.mapper.column_attrs
        if prop.key in loaded and state.attrs[prop.key].history.has_changes()
    }


def _raw_original(state: InstanceState, keys: Iterable[str]) -> Dict[str, Any]:
    original = {}
    for key in keys:
        history = state.attrs[key].history
        if history.deleted:
            original[key] = history.deleted[0]
        elif history.unchanged:
            original[key] = history.unchanged[0]
        else:
            # value was never loaded before being overwritten
            original[key] = None
    return original


def model_diff(model: Any, excludes: Iterable[str] = (), with_timestamps: bool = True) -> AttributeSummary:
    """Summarize what a save of ``model`` writes.

    New (or just inserted) models report every loaded attribute except the
    update timestamp; persisted models report only dirty attributes.
    ``with_timestamps=False`` drops both timestamps. ``excludes`` are redacted
    for this call in addition to the model's ``__hidden__`` attributes.
    """
    state = _instance_state(model)
    created_at, updated_at = _timestamp_attributes(model)
    hidden = set(hidden_attributes(model)).union(excludes)

    if _is_fresh(model, state):
        changes = _current_attributes(state)
        dropped = {updated_at} if with_timestamps else {created_at, updated_at}
    else:
        changes = _dirty_attributes(state)
        dropped = set() if with_timestamps else {created_at, updated_at}

    return summarize_changes(
        {key: value for key, value in changes.items() if key not in dropped},
        hidden=hidden,
    )


def model_state(
    model: Any, excludes: Iterable[str] = (), with_timestamps: bool = True
) -> Tuple[Optional[AttributeSummary], AttributeSummary]:
    """Return ``(original, changes)`` for ``model``.

    ``original`` is ``None`` for new models. Otherwise it holds the committed
    values of exactly the attributes in ``changes``, redacted with the model's
    own ``__hidden__`` list only (``excludes`` does not apply to it).
    """
    excludes = tuple(excludes)
    changes = model_diff(model, excludes, with_timestamps)
    state = _instance_state(model)

    if _is_fresh(model, state):
        return None, changes

    original = summarize_changes(
        _raw_original(state, changes.keys()),
        hidden=hidden_attributes(model),
    )
    return original, changes
