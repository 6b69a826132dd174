"""
Public import surface for model_sidekick.

Usage:
    from model_sidekick import model_state, register

    register()
    user.name = "Ann"
    original, changes = model_state(user)
"""

from model_sidekick.capabilities import (
    AsPivot,
    Capability,
    HasUlids,
    HasUuids,
    KeyType,
    Pivot,
    capabilities_of,
)
from model_sidekick.errors import InvalidDescriptor, SidekickError
from model_sidekick.orm import (
    column_name,
    hidden_attributes,
    is_pivot_model,
    mark_recently_created,
    model_diff,
    model_exists,
    model_key_type,
    model_state,
    model_was_recently_created,
    normalize_value,
    summarize_changes,
    table_name,
)
from model_sidekick.provider import publish_config, register, unregister
from model_sidekick.schemas import ModelStateSnapshot
from model_sidekick.sensitive import SensitiveValue

__version__ = "0.1.0"

__all__ = [
    "AsPivot",
    "Capability",
    "HasUlids",
    "HasUuids",
    "InvalidDescriptor",
    "KeyType",
    "ModelStateSnapshot",
    "Pivot",
    "SensitiveValue",
    "SidekickError",
    "capabilities_of",
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
    "publish_config",
    "register",
    "summarize_changes",
    "table_name",
    "unregister",
]
