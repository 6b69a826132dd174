from __future__ import annotations

from typing import Any

from .config import get_settings

__all__ = ["SensitiveValue", "unwrap"]


class SensitiveValue:
    """A value that must not show up in logs, reprs or serialized diffs.

    ``str()``, ``repr()`` and ``__json__()`` all render the configured
    redaction mask; ``get_secret_value()`` is the only way back to the
    wrapped value.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any):
        self._value = value

    def get_secret_value(self) -> Any:
        return self._value

    def __json__(self) -> str:
        return get_settings().REDACTION_MASK

    def __str__(self) -> str:
        return get_settings().REDACTION_MASK

    def __repr__(self) -> str:
        return f"SensitiveValue({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SensitiveValue):
            return self._value == other._value
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]


def unwrap(value: Any) -> Any:
    """Return the wrapped value for a SensitiveValue, anything else unchanged."""
    if isinstance(value, SensitiveValue):
        return value.get_secret_value()
    return value
