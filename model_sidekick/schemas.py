from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, Field, field_serializer
from sqlalchemy import inspect

from .orm import model_state, table_name
from .sensitive import SensitiveValue


def _mask(summary: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if summary is None:
        return None
    return {k: (v.__json__() if isinstance(v, SensitiveValue) else v) for k, v in summary.items()}


class ModelStateSnapshot(BaseModel):
    """JSON-safe view of ``model_state`` for audit sinks."""

    table: str
    key: Optional[Any] = Field(None, description="primary key identity, None while unsaved")
    original: Optional[Dict[str, Any]] = None
    changes: Dict[str, Any] = Field(default_factory=dict)

    @field_serializer("original", "changes")
    def serialize_summary(self, value: Optional[Dict[str, Any]]):
        return _mask(value)

    @classmethod
    def capture(
        cls, model: Any, excludes: Iterable[str] = (), with_timestamps: bool = True
    ) -> "ModelStateSnapshot":
        original, changes = model_state(model, excludes, with_timestamps)
        identity = inspect(model).identity
        if identity is not None and len(identity) == 1:
            identity = identity[0]
        return cls(
            table=table_name(model),
            key=list(identity) if isinstance(identity, tuple) else identity,
            original=original,
            changes=changes,
        )
