from __future__ import annotations

__all__ = ["SidekickError", "InvalidDescriptor"]


class SidekickError(Exception):
    """Base class for errors raised by model_sidekick."""


class InvalidDescriptor(SidekickError, ValueError):
    """Raised when a model argument does not resolve to a mapped SQLAlchemy model."""
