"""
Package bootstrap: settings merge, config publishing and session hooks.

``register()`` must run once before ``model_diff`` / ``model_state`` can tell
a just-inserted row apart from one loaded from the database; it listens on
the ``Session`` class so every session (including ``sessionmaker`` products)
is covered.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Union

from sqlalchemy import event
from sqlalchemy.orm import Session

from .config import PUBLISHED_CONFIG_PATH, Settings, configure, get_settings, render_env_file
from .orm import mark_recently_created

logger = logging.getLogger(__name__)


def _flag_recently_created(session: Session, instance: Any) -> None:
    mark_recently_created(instance)


def is_registered() -> bool:
    return event.contains(Session, "pending_to_persistent", _flag_recently_created)


def register(**overrides: Any) -> Settings:
    settings = configure(**overrides) if overrides else get_settings()
    if not is_registered():
        event.listen(Session, "pending_to_persistent", _flag_recently_created)
        logger.debug("provider: session listeners installed")
    return settings


def unregister() -> None:
    if is_registered():
        event.remove(Session, "pending_to_persistent", _flag_recently_created)
        logger.debug("provider: session listeners removed")


def publish_config(path: Union[str, os.PathLike] = PUBLISHED_CONFIG_PATH, force: bool = False) -> Path:
    """Write every setting with its current value to ``path`` as KEY=value lines."""
    target = Path(path)
    if target.exists() and not force:
        raise FileExistsError(f"{target} already exists; pass force=True to overwrite")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_env_file(get_settings()), encoding="utf-8")
    logger.info("provider: published settings", extra={"path": str(target)})
    return target
