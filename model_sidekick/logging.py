import logging
import json
import sys

from .config import get_settings
from .sensitive import SensitiveValue

# Attributes every LogRecord carries; anything else on the record came in via extra=.
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _json_default(obj):
    if isinstance(obj, SensitiveValue):
        return obj.__json__()
    return str(obj)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        d = {
            "lvl": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                d[key] = value
        if record.exc_info:
            d["exc"] = self.formatException(record.exc_info)
        return json.dumps(d, ensure_ascii=False, default=_json_default)


def configure_json_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def configure_logging() -> None:
    """Set up root logging from SIDEKICK_LOG_LEVEL / SIDEKICK_LOG_JSON."""
    s = get_settings()
    if s.LOG_JSON:
        configure_json_logging(s.LOG_LEVEL)
    else:
        logging.basicConfig(level=s.LOG_LEVEL, stream=sys.stdout, force=True)
