import json
import logging
import datetime
from dataclasses import asdict, is_dataclass
from enum import Enum

# Attributes every LogRecord has; anything else came in through `extra=`
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def to_serializable(obj):
    """
    Helper to make log context JSON-safe.
    Dataclasses become dicts, enums their value, anything unknown its str().
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_serializable(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_serializable(v) for v in obj]
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)


class JsonLogFormatter(logging.Formatter):
    """
    One JSON object per line, with the contextual fields
    (account, old/new OU, flag states...) at the top level.
    """
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.datetime.fromtimestamp(record.created, datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                entry[key] = to_serializable(value)

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry)


def configure_logging(debug: bool = False, json_output: bool = False) -> logging.Logger:
    """Sets up the root logger for CLI and Lambda use and returns the package logger."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    if not root.handlers:
        root.addHandler(logging.StreamHandler())

    formatter = JsonLogFormatter() if json_output else logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    for handler in root.handlers:
        handler.setFormatter(formatter)

    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
    return logging.getLogger("poolwarden")
