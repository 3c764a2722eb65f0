"""Log output for Material Guard.

Library modules log through ``logging.getLogger(__name__)`` and attach the
tier, record count, recovery source or loss reason via ``extra=``. This
module renders those records, either as text with a trailing context block
or as JSON lines, for the CLI and for hosts that want the same output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"

# extra= fields the package attaches, in output order
CONTEXT_FIELDS = ("tier", "count", "source", "reason")


def record_context(record: logging.LogRecord) -> dict:
    """Context fields present on a record, in CONTEXT_FIELDS order."""
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class ContextFormatter(logging.Formatter):
    """Text formatter appending ``[tier=primary count=12]`` when context is present."""

    def __init__(self):
        super().__init__(TEXT_FORMAT, DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        rendered = " ".join(f"{k}={v}" for k, v in context.items())
        first, sep, rest = line.partition("\n")
        return f"{first} [{rendered}]{sep}{rest}"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the context fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(record_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_root_logger(
    level: Union[int, str] = logging.INFO,
    json_output: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Route all logging to stderr (and optionally a file) with the package formatters.

    Replaces any handlers already on the root logger.

    Args:
        level: Logging level (name or number)
        json_output: Emit JSON lines instead of text
        log_file: Optional path to a log file; parent directories are created
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    formatter = JsonFormatter() if json_output else ContextFormatter()
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
