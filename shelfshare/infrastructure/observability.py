"""Structured Logging — JSON lines in production, readable key=value lines in development.

Invariants:
    - Every record carries timestamp, level, logger, service and message
    - Lending ids (user_id, book_id, loan_id, review_id) and action/error_code/path
      are surfaced when passed via `extra=`
    - Tokens and passwords are never passed as extra fields, so they never reach a sink
    - setup_logging replaces root handlers: calling it twice does not double output

Design Decisions:
    - Stdlib logging with a custom Formatter: no extra dependency for a single JSON sink
    - SQLAlchemy engine logger pinned to WARNING unless the app itself runs at DEBUG
"""

import json
import logging
from datetime import datetime, timezone

SERVICE_NAME = "shelfshare-api"

_CONTEXT_FIELDS: tuple[str, ...] = (
    "user_id", "book_id", "loan_id", "review_id", "action", "error_code", "path",
)


def _context_of(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in _CONTEXT_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
            **_context_of(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text with lending ids appended, e.g. `... Loan requested [loan_id=3 user_id=2]`."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context_of(record)
        if not context:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        return f"{line} [{pairs}]"


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single stream handler on the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextTextFormatter())

    root_level = getattr(logging, level.upper(), logging.INFO)
    logging.root.handlers = [handler]
    logging.root.setLevel(root_level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if root_level <= logging.DEBUG else logging.WARNING,
    )
