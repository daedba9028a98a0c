"""Logging setup for loan-engine.

Ledger events pass their identifiers as ``extra={"extra": {...}}``. The
text formatter prefixes the loan and receipt numbers to the message; the
JSON formatter emits every extra field as a top-level key.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Identifiers shown in front of text log lines, in this order
LEDGER_CONTEXT_FIELDS = ("loan_number", "receipt_number")

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(ledger_context)s%(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _ledger_extra(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "extra", None) or {}


class LedgerFormatter(logging.Formatter):
    """Text formatter that tags ledger events with their identifiers.

    A payment logged with a loan and receipt number renders as::

        2024-02-01 09:00:00 | INFO     | loan_engine.store.ledger | [LN-... RCP-...] Payment ...
    """

    def __init__(self, fmt: str = TEXT_FORMAT, datefmt: str = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        extra = _ledger_extra(record)
        ids = [str(extra[name]) for name in LEDGER_CONTEXT_FIELDS if extra.get(name)]
        record.ledger_context = f"[{' '.join(ids)}] " if ids else ""
        return super().format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, ledger extras flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_ledger_extra(record))

        # Decimal amounts serialize as strings
        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Configure logging for loan-engine.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names
        fall back to INFO.
    format_type : str
        "standard" for ``LedgerFormatter`` text lines, "json" for
        ``JsonFormatter``.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JsonFormatter() if format_type == "json" else LedgerFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("loan_engine").setLevel(log_level)

    # Faker logs every provider lookup at DEBUG
    logging.getLogger("faker").setLevel(logging.WARNING)
