"""Structured Logging — JSON/text formatters and setup for the LinkCard API.

Invariants:
    - Every record carries timestamp, level, logger, service and message
    - Known extras (client_id, error_code, cache_key, risk_level, path) are
      rendered in both formats when present
    - Client ids are masked before they are written: IPv4 keeps its /24,
      IPv6 its /64; anything else is written as-is
    - setup_logging() is re-entrant: a second call replaces its own handler

Design Decisions:
    - Stdlib logging with a small JSON formatter, no logging dependency
    - Masking happens in the formatter, so services log the raw id they admit on
"""

import ipaddress
import json
import logging
from datetime import datetime, timezone

SERVICE_NAME = "linkcard-api"
EXTRA_FIELDS = ("client_id", "error_code", "cache_key", "risk_level", "path")

# Third-party loggers that are chatty at DEBUG/INFO.
_QUIET_LOGGERS = ("PIL", "limits")


def mask_client_id(client_id: str) -> str:
    try:
        address = ipaddress.ip_address(client_id)
    except ValueError:
        return client_id
    prefix = 24 if address.version == 4 else 64
    network = ipaddress.ip_network(f"{address}/{prefix}", strict=False)
    return str(network)


def _extras(record: logging.LogRecord) -> dict:
    extras = {}
    for key in EXTRA_FIELDS:
        val = record.__dict__.get(key)
        if val is None:
            continue
        extras[key] = mask_client_id(val) if key == "client_id" else val
    return extras


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable line with extras appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if not extras:
            return line
        # exception text, if any, stays on the lines after the first
        head, sep, tail = line.partition("\n")
        pairs = " ".join(f"{k}={v}" for k, v in extras.items())
        return f"{head} [{pairs}]{sep}{tail}"


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the LinkCard handler on the root logger."""
    for existing in list(logging.root.handlers):
        if getattr(existing, "linkcard", False):
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.linkcard = True
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
