"""Log output for the expense API.

Two knobs, both read at ``setup_logging()`` time:

* ``EM_LOG_FORMAT=json`` switches the root handler to one JSON object per
  line. Anything else gives plain text.
* ``EM_LOG_LEVEL`` takes a level name. Unknown names fall back to ``INFO``.

Authorization decisions are logged with ``user_id``, ``role``, ``feature``
and ``outcome`` extras; the request middleware adds the HTTP fields. In JSON
mode those extras become top-level keys, so a denied request can be traced
from its access line to the audit line by ``request_id``.
"""

from __future__ import annotations

import logging
import os
import traceback
from typing import Any

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"
_JSON_DATEFMT = "%Y-%m-%dT%H:%M:%S"

_HTTP_FIELDS = ("request_id", "path", "method", "status_code", "duration_ms")
_ACCESS_FIELDS = ("user_id", "role", "feature", "outcome")


def _is_json_mode() -> bool:
    return os.environ.get("EM_LOG_FORMAT", "text").lower() == "json"


def _get_log_level() -> int:
    level = getattr(logging, os.environ.get("EM_LOG_LEVEL", "INFO").upper(), None)
    return level if isinstance(level, int) else logging.INFO


def _request_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Collect the HTTP and access-decision fields set on *record*."""
    found: dict[str, Any] = {}
    for key in _HTTP_FIELDS + _ACCESS_FIELDS:
        value = getattr(record, key, None)
        if value is not None:
            found[key] = value
    return found


class StructuredJsonFormatter(logging.Formatter):
    """Render records as JSON through ``pythonjsonlogger``.

    Request and access-decision extras are lifted onto the record before
    serialising. An exception becomes a ``traceback`` list of lines.
    """

    def __init__(self) -> None:
        super().__init__()
        from pythonjsonlogger.json import JsonFormatter

        self._json = JsonFormatter(fmt=_JSON_FIELDS, datefmt=_JSON_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        fields = _request_extras(record)
        if record.exc_info and record.exc_info[1] is not None:
            fields["traceback"] = traceback.format_exception(*record.exc_info)
            # JsonFormatter would otherwise add exc_info as a text blob too.
            record.exc_info = None
            record.exc_text = None
        record.__dict__.update(fields)
        return self._json.format(record)


def setup_logging() -> None:
    """Install a single stream handler on the root logger."""
    level = _get_log_level()
    formatter = StructuredJsonFormatter() if _is_json_mode() else logging.Formatter(_TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    # Calling this again (app reload, test fixtures) replaces rather than stacks.
    root.handlers[:] = [handler]


def log_startup_info() -> None:
    import expensemanager
    from expensemanager.rbac import PERMISSIONS

    logging.getLogger("expensemanager").info(
        "Expense Manager started",
        extra={
            "version": expensemanager.__version__,
            "feature_count": len(PERMISSIONS),
            "rate_limit_config": os.environ.get("EM_RATE_LIMIT", "100/minute"),
        },
    )
