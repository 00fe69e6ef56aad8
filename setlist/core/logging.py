"""
JSON logging for the Setlist API.

Every record goes to stdout as one JSON object. Records logged while a request
is in flight carry that request's correlation id, which the observability
middleware sets and clears around each request.

Provides:
- get_logger
- set_correlation_id / get_correlation_id / clear_correlation_id
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from setlist.core.config import get_settings

# Correlation id of the request being served, if any
_cid_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else arrived through `extra=`
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render a record, its `extra=` fields and the correlation id as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        settings = get_settings()
        base: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": settings.OBS_SERVICE_NAME,
            "environment": settings.ENVIRONMENT,
        }

        cid = get_correlation_id()
        if cid:
            base["correlation_id"] = cid

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in base:
                base[key] = value

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False, default=str)


def _configure_root_logger() -> None:
    """Install the JSON handler on the root logger at LOG_LEVEL, once per process."""
    root = logging.getLogger()
    if getattr(root, "_setlist_configured", False):
        return
    root.setLevel(get_settings().LOG_LEVEL.upper())
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers = [handler]
    setattr(root, "_setlist_configured", True)


# PUBLIC_INTERFACE
def get_logger(name: str = "setlist") -> logging.Logger:
    """Return the named logger, installing the JSON handler on first use."""
    _configure_root_logger()
    return logging.getLogger(name)


# PUBLIC_INTERFACE
def set_correlation_id(correlation_id: Optional[str]) -> str:
    """Bind `correlation_id` to the current context, or a fresh uuid4 when it is empty.

    Returns the id now in effect.
    """
    if not correlation_id:
        correlation_id = str(uuid.uuid4())
    _cid_ctx.set(correlation_id)
    return correlation_id


# PUBLIC_INTERFACE
def get_correlation_id() -> Optional[str]:
    """Correlation id bound to the current context, or None outside a request."""
    return _cid_ctx.get()


# PUBLIC_INTERFACE
def clear_correlation_id() -> None:
    """Unbind the correlation id once a request is done."""
    _cid_ctx.set(None)
