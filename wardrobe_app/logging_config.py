"""Structured logging helpers for the Smart Wardrobe service.

Every record is rendered as one JSON object carrying the correlation id of
the request that produced it and the wardrobe operation it belongs to
(``app:smart_match``, ``lifecycle.record_use``, ...). User scopes are logged
as short fingerprints so one user's activity can be followed without the id
itself reaching the logs; prompts and model replies are reduced to their size.
"""

from __future__ import annotations

import contextlib
import contextvars
import hashlib
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator, Optional

CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)
OPERATION: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("operation", default=None)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}
_SCOPE_KEYS = frozenset({"user_id"})
_TEXT_KEYS = frozenset({"prompt", "reply", "system_instruction"})
_MASK_KEYS = frozenset({"item_name", "email"})
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")
_QUIET_LOGGERS = ("urllib3", "PIL", "httpx", "google")
_HANDLER_FLAG = "_wardrobe_json_handler"


class JsonFormatter(logging.Formatter):
    """Render a record as JSON with correlation and operation metadata."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
            "operation": getattr(record, "operation", None) or OPERATION.get(),
        }
        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS and key not in payload}
        payload.update(redact_for_log(extras))
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Install the JSON handler on the root logger once.

    Later calls only adjust the level when one is given, so handlers added by
    the host (test capture, uvicorn) stay in place.
    """

    root = logging.getLogger()
    installed = any(getattr(handler, _HANDLER_FLAG, False) for handler in root.handlers)
    if installed:
        if level is not None:
            root.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    setattr(handler, _HANDLER_FLAG, True)
    root.addHandler(handler)
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())
    for noisy in _QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


def scope_fingerprint(user_id: str) -> str:
    """Stable, non-reversible tag for a user scope."""

    return "user-" + hashlib.sha256(user_id.encode("utf-8")).hexdigest()[:10]


def _describe_image_ref(value: Any) -> str:
    text = str(value)
    if text.lower().startswith(("http://", "https://")):
        return "[image-url]"
    return f"[image-ref {len(text)} chars]"


def _redact_value(key: str, value: Any) -> Any:
    if value is None:
        return None
    if key in _SCOPE_KEYS:
        return scope_fingerprint(str(value))
    if key in _TEXT_KEYS:
        return f"[{len(str(value))} chars]"
    if key == "image_ref":
        return _describe_image_ref(value)
    if key in _MASK_KEYS:
        return "[redacted]"
    return redact_for_log(value)


def redact_for_log(payload: Any) -> Any:
    """Recursively scrub user scopes, image references, prompt bodies and emails."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        if payload.lower().startswith(("http://", "https://")):
            return "[redacted-url]"
        return _EMAIL_PATTERN.sub("[redacted-email]", payload)
    if isinstance(payload, dict):
        return {key: _redact_value(str(key), value) for key, value in payload.items()}
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(item) for item in payload]
    return str(payload)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Return the active correlation id, adopting ``correlation_id`` or minting one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    new_id = uuid.uuid4().hex
    CORRELATION_ID.set(new_id)
    return new_id


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or ensure_correlation_id())
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit ``event`` with redacted fields and the active correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Tag every record inside the block with operation ``name`` and one correlation id.

    A ``user_id`` attribute is logged once, as a fingerprint, when the
    operation starts.
    """

    operation_token = OPERATION.set(name)
    try:
        with correlation_context(attributes.get("correlation_id")) as correlation_id:
            if "user_id" in attributes:
                logging.getLogger(__name__).debug(
                    "operation_scope",
                    extra={
                        "event": "operation_scope",
                        "correlation_id": correlation_id,
                        "scope": scope_fingerprint(str(attributes["user_id"])),
                    },
                )
            yield correlation_id
    finally:
        OPERATION.reset(operation_token)


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
    "scope_fingerprint",
]
