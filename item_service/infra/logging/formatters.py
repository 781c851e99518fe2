"""JSON Lines log formatter.

Each record is rendered as one JSON object per line. Values passed with
``extra=`` become top-level keys, so outbox and cache logs can be filtered by
``event_type``, ``message_id`` or ``key`` without parsing the message text.
"""

from __future__ import annotations

from datetime import UTC, datetime
import json
import logging
from typing import Any

from opentelemetry import trace

# Attributes every LogRecord carries; anything else on a record came from extra=
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

DEFAULT_FIELDS = {
    "level": "levelname",
    "logger": "name",
    "message": "message",
}


def _trace_context() -> dict[str, str]:
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return {}
    return {"trace_id": format(ctx.trace_id, "032x"), "span_id": format(ctx.span_id, "016x")}


def _utc_timestamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, tz=UTC).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON.

    Example output:
        {"level": "WARNING", "logger": "item_service.infra.events.outbox.processor",
         "message": "Failed to publish outbox message, will retry",
         "timestamp": "2025-01-01T00:00:00.123Z", "service": "item-service",
         "message_id": 7, "event_type": "ItemCreatedV1", "attempts": 1}
    """

    def __init__(
        self,
        fields: dict[str, str] | None = None,
        static: dict[str, Any] | None = None,
    ) -> None:
        """Create the formatter.

        Args:
            fields: Output key to LogRecord attribute mapping.
            static: Constant fields added to every line, e.g. the service name.
        """
        super().__init__()
        self.fields = fields or DEFAULT_FIELDS
        self.static = static or {}

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()

        payload: dict[str, Any] = {key: getattr(record, attr, None) for key, attr in self.fields.items()}
        payload["timestamp"] = _utc_timestamp(record.created)
        payload.update(_trace_context())

        # Tracebacks are escaped so a record never spans lines
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info).replace("\n", "\\n")
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info).replace("\n", "\\n")

        payload.update(self.static)
        payload.update(
            (name, value)
            for name, value in vars(record).items()
            if name not in _STANDARD_ATTRS and name not in payload
        )
        return json.dumps(payload, ensure_ascii=False, default=str)
