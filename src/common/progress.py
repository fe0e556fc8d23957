"""Progress events shared by enrichment and history streaming.

An operation reports itself as an ordered sequence of ``ProgressEvent`` values.
Transports render them however they like; ``event_to_sse`` renders the
server-sent-events framing the web client consumes, where a ``complete`` or
``error`` event always closes the stream.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

ProgressStatus = Literal["start", "success", "error", "info"]

COMPLETE_STEP = "complete"
ERROR_STEP = "error"


@dataclass(frozen=True)
class ProgressEvent:
    """One step/status update of a running operation."""

    step: str
    status: ProgressStatus
    message: str
    data: dict[str, Any] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.step in (COMPLETE_STEP, ERROR_STEP)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "step": self.step,
            "status": self.status,
            "message": self.message,
        }
        if self.data is not None:
            payload["data"] = self.data
        return payload


ProgressCallback = Callable[[ProgressEvent], None]


def complete_event(data: dict[str, Any], message: str = "Done") -> ProgressEvent:
    """Terminal event carrying the operation's result."""
    return ProgressEvent(COMPLETE_STEP, "success", message, data)


def error_event(message: str) -> ProgressEvent:
    """Terminal event for an operation that failed; the message is kept as is."""
    return ProgressEvent(ERROR_STEP, "error", message)


def format_sse(event: str, payload: Any) -> str:
    """Frame one server-sent event.

    Example:
        >>> format_sse("progress", {"step": "prs"})
        'event: progress\\ndata: {"step": "prs"}\\n\\n'
    """
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


def event_to_sse(event: ProgressEvent) -> str:
    """Frame a ProgressEvent using the web client's event names.

    ``complete`` sends ``{"data": result}``, ``error`` sends ``{"message": ...}``
    and every other step is a ``progress`` event with the full event body.
    """
    if event.step == COMPLETE_STEP:
        return format_sse(COMPLETE_STEP, {"data": event.data or {}})
    if event.step == ERROR_STEP:
        return format_sse(ERROR_STEP, {"message": event.message})
    return format_sse("progress", event.to_dict())
