"""Event system for the FormShape form runtime.

Every state change of a Form (a value set, a field touched, a field or the
whole form validated, a submission, a reset) is emitted as a typed, immutable
FormEvent. Listeners subscribe per event type or to every event.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from formshape.types import FormEventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single event in a form's lifecycle.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        type: Event type from FormEventType
        form_id: ID of the form that emitted the event
        ts: UTC timestamp when the event occurred
        field: Top-level field the event concerns, if any
        payload: Optional event-specific data (e.g., the validation error)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=FormEventType.FIELD_CHANGED,
        ...     form_id="form_001",
        ...     ts=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ...     field="email",
        ... )
        >>> event.to_dict()["type"]
        'field.changed'
    """
    event_id: str
    type: FormEventType
    form_id: str
    ts: datetime
    field: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Convert a string type to FormEventType."""
        if isinstance(self.type, str) and not isinstance(self.type, FormEventType):
            object.__setattr__(self, "type", FormEventType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "formId": self.form_id,
            "ts": self.ts.isoformat(),
        }
        if self.field is not None:
            result["field"] = self.field
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Single-line JSON, suitable for appending to an event log."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormEvent":
        """Create FormEvent from dictionary (camelCase keys)."""
        ts = datetime.fromisoformat(data["ts"].replace('Z', '+00:00'))
        return cls(
            event_id=data["eventId"],
            type=FormEventType(data["type"]),
            form_id=data["formId"],
            ts=ts,
            field=data.get("field"),
            payload=data.get("payload"),
        )


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously when events are emitted.
"""


class EventEmitter:
    """Dispatches FormEvents to registered listeners.

    - Type-specific subscriptions and wildcard subscriptions
    - Synchronous dispatch in registration order, type-specific first
    - A listener that raises is logged and does not affect the others

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(FormEventType.FORM_RESET, seen.append)
        >>> emitter.listener_count()
        1
    """

    def __init__(self):
        self._listeners: Dict[FormEventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: FormEventType, listener: EventListener) -> None:
        """Subscribe to a specific event type.

        Args:
            event_type: The event type to listen for
            listener: Callable invoked with each matching FormEvent
        """
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types.

        Args:
            listener: Callable invoked with every emitted FormEvent
        """
        self._any_listeners.append(listener)

    def off(self, event_type: FormEventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type.

        Args:
            event_type: The event type the listener was registered for
            listener: The listener to remove. Unknown listeners are ignored.
        """
        listeners = self._listeners.get(event_type)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe from the wildcard subscription.

        Args:
            listener: The listener to remove. Unknown listeners are ignored.
        """
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to type-specific, then wildcard listeners.

        A listener that raises is logged with its traceback; the remaining
        listeners still run and nothing propagates to the caller.

        Args:
            event: The event to dispatch
        """
        for listener in list(self._listeners.get(event.type, ())) + list(self._any_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Listener %r failed handling %s event %s",
                    listener, event.type.value, event.event_id,
                )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[FormEventType] = None) -> int:
        """Count registered listeners.

        Args:
            event_type: Count only listeners for this type. When None, count
                every listener including wildcard ones.

        Returns:
            Number of registered listeners
        """
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(v) for v in self._listeners.values())


__all__ = [
    "FormEvent",
    "FormEventType",
    "EventListener",
    "EventEmitter",
]
