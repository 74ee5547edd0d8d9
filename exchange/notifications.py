"""Event sinks.

Emission is fire-and-forget: it happens after the operation has committed,
so a sink that raises is logged and otherwise ignored.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import structlog

from exchange.models.events import Event

logger = structlog.get_logger()


@runtime_checkable
class EventSink(Protocol):
    def emit(self, event: Event) -> None: ...


class LoggingEventSink:
    """Writes every event to the structured log."""

    def emit(self, event: Event) -> None:
        fields = event.to_dict()
        logger.info("exchange_event", event_name=fields.pop("event"), **fields)


class RecordingEventSink:
    """Keeps events in memory, in emission order."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def emit(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[Event]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_type: type[Event]) -> list[Event]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class FanoutEventSink:
    """Forwards each event to several sinks."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self.sinks = list(sinks)

    def emit(self, event: Event) -> None:
        for sink in self.sinks:
            publish(sink, event)


def publish(sink: EventSink | None, event: Event) -> None:
    """Deliver an event without letting a sink failure propagate."""
    if sink is None:
        return
    try:
        sink.emit(event)
    except Exception:
        logger.exception("event_sink_failed", event_name=event.name, sink=type(sink).__name__)
