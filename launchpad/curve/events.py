"""
Per-instance event log.

Events are appended while an operation runs; the log takes part in the
operation's atomic scope, so records from an aborted operation never
become visible.
"""

from typing import Iterator, TypeVar

from ..models.base import CurveEventType
from ..models.records import CurveEvent

EventT = TypeVar("EventT", bound=CurveEvent)


class EventLog:
    """Append-only sequence of curve events."""

    def __init__(self) -> None:
        self._events: list[CurveEvent] = []

    def append(self, event: CurveEvent) -> None:
        self._events.append(event)

    def __iter__(self) -> Iterator[CurveEvent]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def all(self) -> list[CurveEvent]:
        return list(self._events)

    def of_type(self, event_type: CurveEventType) -> list[CurveEvent]:
        return [e for e in self._events if e.event_type == event_type]

    def last(self, kind: type[EventT]) -> EventT | None:
        """Most recent event of the given record class, if any."""
        for event in reversed(self._events):
            if isinstance(event, kind):
                return event
        return None

    def snapshot(self) -> int:
        return len(self._events)

    def restore(self, snapshot: int) -> None:
        del self._events[snapshot:]
