from collections import defaultdict
import logging
from typing import Callable, DefaultDict, List, Type, Union

from lowborn.domain.events import DayStarted, NightBegan, NightResolved, WeekCompleted

RunEvent = Union[DayStarted, NightBegan, NightResolved, WeekCompleted]
RunEventHandler = Callable[[RunEvent], None]

RUN_EVENT_TYPES: tuple = (DayStarted, NightBegan, NightResolved, WeekCompleted)


def event_context(event: RunEvent) -> dict:
    """Seed plus whichever of day/week the event carries, for log records."""
    context = {"event_type": type(event).__name__, "seed": event.seed}
    for field_name in ("day", "week"):
        if hasattr(event, field_name):
            context[field_name] = getattr(event, field_name)
    return context


class EventBus:
    """Synchronous publish/subscribe for run lifecycle events.

    Only the lifecycle event classes in ``RUN_EVENT_TYPES`` can be
    subscribed to. Handlers run in (priority, subscription order). A failing
    handler is logged with the run's seed and day, then skipped so the rest
    still see the event.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[object], List[tuple[int, int, RunEventHandler]]] = defaultdict(list)
        self._sequence = 0
        self._errors: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: RunEventHandler, *, priority: int = 100) -> None:
        if event_type not in RUN_EVENT_TYPES:
            raise TypeError(f"{getattr(event_type, '__name__', event_type)!s} is not a run lifecycle event.")
        rows = self._handlers[event_type]
        rows.append((int(priority), self._sequence, handler))
        rows.sort(key=lambda row: (row[0], row[1]))
        self._sequence += 1

    def subscribe_all(self, handler: RunEventHandler, *, priority: int = 100) -> None:
        for event_type in RUN_EVENT_TYPES:
            self.subscribe(event_type, handler, priority=priority)

    def unsubscribe(self, event_type: Type[object], handler: RunEventHandler) -> bool:
        rows = self._handlers.get(event_type, [])
        kept = [row for row in rows if row[2] is not handler]
        self._handlers[event_type] = kept
        return len(kept) != len(rows)

    def handler_count(self, event_type: Type[object]) -> int:
        return len(self._handlers.get(event_type, []))

    def publish(self, event: RunEvent) -> int:
        """Deliver ``event``; returns how many handlers completed."""
        self._errors = []
        delivered = 0
        for priority, _, handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
                delivered += 1
            except Exception as exc:
                self._errors.append(exc)
                self._logger.exception(
                    "Run event handler failed and was isolated",
                    extra={
                        **event_context(event),
                        "handler": getattr(handler, "__qualname__", repr(handler)),
                        "priority": priority,
                    },
                )
        return delivered

    def last_publish_errors(self) -> List[Exception]:
        return list(self._errors)
