"""In-process diagnostic events emitted by domain code.

Domain functions never log directly. They emit named events on a bus;
observability attaches sinks (JSON logging, metrics) and tests attach collectors.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

EventHandler = Callable[["DiagnosticEvent"], None]


@dataclass(frozen=True)
class DiagnosticEvent:
    name: str
    message: str
    level: int = logging.INFO
    fields: Dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Synchronous fan-out of diagnostic events to subscribed handlers"""

    def __init__(self) -> None:
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that removes it again"""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def emit(self, name: str, message: str, level: int = logging.INFO, **fields: Any) -> DiagnosticEvent:
        event = DiagnosticEvent(name=name, message=message, level=level, fields=fields)
        for handler in list(self._handlers):
            handler(event)
        return event


# Process-wide bus used by domain and service code
diagnostics = EventBus()
