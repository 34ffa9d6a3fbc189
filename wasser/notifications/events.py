"""
Event system

Publish / subscribe hook for costing and pricing events. The calculators
stay pure; CostEngine and PricingService emit through an emitter the
caller hands them.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types"""
    # master engine
    COST_CALCULATED = "cost.calculated"
    COST_INCOMPLETE = "cost.incomplete"

    # listing estimate
    PRICE_CALCULATED = "price.calculated"
    MARGIN_WARNING = "margin.warning"

    # audit / import
    AUDIT_RECORDED = "audit.recorded"
    IMPORT_COMPLETED = "import.completed"

    # errors
    ERROR_OCCURRED = "error.occurred"


@dataclass
class Event:
    """Event payload"""
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    source: str = ""
    correlation_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "data": self.data,
            "timestamp": self.timestamp,
            "source": self.source,
            "correlation_id": self.correlation_id,
        }


EventHandler = Callable[[Event], None]


class EventEmitter:
    """Publish / subscribe"""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._lock = threading.Lock()

    def on(self, event_type: EventType, handler: EventHandler):
        """Subscribe to one event type"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

    def on_all(self, handler: EventHandler):
        """Subscribe to every event"""
        with self._lock:
            self._global_handlers.append(handler)

    def off(self, event_type: EventType, handler: EventHandler):
        """Unsubscribe"""
        with self._lock:
            if event_type in self._handlers:
                try:
                    self._handlers[event_type].remove(handler)
                except ValueError:
                    pass

    def emit(
        self,
        event_type: EventType,
        data: Dict[str, Any] = None,
        source: str = "",
        correlation_id: str = ""
    ) -> Event:
        """Publish an event.

        A failing handler is logged and the remaining handlers still run.
        """
        event = Event(
            event_type=event_type,
            data=data or {},
            source=source,
            correlation_id=correlation_id
        )

        with self._lock:
            handlers = list(self._handlers.get(event_type, [])) + list(self._global_handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed for %s", event_type.value)

        return event

    def handler_count(self, event_type: EventType = None) -> int:
        with self._lock:
            if event_type is None:
                return sum(len(h) for h in self._handlers.values()) + len(self._global_handlers)
            return len(self._handlers.get(event_type, []))
