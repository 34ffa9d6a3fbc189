"""events.py tests"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasser.notifications.events import (
    EventType,
    Event,
    EventEmitter,
)


class TestEvent:
    """Event"""

    def test_event_creation(self):
        event = Event(event_type=EventType.COST_CALCULATED, data={"product": "Шкаф"})

        assert event.event_type == EventType.COST_CALCULATED
        assert event.data["product"] == "Шкаф"
        assert event.timestamp is not None

    def test_event_to_dict(self):
        event = Event(
            event_type=EventType.ERROR_OCCURRED,
            data={"error": "test"},
            source="test"
        )

        d = event.to_dict()

        assert d["event_type"] == "error.occurred"
        assert d["data"]["error"] == "test"
        assert d["source"] == "test"

    def test_event_values(self):
        assert EventType.COST_INCOMPLETE.value == "cost.incomplete"
        assert EventType.PRICE_CALCULATED.value == "price.calculated"
        assert EventType.MARGIN_WARNING.value == "margin.warning"
        assert EventType.AUDIT_RECORDED.value == "audit.recorded"
        assert EventType.IMPORT_COMPLETED.value == "import.completed"


class TestEventEmitter:
    """EventEmitter"""

    def setup_method(self):
        self.emitter = EventEmitter()
        self.received_events = []

    def test_subscribe_and_emit(self):
        def handler(event: Event):
            self.received_events.append(event)

        self.emitter.on(EventType.COST_CALCULATED, handler)
        returned = self.emitter.emit(EventType.COST_CALCULATED, {"total_cost": 1624})

        assert len(self.received_events) == 1
        assert self.received_events[0].data["total_cost"] == 1624
        assert returned is self.received_events[0]

    def test_only_matching_type(self):
        self.emitter.on(EventType.COST_CALCULATED, self.received_events.append)
        self.emitter.emit(EventType.PRICE_CALCULATED)

        assert self.received_events == []

    def test_multiple_handlers(self):
        count = {"value": 0}

        def handler1(event):
            count["value"] += 1

        def handler2(event):
            count["value"] += 10

        self.emitter.on(EventType.PRICE_CALCULATED, handler1)
        self.emitter.on(EventType.PRICE_CALCULATED, handler2)
        self.emitter.emit(EventType.PRICE_CALCULATED)

        assert count["value"] == 11

    def test_global_handler(self):
        self.emitter.on_all(self.received_events.append)
        self.emitter.emit(EventType.COST_CALCULATED)
        self.emitter.emit(EventType.MARGIN_WARNING)

        assert len(self.received_events) == 2

    def test_unsubscribe(self):
        def handler(event):
            self.received_events.append(event)

        self.emitter.on(EventType.ERROR_OCCURRED, handler)
        self.emitter.emit(EventType.ERROR_OCCURRED)

        self.emitter.off(EventType.ERROR_OCCURRED, handler)
        self.emitter.emit(EventType.ERROR_OCCURRED)

        assert len(self.received_events) == 1

    def test_unsubscribe_unknown_handler(self):
        self.emitter.off(EventType.ERROR_OCCURRED, print)
        assert self.emitter.handler_count() == 0

    def test_emit_with_source(self):
        self.emitter.on(EventType.AUDIT_RECORDED, self.received_events.append)
        self.emitter.emit(EventType.AUDIT_RECORDED, {"key": "calc_p1"}, source="audit")

        assert self.received_events[0].source == "audit"

    def test_handler_error_isolation(self):
        """A failing handler does not stop the others or the caller"""
        count = {"value": 0}

        def failing_handler(event):
            raise RuntimeError("Test error")

        def working_handler(event):
            count["value"] += 1

        self.emitter.on(EventType.COST_CALCULATED, failing_handler)
        self.emitter.on(EventType.COST_CALCULATED, working_handler)
        self.emitter.emit(EventType.COST_CALCULATED)

        assert count["value"] == 1

    def test_handler_count(self):
        self.emitter.on(EventType.COST_CALCULATED, print)
        self.emitter.on(EventType.COST_INCOMPLETE, print)
        self.emitter.on_all(print)

        assert self.emitter.handler_count(EventType.COST_CALCULATED) == 1
        assert self.emitter.handler_count() == 3
