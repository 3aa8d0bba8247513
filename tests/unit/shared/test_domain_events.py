"""Unit tests for domain event primitives and the in-memory bus."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.orders.repositories.django_repository import _serialize_event_payload
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class TestDomainEvent:
    def test_event_name_is_class_name(self):
        event = OrderCreated(aggregate_id=uuid4())
        assert event.event_name == "OrderCreated"

    def test_events_are_immutable(self):
        event = OrderCreated(aggregate_id=uuid4())
        with pytest.raises(AttributeError):
            event.order_number = "changed"

    def test_subclasses_are_registered(self):
        assert DomainEvent.registry["OrderStatusChanged"] is OrderStatusChanged

    def test_from_payload_rebuilds_serialized_event(self):
        original = OrderCreated(
            aggregate_id=uuid4(),
            order_number="ORD-20260101-ABC123",
            total_amount="27.00",
            coupon_code="BEMVINDO10",
        )
        payload = _serialize_event_payload(original)

        rebuilt = DomainEvent.from_payload("OrderCreated", payload)

        assert rebuilt == original

    def test_from_payload_unknown_type_raises(self):
        with pytest.raises(KeyError):
            DomainEvent.from_payload("NoSuchEvent", {"aggregate_id": str(uuid4())})


class _Recorder:
    def __init__(self):
        self.events = []

    def handle(self, event):
        self.events.append(event)


class TestInMemoryEventBus:
    def test_publish_delivers_to_subscribed_handlers(self):
        bus = InMemoryEventBus()
        recorder = _Recorder()
        bus.subscribe(OrderCreated, recorder)

        event = OrderCreated(aggregate_id=uuid4())
        delivered = bus.publish(event)

        assert delivered == 1
        assert recorder.events == [event]

    def test_subscribing_twice_registers_once(self):
        bus = InMemoryEventBus()
        recorder = _Recorder()
        bus.subscribe(OrderCreated, recorder)
        bus.subscribe(OrderCreated, recorder)

        assert bus.publish(OrderCreated(aggregate_id=uuid4())) == 1

    def test_publish_without_handlers_returns_zero(self):
        bus = InMemoryEventBus()
        assert bus.publish(OrderStatusChanged(aggregate_id=uuid4())) == 0
