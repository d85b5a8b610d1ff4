"""Unit tests for domain events and the in-process event bus."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.events import OrderCreated, OrderStatusChanged
from modules.orders.models import Order
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class _Recorder:
    def __init__(self):
        self.events = []

    def handle(self, event):
        self.events.append(event)


def test_order_registers_and_clears_domain_events():
    order = Order(customer_id=uuid4(), status=OrderStatus.PENDING)

    assert order.domain_events == []

    event = OrderCreated(aggregate_id=order.id, order_number="ORD-20260101-AAAAAA")
    order.add_domain_event(event)

    assert order.domain_events == [event]
    assert event.event_name == "OrderCreated"

    order.clear_domain_events()
    assert order.domain_events == []


def test_domain_events_are_immutable():
    event = OrderCreated(aggregate_id=uuid4())
    with pytest.raises(AttributeError):
        event.total = "1.00"


class TestInMemoryEventBus:
    def test_publish_reaches_subscribers_of_that_event_only(self):
        bus = InMemoryEventBus()
        created, changed = _Recorder(), _Recorder()
        bus.subscribe(OrderCreated, created)
        bus.subscribe(OrderStatusChanged, changed)

        event = OrderCreated(aggregate_id=uuid4())
        bus.publish(event)

        assert created.events == [event]
        assert changed.events == []

    def test_subscribing_twice_registers_once(self):
        bus = InMemoryEventBus()
        handler = _Recorder()
        bus.subscribe(OrderCreated, handler)
        bus.subscribe(OrderCreated, handler)

        assert bus.handlers_for(OrderCreated) == [handler]

    def test_handler_errors_propagate(self):
        bus = InMemoryEventBus()

        class Boom:
            def handle(self, event):
                raise RuntimeError("handler failed")

        bus.subscribe(OrderCreated, Boom())
        with pytest.raises(RuntimeError, match="handler failed"):
            bus.publish(OrderCreated(aggregate_id=uuid4()))

    def test_subscribe_all_registers_a_table(self):
        bus = InMemoryEventBus()
        created, changed = _Recorder(), _Recorder()

        bus.subscribe_all([(OrderCreated, created), (OrderStatusChanged, changed)])

        assert bus.handlers_for(OrderCreated) == [created]
        assert bus.handlers_for(OrderStatusChanged) == [changed]


def test_app_subscriptions_are_registered():
    from modules.wallet.handlers import delivered_cashback_handler
    from shared.infrastructure.bus import event_bus

    assert delivered_cashback_handler in event_bus.handlers_for(OrderStatusChanged)


def test_pull_returns_and_forgets_pending_events():
    order = Order(customer_id=uuid4(), status=OrderStatus.PENDING)
    event = OrderCreated(aggregate_id=order.id)
    order.add_domain_event(event)

    assert order.pull_domain_events() == [event]
    assert order.domain_events == []
