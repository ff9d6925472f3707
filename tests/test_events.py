"""Test event fan-out"""

from pullchunk.transfer.events import EventBus, EventKind, TransferEvent


def _event(key="k"):
    return TransferEvent(key, EventKind.REGISTERED)


class TestEventBus:
    """Subscription semantics"""

    def test_delivery_in_subscription_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe(lambda e: calls.append("first"))
        bus.subscribe(lambda e: calls.append("second"))

        bus.publish(_event())

        assert calls == ["first", "second"]

    def test_unsubscribe_inside_callback(self):
        """Own unsubscribe in a callback is safe and stops future deliveries"""
        bus = EventBus()
        received = []
        handle = {}

        def once(event):
            received.append(event)
            handle['unsubscribe']()

        handle['unsubscribe'] = bus.subscribe(once)

        bus.publish(_event("a"))
        bus.publish(_event("b"))

        assert [e.key for e in received] == ["a"]
        assert len(bus) == 0

    def test_unsubscribe_does_not_affect_current_pass(self):
        """Snapshot semantics: a later subscriber removed mid-pass still gets this event"""
        bus = EventBus()
        received = []
        handles = {}

        def remover(event):
            handles['victim']()

        bus.subscribe(remover)
        handles['victim'] = bus.subscribe(lambda e: received.append(e.key))

        bus.publish(_event("a"))
        bus.publish(_event("b"))

        assert received == ["a"]

    def test_subscribe_during_delivery_waits_for_next_publish(self):
        bus = EventBus()
        late = []

        def adder(event):
            bus.subscribe(lambda e: late.append(e.key))

        unsubscribe = bus.subscribe(adder)
        bus.publish(_event("a"))
        unsubscribe()
        bus.publish(_event("b"))

        assert late == ["b"]

    def test_unsubscribe_twice_is_noop(self):
        bus = EventBus()
        unsubscribe = bus.subscribe(lambda e: None)

        unsubscribe()
        unsubscribe()

        assert len(bus) == 0

    def test_failing_subscriber_does_not_block_others(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(received.append)

        bus.publish(_event())

        assert len(received) == 1
