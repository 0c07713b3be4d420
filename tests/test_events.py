"""
Unit tests for the event dispatcher.
"""

import pytest

from warden.modules.events.dispatcher import Event, EventDispatcher


class PingEvent(Event):
    def __init__(self):
        super().__init__()
        self.calls = []


class OtherEvent(Event):
    pass


class TestEventDispatcher:
    """Priority ordering and propagation."""

    @pytest.mark.asyncio
    async def test_higher_priority_runs_first(self, dispatcher):
        dispatcher.add_listener(PingEvent, lambda e: e.calls.append("low"), priority=-10)
        dispatcher.add_listener(PingEvent, lambda e: e.calls.append("high"), priority=100)
        dispatcher.add_listener(PingEvent, lambda e: e.calls.append("default"))

        event = await dispatcher.dispatch(PingEvent())

        assert event.calls == ["high", "default", "low"]

    @pytest.mark.asyncio
    async def test_equal_priority_keeps_registration_order(self, dispatcher):
        for name in ("first", "second", "third"):
            dispatcher.add_listener(PingEvent, lambda e, name=name: e.calls.append(name), priority=5)

        event = await dispatcher.dispatch(PingEvent())

        assert event.calls == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_async_listeners_are_awaited(self, dispatcher):
        async def listener(event):
            event.calls.append("async")

        dispatcher.add_listener(PingEvent, listener)
        dispatcher.add_listener(PingEvent, lambda e: e.calls.append("sync"))

        event = await dispatcher.dispatch(PingEvent())

        assert event.calls == ["async", "sync"]

    @pytest.mark.asyncio
    async def test_stop_propagation(self, dispatcher):
        def stopper(event):
            event.calls.append("stopper")
            event.stop_propagation()

        dispatcher.add_listener(PingEvent, stopper, priority=10)
        dispatcher.add_listener(PingEvent, lambda e: e.calls.append("never"))

        event = await dispatcher.dispatch(PingEvent())

        assert event.calls == ["stopper"]
        assert event.propagation_stopped

    @pytest.mark.asyncio
    async def test_listener_errors_propagate(self, dispatcher):
        def broken(event):
            raise RuntimeError("listener failed")

        dispatcher.add_listener(PingEvent, broken)

        with pytest.raises(RuntimeError, match="listener failed"):
            await dispatcher.dispatch(PingEvent())

    @pytest.mark.asyncio
    async def test_listeners_are_per_event_class(self, dispatcher):
        dispatcher.add_listener(OtherEvent, lambda e: pytest.fail("wrong event"))

        event = await dispatcher.dispatch(PingEvent())

        assert event.calls == []
        assert dispatcher.has_listeners(OtherEvent)
        assert not dispatcher.has_listeners(PingEvent)

    @pytest.mark.asyncio
    async def test_remove_listener(self, dispatcher):
        def listener(event):
            event.calls.append("removed")

        dispatcher.add_listener(PingEvent, listener)
        dispatcher.remove_listener(PingEvent, listener)

        event = await dispatcher.dispatch(PingEvent())

        assert event.calls == []

    @pytest.mark.asyncio
    async def test_subscriber_registration(self, dispatcher):
        class Subscriber:
            @staticmethod
            def get_subscribed_events():
                return {PingEvent: [("late", -5), ("early", 5)]}

            def early(self, event):
                event.calls.append("early")

            async def late(self, event):
                event.calls.append("late")

        dispatcher.add_subscriber(Subscriber())

        event = await dispatcher.dispatch(PingEvent())

        assert event.calls == ["early", "late"]
        assert len(dispatcher.get_listeners(PingEvent)) == 2
