"""Tests for llmcommitter.events module."""

from llmcommitter.events import EventChannel


class TestEventChannel:
    """Tests for EventChannel."""

    def test_delivers_in_subscription_order(self):
        """Test that listeners run in the order they subscribed."""
        channel = EventChannel("test")
        received = []
        channel.subscribe(lambda event: received.append(("first", event)))
        channel.subscribe(lambda event: received.append(("second", event)))

        channel.emit(1)

        assert received == [("first", 1), ("second", 1)]

    def test_dispose_unsubscribes(self):
        """Test that a disposed subscription stops receiving events."""
        channel = EventChannel("test")
        received = []
        subscription = channel.subscribe(received.append)

        subscription.dispose()
        subscription.dispose()
        channel.emit("x")

        assert received == []
        assert subscription.active is False
        assert len(channel) == 0

    def test_failing_listener_does_not_stop_others(self):
        """Test that one raising listener is skipped."""
        channel = EventChannel("test")
        received = []

        def broken(event):
            raise RuntimeError("listener bug")

        channel.subscribe(broken)
        channel.subscribe(received.append)

        channel.emit("event")

        assert received == ["event"]

    def test_listener_can_unsubscribe_during_emit(self):
        """Test that disposing inside a callback is safe."""
        channel = EventChannel("test")
        received = []
        holder = {}

        def once(event):
            received.append(event)
            holder["subscription"].dispose()

        holder["subscription"] = channel.subscribe(once)
        channel.emit(1)
        channel.emit(2)

        assert received == [1]
