from core.pipeline.events import TURN_PROCESSED, EventBus


def test_publish_reaches_subscribers():
    bus = EventBus()
    received = []
    bus.subscribe(TURN_PROCESSED, received.append)

    event = bus.publish(TURN_PROCESSED, {"session_id": "s1"})

    assert received == [event]
    assert event.payload == {"session_id": "s1"}
    assert event.timestamp


def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(TURN_PROCESSED, broken)
    bus.subscribe(TURN_PROCESSED, received.append)
    bus.publish(TURN_PROCESSED, {})

    assert len(received) == 1


def test_unsubscribe():
    bus = EventBus()
    received = []
    bus.subscribe(TURN_PROCESSED, received.append)
    bus.unsubscribe(TURN_PROCESSED, received.append)
    bus.publish(TURN_PROCESSED, {})
    assert received == []
