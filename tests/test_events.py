from autobattle.utils.events import EventBus


def test_publish_reaches_subscribers_in_order():
    bus = EventBus()
    seen = []
    bus.subscribe("action", lambda p: seen.append(("a", p)))
    bus.subscribe("action", lambda p: seen.append(("b", p)))
    bus.publish("action", 1)
    bus.publish("other", 2)
    assert seen == [("a", 1), ("b", 1)]


def test_failing_subscriber_is_logged_and_isolated(caplog):
    bus = EventBus()
    seen = []

    def bad(_):
        raise ValueError("nope")

    bus.subscribe("action", bad)
    bus.subscribe("action", seen.append)
    bus.publish("action", "x")
    assert seen == ["x"]
    assert "Error in event subscriber" in caplog.text


def test_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe("action", seen.append)
    bus.unsubscribe("action", seen.append)
    bus.publish("action", 1)
    assert seen == []
