import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]


class EventBus:
    """Minimal synchronous pub/sub event bus.

    The battle engine publishes every action log entry as ``"action"`` and the
    final result as ``"battle_end"``. Subscribers run inline; their errors are
    logged and never reach the engine.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def subscribe(self, event_name: str, callback: Subscriber) -> None:
        logger.debug("Subscribing to event '%s': %s", event_name, callback)
        self._subscribers.setdefault(event_name, []).append(callback)

    def unsubscribe(self, event_name: str, callback: Subscriber) -> None:
        subs = self._subscribers.get(event_name, [])
        if callback in subs:
            subs.remove(callback)

    def publish(self, event_name: str, payload: Any = None) -> None:
        subs = list(self._subscribers.get(event_name, []))
        logger.debug("Publishing event '%s' to %d subscribers", event_name, len(subs))
        for cb in subs:
            try:
                cb(payload)
            except Exception as exc:
                logger.exception("Error in event subscriber for '%s': %s", event_name, exc)
