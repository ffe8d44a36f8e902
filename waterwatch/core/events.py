"""
In-process topic channel between independent parts of the app.

Used where one area needs to nudge another without holding a reference to it,
e.g. an issue page asking the chat assistant to prefill a question.
"""

# Standard library imports
from collections import defaultdict
from collections.abc import Callable
from typing import Any

# Local application imports
from waterwatch.core.monitoring import get_logger

logger = get_logger(__name__)

CHAT_PREFILL_TOPIC = "chat.prefill"

Listener = Callable[[Any], None]


class EventChannel:
    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` on ``topic``; returns an unsubscribe callable."""
        self._listeners[topic].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners.get(topic, []):
                self._listeners[topic].remove(listener)

        return unsubscribe

    def publish(self, topic: str, payload: Any) -> int:
        """Deliver ``payload`` to every listener of ``topic``. Returns the delivery count."""
        delivered = 0
        for listener in list(self._listeners.get(topic, [])):
            try:
                listener(payload)
                delivered += 1
            except Exception:
                logger.exception(f"Listener on {topic} failed")
        return delivered

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, []))
