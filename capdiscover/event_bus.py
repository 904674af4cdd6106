import logging
from collections import defaultdict
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

CANDIDATES_CHANGED = "candidates.changed"
CAPABILITY_RESOLVED = "capability.resolved"
CAPABILITY_UNRESOLVED = "capability.unresolved"
CAPABILITY_OVERRIDDEN = "capability.overridden"
EXTENSION_REGISTERED = "extension.registered"

Handler = Callable[["DiscoveryEvent"], None]


@dataclass(frozen=True)
class DiscoveryEvent:
    topic: str
    capability: str
    package: Optional[str] = None
    detail: Dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Thread safe publish/subscribe bus for discovery events.

    Subscribing to ``"*"`` receives every topic.
    """

    def __init__(self) -> None:
        self._subs: Dict[str, List[Handler]] = defaultdict(list)
        self._lock = RLock()
        self._log = logging.getLogger("capdiscover.event_bus")

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """Subscribe *handler* to *topic* and return an unsubscribe callable."""
        with self._lock:
            self._subs[topic].append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._subs.get(topic, []):
                    self._subs[topic].remove(handler)
        return unsubscribe

    def publish(self, event: DiscoveryEvent) -> None:
        """Deliver *event* to its topic subscribers, then wildcard subscribers.

        A failing handler is logged and skipped; the others still run."""
        with self._lock:
            handlers = list(self._subs.get(event.topic, [])) + list(self._subs.get("*", []))
        for h in handlers:
            try:
                h(event)
            except Exception:  # pragma: no cover - logged for visibility
                self._log.exception("error in discovery event handler for %s", event.topic)

    def emit(self, topic: str, capability: str, package: Optional[str] = None, **detail: Any) -> None:
        self.publish(DiscoveryEvent(topic, capability, package, dict(detail)))


__all__ = [
    "EventBus",
    "DiscoveryEvent",
    "CANDIDATES_CHANGED",
    "CAPABILITY_RESOLVED",
    "CAPABILITY_UNRESOLVED",
    "CAPABILITY_OVERRIDDEN",
    "EXTENSION_REGISTERED",
]
