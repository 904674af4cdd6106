"""Explicit registration of the extensions that supply candidates."""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional

from .candidates import Candidate
from .event_bus import EXTENSION_REGISTERED, EventBus


@dataclass(frozen=True)
class Extension:
    """Default candidates for one capability, contributed by *package*.

    ``candidates`` lists providers that can be built without arguments and
    take part in resolution. ``all_candidates`` additionally lists providers
    that are known but need manual construction; it is for inspection only
    and defaults to ``candidates``.
    """

    capability: str
    package: str
    candidates: Callable[[], Iterable[Candidate]]
    all_candidates: Optional[Callable[[], Iterable[Candidate]]] = None


class ExtensionTable:
    """Capability name -> extensions, in registration order.

    A capability with no entry here has no default candidates; asking the
    runtime for it is a configuration error.
    """

    def __init__(self, events: Optional[EventBus] = None) -> None:
        self._extensions: Dict[str, List[Extension]] = OrderedDict()
        self._lock = RLock()
        self._events = events
        self._listeners: List[Callable[[Extension], None]] = []
        self._log = logging.getLogger("capdiscover.extensions")

    def register(self, extension: Extension) -> Extension:
        with self._lock:
            existing = self._extensions.setdefault(extension.capability, [])
            existing[:] = [e for e in existing if e.package != extension.package]
            existing.append(extension)
            listeners = list(self._listeners)
        self._log.debug("extension %s registered for %s", extension.package, extension.capability)
        for listener in listeners:
            listener(extension)
        if self._events is not None:
            self._events.emit(EXTENSION_REGISTERED, extension.capability, extension.package)
        return extension

    def subscribe(self, listener: Callable[[Extension], None]) -> Callable[[], None]:
        """Call *listener* with each newly registered extension."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def unregister(self, capability: str, package: Optional[str] = None) -> bool:
        """Forget the extensions of *capability* (or just *package*'s).

        Registries the runtime already built keep their candidates.
        """
        with self._lock:
            existing = self._extensions.get(capability)
            if not existing:
                return False
            if package is None:
                del self._extensions[capability]
                return True
            kept = [e for e in existing if e.package != package]
            if len(kept) == len(existing):
                return False
            if kept:
                self._extensions[capability] = kept
            else:
                del self._extensions[capability]
            return True

    def has(self, capability: str) -> bool:
        with self._lock:
            return bool(self._extensions.get(capability))

    def get(self, capability: str) -> List[Extension]:
        with self._lock:
            return list(self._extensions.get(capability, []))

    def capabilities(self) -> List[str]:
        with self._lock:
            return list(self._extensions)

    def candidates_for(self, capability: str) -> List[Candidate]:
        """Collect buildable candidates from every extension of *capability*.

        The first extension to name a package keeps it.
        """
        return _merge(e.candidates for e in self.get(capability))

    def all_candidates_for(self, capability: str) -> List[Candidate]:
        """Every known provider of *capability*, buildable or not."""
        return _merge(e.all_candidates or e.candidates for e in self.get(capability))


def _merge(sources: Iterable[Callable[[], Iterable[Candidate]]]) -> List[Candidate]:
    seen: Dict[str, Candidate] = OrderedDict()
    for source in sources:
        for candidate in source():
            seen.setdefault(candidate.package, candidate)
    return list(seen.values())


__all__ = ["Extension", "ExtensionTable"]
