import logging
from threading import Lock
from typing import Any, Dict, Optional

from .candidates import Candidate, CandidateRegistry, CandidateSource
from .event_bus import (
    CANDIDATES_CHANGED,
    CAPABILITY_OVERRIDDEN,
    CAPABILITY_RESOLVED,
    CAPABILITY_UNRESOLVED,
    EventBus,
)
from .resolver import Resolution, Resolver


class CapabilityRegistry:
    """Resolution state for one capability.

    Holds the ordered candidates, an optional manual override and the
    memoized singleton. Every change to the candidates, whether made through
    this object or through the live registry from :meth:`candidates`, drops
    both the override and the singleton.
    """

    def __init__(
        self,
        name: str,
        resolver: Resolver,
        candidates: Optional[CandidateSource] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self.name = name
        self._resolver = resolver
        self._events = events
        self._log = logging.getLogger("capdiscover.capabilities")
        self._state_lock = Lock()
        self._resolve_lock = Lock()
        self._override: Optional[Any] = None
        self._singleton: Optional[Any] = None
        self._resolved: Optional[Candidate] = None
        self._generation = 0
        self._candidates = CandidateRegistry(candidates)
        self._candidates.subscribe(lambda _: self._invalidate())

    # ---- resolution ----------------------------------------------------------
    def discover(self) -> Optional[Any]:
        """Resolve afresh on every call unless an override is in place."""
        with self._state_lock:
            override = self._override
        if override is not None:
            return override
        resolution = self._resolver.resolve(self._candidates.all())
        self._announce(resolution)
        return resolution.instance if resolution else None

    def singleton(self) -> Optional[Any]:
        """Return the memoized instance, resolving it on first use.

        Concurrent first callers wait for a single resolution. ``None`` is
        never memoized. Events are published after the resolution lock is
        released, so handlers may call back into this registry.
        """
        cached = self._cached()
        if cached is not None:
            return cached
        with self._resolve_lock:
            with self._state_lock:
                cached = self._override if self._override is not None else self._singleton
                generation = self._generation
            if cached is not None:
                return cached
            resolution = self._resolver.resolve(self._candidates.all())
            if resolution is not None:
                with self._state_lock:
                    if self._generation == generation:
                        self._singleton = resolution.instance
                        self._resolved = resolution.candidate
                    else:
                        self._log.debug("%s changed during resolution, result not memoized", self.name)
        self._announce(resolution)
        return resolution.instance if resolution else None

    def use(self, instance: Optional[Any]) -> None:
        """Pin *instance* for both :meth:`discover` and :meth:`singleton`.

        ``None`` removes the pin so the next call resolves normally.
        """
        with self._state_lock:
            self._override = instance
            self._singleton = instance
            self._resolved = None
            self._generation += 1
        if self._events is not None:
            self._events.emit(CAPABILITY_OVERRIDDEN, self.name, cleared=instance is None)

    def _cached(self) -> Optional[Any]:
        with self._state_lock:
            if self._override is not None:
                return self._override
            return self._singleton

    def _announce(self, resolution: Optional[Resolution]) -> None:
        if resolution is None:
            self._log.debug("no candidate satisfied for %s", self.name)
            if self._events is not None:
                self._events.emit(CAPABILITY_UNRESOLVED, self.name)
            return
        winner = resolution.candidate
        self._log.info("resolved %s to %s", self.name, winner)
        if self._events is not None:
            self._events.emit(CAPABILITY_RESOLVED, self.name, winner.package, constraint=winner.version)

    # ---- candidate mutation --------------------------------------------------
    def add(self, candidate: Candidate) -> Candidate:
        return self._candidates.add(candidate)

    def prefer(self, package: str) -> None:
        if not self._candidates.prefer(package):
            self._invalidate()

    def set(self, candidates: CandidateSource) -> None:
        self._candidates.set(candidates)

    def remove(self, package: str) -> bool:
        return self._candidates.remove(package)

    def clear(self) -> None:
        self._candidates.clear()

    def candidates(self) -> CandidateRegistry:
        return self._candidates

    def _invalidate(self) -> None:
        with self._state_lock:
            self._override = None
            self._singleton = None
            self._resolved = None
            self._generation += 1
        if self._events is not None:
            self._events.emit(CANDIDATES_CHANGED, self.name, order=self._candidates.packages())

    # ---- introspection -------------------------------------------------------
    @property
    def overridden(self) -> bool:
        with self._state_lock:
            return self._override is not None

    def resolved(self) -> Optional[Candidate]:
        with self._state_lock:
            return self._resolved

    def explain(self):
        return self._resolver.explain(self._candidates.all())

    def describe(self) -> Dict[str, Any]:
        with self._state_lock:
            resolved = self._resolved
            memoized = self._singleton is not None
            overridden = self._override is not None
        return {
            "name": self.name,
            "candidates": [str(c) for c in self._candidates.all()],
            "resolved": str(resolved) if resolved else None,
            "memoized": memoized,
            "overridden": overridden,
        }


__all__ = ["CapabilityRegistry"]
