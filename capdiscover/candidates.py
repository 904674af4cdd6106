import importlib
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import InvalidCandidateError


@dataclass(frozen=True)
class Candidate:
    """A provider for a capability.

    ``builder`` is called with no arguments each time :meth:`build` runs and
    must return a fresh instance. It may capture configuration but should not
    rely on state mutated by earlier builds; identity across calls is only
    kept by callers that memoize the result.
    """

    package: str
    version: str
    builder: Callable[[], Any]

    def __post_init__(self) -> None:
        if not isinstance(self.package, str) or not self.package.strip():
            raise InvalidCandidateError("candidate package must be a non-empty string")
        if not isinstance(self.version, str):
            raise InvalidCandidateError(f"version constraint for {self.package} must be a string")
        if not callable(self.builder):
            raise InvalidCandidateError(f"builder for {self.package} is not callable")

    def __str__(self) -> str:
        return f"{self.package}@{self.version}"

    def build(self) -> Any:
        return self.builder()

    @classmethod
    def from_entry(cls, package: str, version: str, entry: str) -> "Candidate":
        """Create a candidate whose builder is the ``module:attr`` callable.

        The module is imported on the first :meth:`build`, not here.
        """
        mod_name, _, attr = entry.partition(":")
        if not mod_name or not attr:
            raise InvalidCandidateError(f"entry {entry!r} must look like 'module:attr'")

        def builder() -> Any:
            target: Any = importlib.import_module(mod_name)
            for part in attr.split("."):
                target = getattr(target, part)
            return target()

        return cls(package, version, builder)


CandidateSource = Union["CandidateRegistry", Mapping[str, Candidate], Iterable[Candidate]]


def _validated(source: Optional[CandidateSource]) -> "OrderedDict[str, Candidate]":
    if source is None:
        return OrderedDict()
    if isinstance(source, CandidateRegistry):
        items: Iterable[Any] = source.all()
    elif isinstance(source, Mapping):
        items = source.values()
    else:
        items = source
    result: "OrderedDict[str, Candidate]" = OrderedDict()
    for item in items:
        if not isinstance(item, Candidate):
            raise InvalidCandidateError(
                f"CandidateRegistry only accepts Candidate instances, got {type(item).__name__}"
            )
        result[item.package] = item
    return result


class CandidateRegistry:
    """Ordered, thread safe collection of candidates for one capability.

    Iteration order is resolution priority. Listeners registered with
    :meth:`subscribe` are called after every committed mutation.
    """

    def __init__(self, candidates: Optional[CandidateSource] = None) -> None:
        self._candidates = _validated(candidates)
        self._lock = RLock()
        self._listeners: List[Callable[["CandidateRegistry"], None]] = []

    # ---- mutation ------------------------------------------------------------
    def add(self, candidate: Candidate) -> Candidate:
        if not isinstance(candidate, Candidate):
            raise InvalidCandidateError(f"expected a Candidate, got {type(candidate).__name__}")
        with self._lock:
            self._candidates[candidate.package] = candidate
        self._notify()
        return candidate

    def remove(self, package: str) -> bool:
        with self._lock:
            removed = self._candidates.pop(package, None) is not None
        if removed:
            self._notify()
        return removed

    def prefer(self, package: str) -> bool:
        """Move *package* to the front; return whether it was found."""
        key = (package or "").strip()
        with self._lock:
            if not key or key not in self._candidates:
                return False
            self._candidates.move_to_end(key, last=False)
        self._notify()
        return True

    def clear(self) -> None:
        with self._lock:
            self._candidates.clear()
        self._notify()

    def set(self, candidates: CandidateSource) -> None:
        replacement = _validated(candidates)
        with self._lock:
            self._candidates = replacement
        self._notify()

    # ---- lookups -------------------------------------------------------------
    def get(self, package: str) -> Optional[Candidate]:
        with self._lock:
            return self._candidates.get(package)

    def has(self, package: str) -> bool:
        with self._lock:
            return package in self._candidates

    def all(self) -> Tuple[Candidate, ...]:
        with self._lock:
            return tuple(self._candidates.values())

    def packages(self) -> List[str]:
        with self._lock:
            return list(self._candidates)

    def __contains__(self, package: object) -> bool:
        return isinstance(package, str) and self.has(package)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self.all())

    def __len__(self) -> int:
        with self._lock:
            return len(self._candidates)

    def __repr__(self) -> str:
        return f"CandidateRegistry([{', '.join(str(c) for c in self.all())}])"

    # ---- listeners -----------------------------------------------------------
    def subscribe(self, listener: Callable[["CandidateRegistry"], None]) -> Callable[[], None]:
        """Call *listener* after each mutation and return an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self)


__all__ = ["Candidate", "CandidateRegistry", "CandidateSource"]
