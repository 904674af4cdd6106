import threading
import time

import pytest

from capdiscover.candidates import Candidate, CandidateRegistry
from capdiscover.capabilities import CapabilityRegistry
from capdiscover.errors import InvalidCandidateError
from capdiscover.event_bus import CANDIDATES_CHANGED, CAPABILITY_RESOLVED, EventBus
from capdiscover.resolver import Resolver
from capdiscover.versions import StaticVersionOracle


class Counter:
    def __init__(self):
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.calls += 1
        return object()


def make(versions=None, candidates=None, events=None):
    oracle = StaticVersionOracle(versions if versions is not None else {"a": "1.0", "b": "2.0"})
    return CapabilityRegistry("thing", Resolver(oracle), candidates, events)


def test_discover_does_not_cache():
    counter = Counter()
    cap = make(candidates=[Candidate("a", "*", counter)])
    first = cap.discover()
    second = cap.discover()
    assert first is not second
    assert counter.calls == 2
    assert cap.resolved() is None


def test_discover_observes_environment_changes():
    oracle = StaticVersionOracle({})
    cap = CapabilityRegistry("thing", Resolver(oracle), [Candidate("a", "*", lambda: "a")])
    assert cap.discover() is None
    oracle.versions["a"] = "1.0"
    assert cap.discover() == "a"


def test_singleton_memoizes():
    counter = Counter()
    cap = make(candidates=[Candidate("a", "*", counter)])
    first = cap.singleton()
    assert cap.singleton() is first
    assert counter.calls == 1
    assert str(cap.resolved()) == "a@*"


def test_absent_result_is_not_memoized():
    oracle = StaticVersionOracle({})
    cap = CapabilityRegistry("thing", Resolver(oracle))
    assert cap.singleton() is None
    cap.add(Candidate("a", "*", lambda: "late"))
    assert cap.singleton() is None
    oracle.versions["a"] = "1.0"
    assert cap.singleton() == "late"


@pytest.mark.parametrize("mutate", [
    lambda cap: cap.add(Candidate("b", "*", object)),
    lambda cap: cap.prefer("a"),
    lambda cap: cap.prefer("missing"),
    lambda cap: cap.set([Candidate("a", "*", cap.counter)]),
    lambda cap: cap.candidates().add(Candidate("b", "*", object)),
])
def test_mutation_invalidates_singleton(mutate):
    counter = Counter()
    cap = make(candidates=[Candidate("a", "*", counter)])
    cap.counter = counter
    cap.singleton()
    mutate(cap)
    cap.singleton()
    assert counter.calls == 2


def test_failed_set_keeps_cache_and_candidates():
    counter = Counter()
    cap = make(candidates=[Candidate("a", "*", counter)])
    first = cap.singleton()
    with pytest.raises(InvalidCandidateError):
        cap.set([Candidate("b", "*", object), "junk"])
    assert cap.candidates().packages() == ["a"]
    assert cap.singleton() is first


def test_override_bypasses_resolution():
    counter = Counter()
    cap = make(candidates=[Candidate("a", "*", counter)])
    pinned = object()
    cap.use(pinned)
    assert cap.discover() is pinned
    assert cap.singleton() is pinned
    assert cap.overridden
    assert counter.calls == 0

    cap.use(None)
    assert not cap.overridden
    assert cap.discover() is not pinned
    assert counter.calls == 1


def test_override_cleared_by_mutation():
    cap = make(candidates=[Candidate("a", "*", lambda: "resolved")])
    cap.use("pinned")
    cap.add(Candidate("b", "*", lambda: "b"))
    assert cap.singleton() == "resolved"


def test_override_works_with_empty_registry():
    cap = make(candidates=[])
    cap.use("pinned")
    assert cap.discover() == "pinned"


def test_factory_failure_is_not_memoized():
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise ConnectionError("down")
        return "up"

    cap = make(candidates=[Candidate("a", "*", flaky)])
    with pytest.raises(ConnectionError):
        cap.singleton()
    assert cap.singleton() == "up"
    assert cap.singleton() == "up"
    assert len(attempts) == 2


def test_single_flight_builds_once():
    counter = Counter()

    def slow():
        time.sleep(0.05)
        return counter()

    cap = make(candidates=[Candidate("a", "*", slow)])
    results = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        results.append(cap.singleton())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter.calls == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)


def test_mutation_during_resolution_is_not_memoized():
    cap = make(candidates=[])

    def builder():
        cap.candidates().add(Candidate("b", "*", lambda: "b"))
        return "a"

    cap.add(Candidate("a", "*", builder))
    assert cap.singleton() == "a"
    assert cap.describe()["memoized"] is False


def test_events_and_describe():
    bus = EventBus()
    seen = []
    bus.subscribe("*", lambda e: seen.append((e.topic, e.package)))
    cap = make(candidates=[Candidate("a", "*", object), Candidate("b", "*", object)], events=bus)
    cap.singleton()
    cap.prefer("b")
    assert (CAPABILITY_RESOLVED, "a") in seen
    assert (CANDIDATES_CHANGED, None) in seen
    info = cap.describe()
    assert info == {
        "name": "thing",
        "candidates": ["b@*", "a@*"],
        "resolved": None,
        "memoized": False,
        "overridden": False,
    }


def test_constructed_from_existing_registry_copies_it():
    source = CandidateRegistry([Candidate("a", "*", object)])
    cap = make(candidates=source)
    source.add(Candidate("b", "*", object))
    assert cap.candidates().packages() == ["a"]


def test_event_handler_may_reenter_singleton():
    bus = EventBus()
    cap = make(candidates=[Candidate("a", "*", object)], events=bus)
    seen = []
    bus.subscribe(CAPABILITY_RESOLVED, lambda e: seen.append(cap.singleton()))
    results = []
    worker = threading.Thread(target=lambda: results.append(cap.singleton()), daemon=True)
    worker.start()
    worker.join(2)
    assert not worker.is_alive()
    assert results and seen == results
