import logging
from threading import RLock
from typing import Any, Dict, List, Optional

from . import builtin
from .candidates import Candidate, CandidateSource
from .capabilities import CapabilityRegistry
from .catalog import lookup
from .config import DiscoveryConfig
from .errors import MissingExtensionError
from .event_bus import EventBus
from .extensions import Extension, ExtensionTable
from .loader import ExtensionLoader
from .resolver import Resolver
from .versions import InstalledVersionOracle, VersionOracle


_runtime: Optional["DiscoveryRuntime"] = None


class DiscoveryRuntime:
    """Owns the oracle, the extension table and one registry per capability.

    Build one at the composition root and hand it to the code that needs
    capabilities; tests build their own.
    """

    def __init__(
        self,
        oracle: Optional[VersionOracle] = None,
        *,
        events: Optional[EventBus] = None,
        builtin_extensions: bool = True,
    ) -> None:
        self.oracle = oracle if oracle is not None else InstalledVersionOracle()
        self.events = events or EventBus()
        self.resolver = Resolver(self.oracle)
        self.extensions = ExtensionTable(self.events)
        self.loader = ExtensionLoader(self.extensions)
        self._registries: Dict[str, CapabilityRegistry] = {}
        self._lock = RLock()
        self._log = logging.getLogger("capdiscover.runtime")
        self.extensions.subscribe(self._merge_extension)
        if builtin_extensions:
            builtin.register(self.extensions)

    @classmethod
    def from_config(cls, config: DiscoveryConfig, oracle: Optional[VersionOracle] = None) -> "DiscoveryRuntime":
        if oracle is None:
            oracle = InstalledVersionOracle(config.pins)
        runtime = cls(oracle, builtin_extensions=config.builtin)
        runtime.apply_config(config)
        return runtime

    def apply_config(self, config: DiscoveryConfig) -> None:
        self.loader.load_all(config.extensions, entry_points=config.entry_points)
        for name, cap in config.capabilities.items():
            configured = [Candidate.from_entry(c.package, c.version, c.entry) for c in cap.candidates]
            if cap.use_defaults and self.extensions.has(name):
                registry = self.capability(name)
                for candidate in configured:
                    registry.add(candidate)
            else:
                registry = self.define(name, configured)
            # the first listed package must end up first
            for package in reversed(cap.prefer):
                registry.prefer(package)
            self._log.debug("configured %s: %s", name, registry.candidates().packages())

    # ---- registries ----------------------------------------------------------
    def capability(self, name: str) -> CapabilityRegistry:
        """Return the registry for *name*, creating it from its extensions.

        Raises :class:`MissingExtensionError` when the capability was never
        defined and no extension supplies candidates for it. Extensions
        registered after the registry exists are merged into it.
        """
        registry = self.registry(name)
        if registry is not None:
            return registry
        if not self.extensions.has(name):
            spec = lookup(name)
            raise MissingExtensionError(name, spec.label, spec.extension)
        candidates = self.extensions.candidates_for(name)
        with self._lock:
            registry = self._registries.get(name)
            if registry is None:
                registry = CapabilityRegistry(name, self.resolver, candidates, self.events)
                self._registries[name] = registry
                self._log.debug("created registry for %s", name)
        return registry

    def define(self, name: str, candidates: Optional[CandidateSource] = None) -> CapabilityRegistry:
        """Create (or replace the candidates of) an application-owned capability."""
        with self._lock:
            registry = self._registries.get(name)
            if registry is None:
                registry = CapabilityRegistry(name, self.resolver, candidates, self.events)
                self._registries[name] = registry
                return registry
        if candidates is not None:
            registry.set(candidates)
        return registry

    def registry(self, name: str) -> Optional[CapabilityRegistry]:
        with self._lock:
            return self._registries.get(name)

    def known_candidates(self, name: str) -> List[Candidate]:
        """Every provider known for *name*, including ones that are not built automatically."""
        known = self.extensions.all_candidates_for(name)
        registry = self.registry(name)
        if registry is not None:
            packages = {c.package for c in known}
            known.extend(c for c in registry.candidates().all() if c.package not in packages)
        return known

    def _merge_extension(self, extension: Extension) -> None:
        registry = self.registry(extension.capability)
        if registry is None:
            return
        for candidate in extension.candidates():
            if not registry.candidates().has(candidate.package):
                registry.add(candidate)
        self._log.debug("merged extension %s into %s", extension.package, extension.capability)

    def capabilities(self) -> List[str]:
        with self._lock:
            names = list(self._registries)
        for name in self.extensions.capabilities():
            if name not in names:
                names.append(name)
        return names

    # ---- resolution ----------------------------------------------------------
    def resolve(self, name: str, singleton: bool = False) -> Optional[Any]:
        """Resolve *name*; ``None`` when nothing matches or nothing is configured."""
        try:
            registry = self.capability(name)
        except MissingExtensionError:
            self._log.debug("no registry for %s", name)
            return None
        return registry.singleton() if singleton else registry.discover()


def get_runtime() -> DiscoveryRuntime:
    if _runtime is None:
        raise RuntimeError("runtime not initialised")
    return _runtime


def create_runtime(config: Optional[DiscoveryConfig] = None) -> DiscoveryRuntime:
    global _runtime
    _runtime = DiscoveryRuntime.from_config(config or DiscoveryConfig())
    return _runtime


__all__ = ["DiscoveryRuntime", "create_runtime", "get_runtime"]
