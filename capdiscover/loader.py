import importlib
import logging
from importlib import metadata
from typing import List

from .errors import ConfigError
from .extensions import ExtensionTable

ENTRY_POINT_GROUP = "capdiscover.extensions"


class ExtensionLoader:
    """Imports extension modules and lets each one register itself.

    An extension module exposes ``register(table)``; an entry point in the
    ``capdiscover.extensions`` group points at such a callable directly.
    """

    def __init__(self, table: ExtensionTable) -> None:
        self.table = table
        self.loaded: List[str] = []
        self._log = logging.getLogger("capdiscover.loader")

    def load_module(self, name: str) -> None:
        if name in self.loaded:
            return
        try:
            module = importlib.import_module(name)
        except ImportError as exc:
            raise ConfigError(f"cannot import extension module {name}: {exc}") from exc
        register = getattr(module, "register", None)
        if not callable(register):
            raise ConfigError(f"extension module {name} has no register(table) function")
        register(self.table)
        self.loaded.append(name)
        self._log.info("loaded extension module %s", name)

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> List[str]:
        names = []
        for ep in metadata.entry_points(group=group):
            key = f"{ep.name}={ep.value}"
            if key in self.loaded:
                continue
            try:
                register = ep.load()
            except Exception:
                # a broken third-party plugin must not stop discovery
                self._log.warning("skipping entry point %s", key, exc_info=True)
                continue
            register(self.table)
            self.loaded.append(key)
            names.append(ep.name)
            self._log.info("loaded extension entry point %s", ep.name)
        return names

    def load_all(self, modules: List[str], entry_points: bool = True) -> None:
        for name in modules:
            self.load_module(name)
        if entry_points:
            self.load_entry_points()


__all__ = ["ExtensionLoader", "ENTRY_POINT_GROUP"]
