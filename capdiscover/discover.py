from typing import Any, Optional

from .catalog import (
    CACHE,
    CONTAINER,
    EVENT_DISPATCHER,
    HTTP_CLIENT,
    HTTP_REQUEST_FACTORY,
    HTTP_RESPONSE_FACTORY,
    HTTP_STREAM_FACTORY,
    LOG,
)
from .runtime import DiscoveryRuntime, get_runtime


class Discover:
    """Per-capability entry points over a :class:`DiscoveryRuntime`.

    Each method returns an instance of the first installed provider, or
    ``None`` when no candidate is satisfied. With ``singleton=True`` the
    instance is memoized until the capability's candidates change.
    A capability without any extension raises
    :class:`~capdiscover.errors.MissingExtensionError`.
    """

    def __init__(self, runtime: Optional[DiscoveryRuntime] = None) -> None:
        self.runtime = runtime if runtime is not None else get_runtime()

    def get(self, name: str, singleton: bool = False) -> Optional[Any]:
        registry = self.runtime.capability(name)
        return registry.singleton() if singleton else registry.discover()

    def cache(self, singleton: bool = False) -> Optional[Any]:
        return self.get(CACHE.name, singleton)

    def container(self, singleton: bool = False) -> Optional[Any]:
        return self.get(CONTAINER.name, singleton)

    def event_dispatcher(self, singleton: bool = False) -> Optional[Any]:
        return self.get(EVENT_DISPATCHER.name, singleton)

    def http_client(self, singleton: bool = False) -> Optional[Any]:
        return self.get(HTTP_CLIENT.name, singleton)

    def http_request_factory(self, singleton: bool = False) -> Optional[Any]:
        return self.get(HTTP_REQUEST_FACTORY.name, singleton)

    def http_response_factory(self, singleton: bool = False) -> Optional[Any]:
        return self.get(HTTP_RESPONSE_FACTORY.name, singleton)

    def http_stream_factory(self, singleton: bool = False) -> Optional[Any]:
        return self.get(HTTP_STREAM_FACTORY.name, singleton)

    def log(self, singleton: bool = False) -> Optional[Any]:
        return self.get(LOG.name, singleton)


__all__ = ["Discover"]
