"""Well-known capabilities and the extension each one expects."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class CapabilitySpec:
    name: str
    label: str
    extension: str


CACHE = CapabilitySpec("cache", "Cache", "capdiscover-cache")
CONTAINER = CapabilitySpec("container", "Container", "capdiscover-container")
EVENT_DISPATCHER = CapabilitySpec("event_dispatcher", "Event Dispatcher", "capdiscover-event-dispatcher")
HTTP_CLIENT = CapabilitySpec("http_client", "HTTP Client", "capdiscover-http-client")
HTTP_REQUEST_FACTORY = CapabilitySpec("http_request_factory", "HTTP Request Factory", "capdiscover-http-factory")
HTTP_RESPONSE_FACTORY = CapabilitySpec("http_response_factory", "HTTP Response Factory", "capdiscover-http-factory")
HTTP_STREAM_FACTORY = CapabilitySpec("http_stream_factory", "HTTP Stream Factory", "capdiscover-http-factory")
LOG = CapabilitySpec("log", "Logger", "capdiscover-log")

CATALOG: Dict[str, CapabilitySpec] = {
    spec.name: spec
    for spec in (
        CACHE,
        CONTAINER,
        EVENT_DISPATCHER,
        HTTP_CLIENT,
        HTTP_REQUEST_FACTORY,
        HTTP_RESPONSE_FACTORY,
        HTTP_STREAM_FACTORY,
        LOG,
    )
}


def lookup(name: str) -> CapabilitySpec:
    """Return the catalog entry for *name*, or a generic one for custom capabilities."""
    spec = CATALOG.get(name)
    if spec is None:
        spec = CapabilitySpec(name, name, f"capdiscover-{name.replace('_', '-')}")
    return spec


__all__ = [
    "CapabilitySpec",
    "CATALOG",
    "lookup",
    "CACHE",
    "CONTAINER",
    "EVENT_DISPATCHER",
    "HTTP_CLIENT",
    "HTTP_REQUEST_FACTORY",
    "HTTP_RESPONSE_FACTORY",
    "HTTP_STREAM_FACTORY",
    "LOG",
]
