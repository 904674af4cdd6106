"""Capability discovery: pick the first installed provider that fits."""

from .candidates import Candidate, CandidateRegistry
from .capabilities import CapabilityRegistry
from .config import DiscoveryConfig, load_config
from .discover import Discover
from .errors import (
    ConfigError,
    DiscoveryError,
    InvalidCandidateError,
    InvalidConstraintError,
    InvalidInputError,
    MissingExtensionError,
)
from .extensions import Extension, ExtensionTable
from .resolver import Resolver
from .runtime import DiscoveryRuntime, create_runtime, get_runtime
from .versions import InstalledVersionOracle, StaticVersionOracle, VersionOracle

__all__ = [
    "Candidate",
    "CandidateRegistry",
    "CapabilityRegistry",
    "ConfigError",
    "Discover",
    "DiscoveryConfig",
    "DiscoveryError",
    "DiscoveryRuntime",
    "Extension",
    "ExtensionTable",
    "InstalledVersionOracle",
    "InvalidCandidateError",
    "InvalidConstraintError",
    "InvalidInputError",
    "MissingExtensionError",
    "Resolver",
    "StaticVersionOracle",
    "VersionOracle",
    "create_runtime",
    "get_runtime",
    "load_config",
]
