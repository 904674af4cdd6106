"""Exception hierarchy for capability discovery."""


class DiscoveryError(Exception):
    """Base class for every error raised by capdiscover."""


class InvalidInputError(DiscoveryError, ValueError):
    """A collection or constraint was built from malformed input."""


class InvalidCandidateError(InvalidInputError, TypeError):
    """An element is not a well-formed :class:`~capdiscover.candidates.Candidate`."""


class InvalidConstraintError(InvalidInputError):
    def __init__(self, constraint: str, reason: str = "") -> None:
        self.constraint = constraint
        msg = f"invalid version constraint {constraint!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class MissingExtensionError(DiscoveryError, LookupError):
    """No extension supplies candidates for a capability.

    This is a configuration problem, raised on each call; registering the
    extension later makes the next call succeed.
    """

    MSG_PACKAGE_REQUIRED = "Discovery of {label} implementations requires the {package} package"

    def __init__(self, capability: str, label: str, package: str) -> None:
        self.capability = capability
        self.package = package.strip()
        super().__init__(self.MSG_PACKAGE_REQUIRED.format(label=label.strip(), package=self.package))


class ConfigError(DiscoveryError):
    """Configuration could not be read or applied."""


__all__ = [
    "DiscoveryError",
    "InvalidInputError",
    "InvalidCandidateError",
    "InvalidConstraintError",
    "MissingExtensionError",
    "ConfigError",
]
