"""Version oracles: what is installed, and does it satisfy a constraint."""

import logging
from functools import lru_cache
from importlib import metadata
from threading import Lock
from typing import Dict, Mapping, Optional, Protocol, Tuple

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from .errors import InvalidConstraintError

_log = logging.getLogger("capdiscover.versions")

ANY = ("", "*")


class VersionOracle(Protocol):
    def installed_version(self, package: str) -> Optional[str]:
        ...

    def satisfies(self, package: str, constraint: str) -> bool:
        ...


def _caret(base: Version) -> str:
    # the bound follows the precision written: ^0 -> <1.0, ^0.0 -> <0.1
    release = base.release
    if release[0] > 0 or len(release) == 1:
        upper = f"{release[0] + 1}.0"
    elif release[1] > 0 or len(release) == 2:
        upper = f"0.{release[1] + 1}"
    else:
        upper = f"0.0.{release[2] + 1}"
    return f">={base},<{upper}"


def _tilde(base: Version) -> str:
    release = list(base.release)
    if len(release) >= 3:
        upper = f"{release[0]}.{release[1] + 1}"
    else:
        upper = f"{release[0] + 1}.0"
    return f">={base},<{upper}"


def _translate(part: str) -> str:
    if part in ANY:
        return ""
    if part.startswith("^"):
        return _caret(Version(part[1:].strip()))
    if part.startswith("~") and not part.startswith("~="):
        return _tilde(Version(part[1:].strip()))
    if part[0].isdigit() or part[0] in "vV":
        if part.endswith(".*"):
            return f"=={part}"
        return f"=={Version(part)}"
    return part


@lru_cache(maxsize=256)
def parse_constraint(constraint: str) -> Tuple[SpecifierSet, ...]:
    """Parse *constraint* into alternative specifier sets.

    Accepts PEP 440 specifiers plus ``*``, bare versions, ``^1.2``,
    ``~1.2`` / ``~1.2.3`` and ``||`` between alternatives.
    """
    alternatives = []
    for alt in constraint.split("||"):
        parts = [p.strip() for p in alt.split(",")]
        try:
            translated = [_translate(p) for p in parts if p]
            alternatives.append(SpecifierSet(",".join(t for t in translated if t)))
        except (InvalidSpecifier, InvalidVersion) as exc:
            raise InvalidConstraintError(constraint, str(exc)) from exc
    return tuple(alternatives)


def version_satisfies(installed: Optional[str], constraint: str) -> bool:
    if installed is None:
        return False
    specs = parse_constraint(constraint.strip())
    try:
        version = Version(installed)
    except InvalidVersion:
        _log.debug("unparseable installed version %r", installed)
        return False
    return any(spec.contains(version, prereleases=True) for spec in specs)


class StaticVersionOracle:
    """Oracle answering from a fixed ``package -> version`` mapping."""

    def __init__(self, versions: Optional[Mapping[str, str]] = None) -> None:
        self.versions: Dict[str, str] = dict(versions or {})

    def installed_version(self, package: str) -> Optional[str]:
        return self.versions.get(package)

    def satisfies(self, package: str, constraint: str) -> bool:
        return version_satisfies(self.installed_version(package), constraint)


class InstalledVersionOracle:
    """Oracle backed by installed distribution metadata.

    Looked-up versions are memoized until :meth:`refresh`. Pinned versions
    win over metadata, which lets configuration pretend a package is (or is
    not) installed at a given version.
    """

    def __init__(self, pins: Optional[Mapping[str, str]] = None) -> None:
        self._pins: Dict[str, str] = dict(pins or {})
        self._versions: Dict[str, Optional[str]] = {}
        self._lock = Lock()

    def pin(self, package: str, version: str) -> None:
        with self._lock:
            self._pins[package] = version

    def refresh(self) -> None:
        with self._lock:
            self._versions.clear()

    def installed_version(self, package: str) -> Optional[str]:
        with self._lock:
            if package in self._pins:
                return self._pins[package]
            if package in self._versions:
                return self._versions[package]
        try:
            found: Optional[str] = metadata.version(package)
        except metadata.PackageNotFoundError:
            found = None
        with self._lock:
            self._versions[package] = found
        return found

    def satisfies(self, package: str, constraint: str) -> bool:
        return version_satisfies(self.installed_version(package), constraint)


__all__ = [
    "VersionOracle",
    "StaticVersionOracle",
    "InstalledVersionOracle",
    "parse_constraint",
    "version_satisfies",
]
