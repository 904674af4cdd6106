import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .candidates import Candidate
from .versions import VersionOracle


@dataclass(frozen=True)
class Resolution:
    candidate: Candidate
    instance: Any


class Resolver:
    """Pick the first candidate whose installed version satisfies its constraint.

    Order is whatever the caller passes in; no version recency rule applies.
    The resolver holds no cache, memoization belongs to
    :class:`~capdiscover.capabilities.CapabilityRegistry`.
    """

    def __init__(self, oracle: VersionOracle) -> None:
        self.oracle = oracle
        self._log = logging.getLogger("capdiscover.resolver")

    def select(self, candidates: Iterable[Candidate]) -> Optional[Candidate]:
        for candidate in candidates:
            if self.oracle.satisfies(candidate.package, candidate.version):
                self._log.debug("%s satisfied", candidate)
                return candidate
            self._log.debug("%s not satisfied", candidate)
        return None

    def resolve(self, candidates: Iterable[Candidate]) -> Optional[Resolution]:
        """Build the winning candidate once, or return ``None`` when nothing matches.

        Builder exceptions propagate unchanged.
        """
        winner = self.select(candidates)
        if winner is None:
            return None
        return Resolution(winner, winner.build())

    def explain(self, candidates: Iterable[Candidate]) -> List[Dict[str, Any]]:
        report = []
        for candidate in candidates:
            report.append({
                "package": candidate.package,
                "constraint": candidate.version,
                "installed": self.oracle.installed_version(candidate.package),
                "satisfied": self.oracle.satisfies(candidate.package, candidate.version),
            })
        return report


__all__ = ["Resolver", "Resolution"]
