"""
Credential selection strategies.

Each strategy looks at a pool's usable credentials and returns the one to
charge next, or None when every credential is disabled or saturated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from frugal.core.credentials.pool import CredentialPool, CredentialRecord

logger = structlog.stdlib.get_logger()


class SelectionStrategy(ABC):
    """Base class for selection strategies."""

    name: str

    @abstractmethod
    def choose(self, pool: CredentialPool) -> CredentialRecord | None:
        ...


class FirstEligibleStrategy(SelectionStrategy):
    """
    First usable credential in insertion order.

    Concentrates load on the earliest credentials until they hit quota,
    then spills to the next one. Predictable, not load-balancing.
    """

    name = "first_eligible"

    def choose(self, pool: CredentialPool) -> CredentialRecord | None:
        for record in pool.records:
            if pool.is_usable(record):
                return record
        return None


class LeastRecentlyUsedStrategy(SelectionStrategy):
    """
    Usable credential that was charged longest ago.

    Never-used credentials come first, in insertion order. Spreads calls
    across the pool instead of draining one credential at a time.
    """

    name = "least_recently_used"

    def choose(self, pool: CredentialPool) -> CredentialRecord | None:
        usable = pool.usable()
        if not usable:
            return None
        return min(
            usable,
            key=lambda r: (r.last_used_at is not None, r.last_used_at or 0.0),
        )


# Strategy Registry

_STRATEGIES: dict[str, SelectionStrategy] = {
    "first_eligible": FirstEligibleStrategy(),
    "least_recently_used": LeastRecentlyUsedStrategy(),
}


def get_strategy(name: str) -> SelectionStrategy:
    """Get a selection strategy by name."""
    strategy = _STRATEGIES.get(name)
    if strategy is None:
        logger.warning("credentials.unknown_strategy", strategy=name)
        return _STRATEGIES["first_eligible"]  # Safe default
    return strategy
