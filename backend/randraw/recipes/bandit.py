"""UCB1 generator selection and bandit state persistence.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
import math
from collections.abc import Sequence
from dataclasses import dataclass

# Third-party (alphabetical)
import logfire

# Local imports (core first, then alphabetical)
from randraw.core.constants import BANDIT_KEY
from randraw.core.exceptions import MalformedPayloadError, classify_error
from randraw.core.models import BanditState
from randraw.core.outcome import Ok, Unavailable
from randraw.core.protocols import KeyValueStore
from randraw.infra.logging import get_logger

from .catalog import ALL_GENERATORS

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("ArmSummary", "BanditRepository", "Ucb1Policy")

MAX_REPEAT_RETRIES = 2

logger = get_logger("recipes.bandit")


# =============================================================================
# Section 9: Dataclasses
# =============================================================================
@dataclass(frozen=True, slots=True)
class ArmSummary:
    generator_id: str
    pulls: int
    average: float


# =============================================================================
# Section 11: Classes
# =============================================================================
class Ucb1Policy:
    """Upper-confidence-bound selection over a fixed set of arms.

    Arms never pulled rank first, in catalog order. The rest rank by
    ``mean + sqrt(2 * ln(total_pulls) / pulls)``, highest first, with catalog
    order breaking ties.
    """

    def __init__(self, arms: Sequence[str] = ALL_GENERATORS) -> None:
        if not arms:
            raise ValueError("Ucb1Policy needs at least one arm")
        self.arms = tuple(arms)

    def score(self, state: BanditState, generator_id: str) -> float:
        stats = state.stats_for(generator_id)
        if stats.pulls == 0:
            return math.inf
        total = max(1, self._total_pulls(state))
        return stats.mean_reward + math.sqrt(2 * math.log(total) / stats.pulls)

    def rank(self, state: BanditState) -> list[str]:
        """All arms, best candidate first."""
        order = {name: position for position, name in enumerate(self.arms)}

        def key(name: str) -> tuple[bool, float, int]:
            pulled = state.stats_for(name).pulls > 0
            return (pulled, -self.score(state, name) if pulled else 0.0, order[name])

        return sorted(self.arms, key=key)

    def choose(self, state: BanditState, previous: str | None = None) -> str:
        """Best arm, stepping down the ranking when it repeats ``previous``."""
        ranked = self.rank(state)
        position = 0
        retries = 0
        while ranked[position] == previous and retries < MAX_REPEAT_RETRIES and position + 1 < len(ranked):
            position += 1
            retries += 1
        return ranked[position]

    def summary(self, state: BanditState) -> list[ArmSummary]:
        """Arms by observed average reward, best first."""
        rows = [
            ArmSummary(name, state.stats_for(name).pulls, state.stats_for(name).mean_reward) for name in self.arms
        ]
        return sorted(rows, key=lambda row: row.average, reverse=True)

    def _total_pulls(self, state: BanditState) -> int:
        return sum(state.stats_for(name).pulls for name in self.arms)


# =============================================================================
# Persistence
# =============================================================================
@dataclass
class BanditRepository:
    """Loads and saves ``BanditState`` through any key-value store.

    Example:
        >>> repo = BanditRepository(FileKeyValueStore('~/.randraw/brain.json'))
        >>> state = await repo.record('waves', 0.8)
    """

    store: KeyValueStore
    key: str = BANDIT_KEY

    async def load(self) -> BanditState:
        """Current state; unavailable or malformed data reads as empty."""
        outcome = await self.store.get(self.key)
        if isinstance(outcome, Unavailable):
            logger.warning("bandit_state_unavailable", key=self.key, reason=outcome.reason)
            return BanditState()
        if outcome.value is None:
            return BanditState()
        try:
            return self._decode(outcome.value)
        except MalformedPayloadError as exc:
            category, strategy = classify_error(exc)
            logger.warning("bandit_state_malformed", key=self.key, error=str(exc), category=category, strategy=strategy)
            return BanditState()

    def _decode(self, raw: str) -> BanditState:
        try:
            return BanditState.from_json(raw)
        except ValueError as exc:
            raise MalformedPayloadError(self.key, str(exc)) from exc

    async def save(self, state: BanditState) -> Ok[None] | Unavailable:
        return await self.store.set(self.key, state.to_json())

    async def record(self, generator_id: str, reward: float) -> Ok[BanditState] | Unavailable:
        """Merge one reward and write the state back (last write wins)."""
        with logfire.span("bandit.record", generator=generator_id, reward=reward):
            state = (await self.load()).record(generator_id, reward)
            saved = await self.save(state)
            if isinstance(saved, Unavailable):
                return saved
            return Ok(state)
