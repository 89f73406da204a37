"""Tests for UCB1 selection and bandit persistence.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

import math

import pytest

from randraw.adapters.kv import DisabledKeyValueStore, InMemoryKeyValueStore
from randraw.core.constants import BANDIT_KEY
from randraw.core.models import ArmStats, BanditState
from randraw.core.outcome import Ok, Unavailable
from randraw.recipes.bandit import BanditRepository, Ucb1Policy
from randraw.recipes.catalog import ALL_GENERATORS

__all__ = ()


def _state(**arms: tuple[int, float]) -> BanditState:
    return BanditState(arms={name: ArmStats(pulls=p, reward_sum=s) for name, (p, s) in arms.items()})


class TestUcb1Policy:
    """Tests for arm selection."""

    def test_untried_arm_wins(self) -> None:
        """An arm never pulled beats a well-rewarded one."""
        policy = Ucb1Policy(("A", "B"))

        assert policy.choose(_state(B=(5, 4.0))) == "A"

    def test_empty_state_follows_catalog_order(self) -> None:
        """With no data the first catalog arm is chosen."""
        assert Ucb1Policy().choose(BanditState()) == ALL_GENERATORS[0]

    def test_score_formula(self) -> None:
        """Scores are mean plus the exploration bonus."""
        policy = Ucb1Policy(("A", "B"))
        state = _state(A=(2, 1.0), B=(8, 6.0))

        assert policy.score(state, "A") == pytest.approx(0.5 + math.sqrt(2 * math.log(10) / 2))
        assert policy.score(state, "C") == math.inf

    def test_ties_break_by_catalog_order(self) -> None:
        """Equal scores keep catalog order."""
        policy = Ucb1Policy(("A", "B", "C"))

        assert policy.rank(_state(A=(3, 1.5), B=(3, 1.5), C=(3, 1.5))) == ["A", "B", "C"]

    def test_repeat_steps_down_the_ranking(self) -> None:
        """The best arm is skipped when it repeats the previous cycle."""
        policy = Ucb1Policy(("A", "B", "C"))
        state = _state(A=(4, 4.0), B=(4, 2.0), C=(4, 0.0))

        assert policy.choose(state) == "A"
        assert policy.choose(state, previous="A") == "B"
        assert policy.choose(state, previous="B") == "A"

    def test_single_arm_repeats(self) -> None:
        """With one arm a repeat cannot be avoided."""
        assert Ucb1Policy(("A",)).choose(_state(A=(1, 1.0)), previous="A") == "A"

    def test_requires_arms(self) -> None:
        """A policy without arms is a configuration error."""
        with pytest.raises(ValueError):
            Ucb1Policy(())

    def test_summary_orders_by_average(self) -> None:
        """The summary lists the best average first."""
        rows = Ucb1Policy(("A", "B")).summary(_state(A=(2, 0.4), B=(2, 1.6)))

        assert [row.generator_id for row in rows] == ["B", "A"]
        assert rows[0].average == 0.8


class TestBanditRepository:
    """Tests for persistence through a key-value store."""

    @pytest.mark.anyio
    async def test_record_merges_and_saves(self, memory_store: InMemoryKeyValueStore) -> None:
        """Rewards accumulate in the stored state."""
        repository = BanditRepository(memory_store)

        await repository.record("waves", 0.5)
        outcome = await repository.record("waves", 1.0)

        assert isinstance(outcome, Ok)
        stored = BanditState.from_json(memory_store.snapshot()[BANDIT_KEY])
        assert stored.stats_for("waves") == ArmStats(pulls=2, reward_sum=1.5, reward_squared_sum=1.25)

    @pytest.mark.anyio
    async def test_malformed_state_reads_empty(self) -> None:
        """Corrupt state is treated as empty and overwritten."""
        store = InMemoryKeyValueStore({BANDIT_KEY: "{broken"})
        repository = BanditRepository(store)

        assert await repository.load() == BanditState()
        await repository.record("city", 0.2)
        assert (await repository.load()).stats_for("city").pulls == 1

    @pytest.mark.anyio
    async def test_unavailable_store(self) -> None:
        """Unavailable stores read as empty and report failed writes."""
        repository = BanditRepository(DisabledKeyValueStore())

        assert await repository.load() == BanditState()
        assert isinstance(await repository.record("city", 0.2), Unavailable)
