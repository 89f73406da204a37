"""Core domain models for randraw.

These models describe the schedule, the per-cycle recipe, the stroke plan and
the learning state shared between clients. Wire payloads use camelCase keys
so that every client and the service agree on one JSON shape.

All models are immutable by default (frozen=True) to prevent accidental mutation.
"""
from __future__ import annotations

import json
from typing import Self

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .constants import UINT32_MASK
from .types import Color, CycleIndex, RecipeSource, Seed

__all__ = [
    # Schedule
    'CycleInfo',
    # Recipes
    'Recipe',
    'ResolvedRecipe',
    # Plans
    'Segment',
    'Plan',
    # Learning
    'ArmStats',
    'BanditState',
    # Wire models
    'TimeResponse',
    'RecipeResponse',
    'FeedbackRequest',
    'FeedbackResponse',
    # Status
    'DisplayStatus',
]

_HEX_COLOR_PATTERN = r'^#[0-9a-fA-F]{6}$'


class _WireModel(BaseModel):
    """Frozen model serialized with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
    )


# =============================================================================
# Schedule Models
# =============================================================================
class CycleInfo(BaseModel):
    """Position of a timestamp inside the global schedule."""

    model_config = ConfigDict(frozen=True)

    cycle_index: CycleIndex = Field(..., description='Zero-based cycle counted from the epoch')
    in_drawing_phase: bool = Field(..., description='Whether the cycle is still revealing strokes')
    progress: float = Field(..., ge=0.0, le=1.0, description='Fraction of the drawing phase elapsed')
    phase_remaining_ms: int = Field(..., ge=0, description='Cooldown time left; zero while drawing')


# =============================================================================
# Recipe Models
# =============================================================================
class Recipe(_WireModel):
    """Minimal description needed to reproduce one cycle's artwork.

    The wire form also accepts the short keys (``i``, ``generator``,
    ``palette``) served by earlier deployments.
    """

    cycle_index: CycleIndex = Field(
        ..., validation_alias=AliasChoices('cycleIndex', 'cycle_index', 'i'), description='Cycle this recipe draws'
    )
    seed: Seed = Field(..., ge=0, le=UINT32_MASK, description='32-bit seed for every random choice')
    generator_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices('generatorId', 'generator_id', 'generator'),
        description='Registered generator name',
    )
    palette_id: int = Field(
        ..., ge=0, validation_alias=AliasChoices('paletteId', 'palette_id', 'palette'), description='Palette index'
    )
    level: int = Field(default=0, description='Sophistication level of the cycle')


class ResolvedRecipe(BaseModel):
    """Recipe together with how it was obtained."""

    model_config = ConfigDict(frozen=True)

    recipe: Recipe
    global_count: int = Field(..., description='Displayed count of cycles drawn worldwide')
    source: RecipeSource = Field(..., description='Which strategy produced the recipe')
    degraded: bool = Field(default=False, description='Whether a fallback replaced the configured strategy')


# =============================================================================
# Plan Models
# =============================================================================
class Segment(BaseModel):
    """Single stroke primitive between two points."""

    model_config = ConfigDict(frozen=True)

    x1: float
    y1: float
    x2: float
    y2: float
    width: float = Field(..., gt=0.0)
    opacity: float = Field(..., ge=0.0, le=1.0)
    color: Color = Field(..., pattern=_HEX_COLOR_PATTERN)


class Plan(BaseModel):
    """Ordered strokes for one recipe at one canvas size.

    Index order is reveal order.
    """

    model_config = ConfigDict(frozen=True)

    generator_id: str = Field(..., min_length=1)
    background_color: Color = Field(..., pattern=_HEX_COLOR_PATTERN)
    palette_colors: tuple[Color, ...] = Field(..., min_length=1)
    segments: tuple[Segment, ...] = Field(default=())

    @model_validator(mode='after')
    def validate_background(self) -> Self:
        """Background is the first palette entry."""
        if self.palette_colors[0] != self.background_color:
            raise ValueError('background_color must be the first palette color')
        return self

    def with_segments(self, segments: tuple[Segment, ...] | list[Segment]) -> Plan:
        """Return a copy carrying a different stroke sequence."""
        return self.model_copy(update={'segments': tuple(segments)})

    def __len__(self) -> int:
        return len(self.segments)


# =============================================================================
# Learning Models
# =============================================================================
class ArmStats(_WireModel):
    """Observed rewards for one generator."""

    pulls: int = Field(default=0, ge=0)
    reward_sum: float = Field(default=0.0, ge=0.0)
    reward_squared_sum: float = Field(
        default=0.0, ge=0.0, validation_alias=AliasChoices('rewardSquaredSum', 'reward_squared_sum', 'rewardSq')
    )

    @computed_field
    @property
    def mean_reward(self) -> float:
        return self.reward_sum / self.pulls if self.pulls else 0.0

    def updated(self, reward: float) -> ArmStats:
        """Return stats with one more pull, clamping the reward to [0, 1]."""
        clamped = max(0.0, min(1.0, reward))
        return ArmStats(
            pulls=self.pulls + 1,
            reward_sum=self.reward_sum + clamped,
            reward_squared_sum=self.reward_squared_sum + clamped * clamped,
        )


class BanditState(BaseModel):
    """Per-generator reward statistics."""

    model_config = ConfigDict(frozen=True)

    arms: dict[str, ArmStats] = Field(default_factory=dict)

    @property
    def total_pulls(self) -> int:
        return sum(arm.pulls for arm in self.arms.values())

    def stats_for(self, generator_id: str) -> ArmStats:
        return self.arms.get(generator_id, ArmStats())

    def record(self, generator_id: str, reward: float) -> BanditState:
        """Return state with one reward merged into ``generator_id``."""
        arms = dict(self.arms)
        arms[generator_id] = self.stats_for(generator_id).updated(reward)
        return BanditState(arms=arms)

    def to_json(self) -> str:
        """Serialize as ``{generator: {pulls, rewardSum, rewardSquaredSum}}``."""
        return json.dumps(
            {name: arm.model_dump(by_alias=True, exclude={'mean_reward'}) for name, arm in self.arms.items()},
            sort_keys=True,
        )

    @classmethod
    def from_json(cls, raw: str) -> BanditState:
        """Parse the wire form; raises ``ValueError`` on malformed input."""
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError('bandit state must be a JSON object')
        return cls(arms={str(name): ArmStats.model_validate(stats) for name, stats in data.items()})


# =============================================================================
# Wire Models
# =============================================================================
class TimeResponse(_WireModel):
    """Time oracle response."""

    server_now: int = Field(..., description='Authoritative epoch milliseconds')


class RecipeResponse(_WireModel):
    """Recipe service response."""

    ok: bool
    recipe: Recipe | None = None
    global_count: int | None = None
    error: str | None = None


class FeedbackRequest(_WireModel):
    """Reward report for one completed cycle."""

    cycle_index: CycleIndex = Field(..., validation_alias=AliasChoices('cycleIndex', 'cycle_index', 'i'))
    generator_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices('generatorId', 'generator_id', 'generator')
    )
    reward: float

    @field_validator('reward')
    @classmethod
    def clamp_reward(cls, v: float) -> float:
        """Rewards are merged clamped to [0, 1]."""
        return max(0.0, min(1.0, v))


class FeedbackResponse(_WireModel):
    """Feedback service response."""

    ok: bool
    stored: bool = False
    error: str | None = None


# =============================================================================
# Status Models
# =============================================================================
class DisplayStatus(BaseModel):
    """Non-blocking status indicator for the display."""

    model_config = ConfigDict(frozen=True)

    degraded: bool = False
    message: str | None = None
    generator_id: str | None = None
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    global_count: int | None = None
