"""Recipe resolution: deterministic rotation, shared adaptive cache, remote service.

Every strategy agrees on the deterministic recipe for a cycle and falls back
to it whenever storage or the network fails, so a display never blocks on
anything but its own clock.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from dataclasses import dataclass, field

# Third-party (alphabetical)
import logfire
from pydantic import ValidationError

# Local imports (core first, then alphabetical)
from randraw.core.constants import COUNT_KEY, GLOBAL_SALT, LAST_GENERATOR_KEY, RECIPE_KEY_PREFIX
from randraw.core.exceptions import MalformedPayloadError, RandrawError, classify_error
from randraw.core.hashing import level_for_cycle, seed_for_cycle
from randraw.core.models import Recipe, ResolvedRecipe
from randraw.core.outcome import Ok, Unavailable
from randraw.core.protocols import KeyValueStore, RecipeSourceProtocol
from randraw.core.settings import RandrawSettings
from randraw.adapters.services import ServiceClient
from randraw.infra.instrumentation import Metrics
from randraw.infra.logging import get_logger
from randraw.planner.primitives import palette_id_for_seed

from .bandit import BanditRepository, Ucb1Policy
from .catalog import ALL_GENERATORS, CATEGORIES

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = (
    "AdaptiveResolver",
    "DeterministicResolver",
    "RecipeResolver",
    "ServiceRecipeResolver",
    "build_recipe",
    "deterministic_generator",
    "recipe_key",
    "resolve_deterministic",
)

logger = get_logger("recipes.resolver")


# =============================================================================
# Section 12: Functions
# =============================================================================
def recipe_key(cycle_index: int) -> str:
    return f"{RECIPE_KEY_PREFIX}{cycle_index}"


def deterministic_generator(cycle_index: int) -> str:
    """Rotate through the categories, then through each category's members."""
    bucket = CATEGORIES[cycle_index % len(CATEGORIES)]
    return bucket[(cycle_index // len(CATEGORIES)) % len(bucket)]


def build_recipe(cycle_index: int, generator_id: str, salt: int = GLOBAL_SALT) -> Recipe:
    """Recipe for ``generator_id`` with the cycle's seed, level and palette."""
    seed = seed_for_cycle(cycle_index, salt)
    return Recipe(
        cycle_index=cycle_index,
        seed=seed,
        generator_id=generator_id,
        palette_id=palette_id_for_seed(seed),
        level=level_for_cycle(cycle_index),
    )


def resolve_deterministic(cycle_index: int, salt: int = GLOBAL_SALT, *, degraded: bool = False) -> ResolvedRecipe:
    """Pure fallback recipe; every client computes the same value."""
    return ResolvedRecipe(
        recipe=build_recipe(cycle_index, deterministic_generator(cycle_index), salt),
        global_count=cycle_index + 1,
        source="deterministic",
        degraded=degraded,
    )


def _decode_recipe(raw: str, cycle_index: int) -> Recipe:
    """Decode a cached recipe; raises ``MalformedPayloadError`` when it is unusable for ``cycle_index``."""
    key = recipe_key(cycle_index)
    try:
        recipe = Recipe.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedPayloadError(key, f"{exc.error_count()} validation errors") from exc
    if recipe.cycle_index != cycle_index:
        raise MalformedPayloadError(key, f"cached for cycle {recipe.cycle_index}")
    if recipe.generator_id not in ALL_GENERATORS:
        raise MalformedPayloadError(key, f"unknown generator {recipe.generator_id}")
    return recipe


def _parse_recipe(raw: str | None, cycle_index: int) -> Recipe | None:
    """Cached recipe for ``cycle_index``, or ``None`` when absent or malformed."""
    if raw is None:
        return None
    try:
        return _decode_recipe(raw, cycle_index)
    except MalformedPayloadError as exc:
        category, strategy = classify_error(exc)
        logger.warning("cached_recipe_malformed", key=exc.key, error=str(exc), category=category, strategy=strategy)
        return None


def _parse_count(outcome: Ok[str | None] | Unavailable, fallback: int) -> int:
    if isinstance(outcome, Ok) and outcome.value is not None:
        try:
            return int(outcome.value)
        except ValueError:
            pass
    return fallback


# =============================================================================
# Section 11: Classes
# =============================================================================
@dataclass
class DeterministicResolver(RecipeSourceProtocol):
    salt: int = GLOBAL_SALT

    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        return resolve_deterministic(cycle_index, self.salt)


@dataclass
class AdaptiveResolver(RecipeSourceProtocol):
    """Shared-cache resolver that picks uncached cycles with UCB1.

    The first client to resolve a cycle writes the recipe; later clients read
    it back. Writes are last-write-wins, so two clients racing on the same
    cycle may briefly disagree until the cache settles.

    Args:
        store: Shared key-value store holding recipes, the bandit state and
            the global counter.
        local_store: Optional per-client store remembering the last generator
            shown, used when the previous cycle was never cached.
    """

    store: KeyValueStore
    local_store: KeyValueStore | None = None
    policy: Ucb1Policy = field(default_factory=Ucb1Policy)
    salt: int = GLOBAL_SALT

    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        with logfire.span("resolver.adaptive", cycle_index=cycle_index) as span:
            cached = await self.store.get(recipe_key(cycle_index))
            if isinstance(cached, Unavailable):
                logger.warning("recipe_store_unavailable", cycle_index=cycle_index, reason=cached.reason)
                return resolve_deterministic(cycle_index, self.salt, degraded=True)

            recipe = _parse_recipe(cached.value, cycle_index)
            if recipe is not None:
                span.set_attribute("source", "cache")
                count = _parse_count(await self.store.get(COUNT_KEY), cycle_index + 1)
                await self._remember(recipe.generator_id)
                return ResolvedRecipe(recipe=recipe, global_count=count, source="cache")

            state = await BanditRepository(self.store).load()
            previous = await self._previous_generator(cycle_index)
            generator_id = self.policy.choose(state, previous)
            recipe = build_recipe(cycle_index, generator_id, self.salt)
            span.set_attribute("source", "policy")
            span.set_attribute("generator", generator_id)

            written = await self.store.set(recipe_key(cycle_index), recipe.model_dump_json(by_alias=True))
            if isinstance(written, Unavailable):
                logger.warning("recipe_cache_write_failed", cycle_index=cycle_index, reason=written.reason)
            counted = await self.store.increment(COUNT_KEY)
            count = counted.value if isinstance(counted, Ok) else cycle_index + 1
            await self._remember(generator_id)
            return ResolvedRecipe(recipe=recipe, global_count=count, source="policy")

    async def _previous_generator(self, cycle_index: int) -> str | None:
        outcome = await self.store.get(recipe_key(cycle_index - 1))
        if isinstance(outcome, Ok):
            previous = _parse_recipe(outcome.value, cycle_index - 1)
            if previous is not None:
                return previous.generator_id
        if self.local_store is not None:
            local = await self.local_store.get(LAST_GENERATOR_KEY)
            if isinstance(local, Ok):
                return local.value
        return None

    async def _remember(self, generator_id: str) -> None:
        if self.local_store is not None:
            await self.local_store.set(LAST_GENERATOR_KEY, generator_id)


@dataclass
class ServiceRecipeResolver(RecipeSourceProtocol):
    """Asks the recipe service, falling back to the deterministic recipe."""

    services: ServiceClient
    salt: int = GLOBAL_SALT

    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        outcome = await self.services.fetch_recipe(cycle_index)
        if isinstance(outcome, Unavailable):
            return resolve_deterministic(cycle_index, self.salt, degraded=True)
        payload = outcome.value
        recipe = payload.recipe
        if recipe is None or recipe.generator_id not in ALL_GENERATORS:
            logger.warning("service_recipe_unusable", cycle_index=cycle_index)
            return resolve_deterministic(cycle_index, self.salt, degraded=True)
        return ResolvedRecipe(
            recipe=recipe,
            global_count=payload.global_count if payload.global_count is not None else cycle_index + 1,
            source="service",
        )


class RecipeResolver:
    """Entry point used by displays and the service.

    Wraps one strategy, guarantees a recipe for every cycle and records how
    each one was obtained.

    Example:
        >>> resolver = RecipeResolver.from_settings(settings, store=shared_store)
        >>> resolved = await resolver.resolve(42)
        >>> resolved.recipe.generator_id
        'meadow'
    """

    def __init__(self, strategy: RecipeSourceProtocol, *, salt: int = GLOBAL_SALT) -> None:
        self.strategy = strategy
        self.salt = salt
        self.last_generator: str | None = None

    @classmethod
    def from_settings(
        cls,
        settings: RandrawSettings,
        *,
        store: KeyValueStore | None = None,
        local_store: KeyValueStore | None = None,
        services: ServiceClient | None = None,
    ) -> RecipeResolver:
        """Pick the strategy named by ``settings.mode``; missing collaborators mean deterministic."""
        strategy: RecipeSourceProtocol
        if settings.mode == "adaptive" and store is not None:
            strategy = AdaptiveResolver(store, local_store=local_store, salt=settings.global_salt)
        elif settings.mode == "service" and services is not None:
            strategy = ServiceRecipeResolver(services, salt=settings.global_salt)
        else:
            if settings.mode != "deterministic":
                logger.warning("resolver_mode_unavailable", mode=settings.mode)
            strategy = DeterministicResolver(settings.global_salt)
        return cls(strategy, salt=settings.global_salt)

    async def resolve(self, cycle_index: int) -> ResolvedRecipe:
        try:
            resolved = await self.strategy.resolve(cycle_index)
        except RandrawError as exc:
            category, strategy = classify_error(exc)
            logger.warning(
                "resolver_failed", cycle_index=cycle_index, error=str(exc), category=category, strategy=strategy
            )
            resolved = resolve_deterministic(cycle_index, self.salt, degraded=True)
        recipe = resolved.recipe
        if recipe.generator_id == self.last_generator:
            logger.info("recipe_repeats_previous", cycle_index=cycle_index, generator=recipe.generator_id)
        self.last_generator = recipe.generator_id
        Metrics.record_recipe(cycle_index, recipe.generator_id, resolved.source, resolved.degraded)
        return resolved
