"""Module-level constants for randraw.

All constants are declared with Final type annotation for immutability
and IDE support.
"""
from __future__ import annotations

from typing import Final

# =============================================================================
# Section 1: Module Exports
# =============================================================================
__all__ = [
    # Schedule
    'DEFAULT_EPOCH_ISO',
    'DEFAULT_DRAW_MS',
    'DEFAULT_COOLDOWN_MS',
    'DEFAULT_RESOLVE_TIMEOUT_MS',
    'LEVEL_CYCLES',
    # Hashing
    'GLOBAL_SALT',
    'MIX_PRE_XOR',
    'MIX_MULTIPLIER',
    'LEVEL_SALT_MULTIPLIER',
    'UINT32_MASK',
    # Store keys
    'RECIPE_KEY_PREFIX',
    'BANDIT_KEY',
    'COUNT_KEY',
    'LAST_GENERATOR_KEY',
    'LOCAL_BANDIT_KEY',
    # Governor
    'DEFAULT_SAFETY_MARGIN',
    'MIN_SEGMENTS',
    'MAX_SEGMENTS',
    'MIN_OPS_PER_SEGMENT',
    'THIN_KEEP_FRACTION',
    'MAX_COMPLEXITY',
    'DEFAULT_THROUGHPUT',
    'BENCHMARK_STROKES',
    # Scoring
    'THUMBNAIL_SIZE',
    # Collections
    'PALETTES',
]

# =============================================================================
# Section 2: Schedule Constants
# =============================================================================
DEFAULT_EPOCH_ISO: Final[str] = '2024-01-01T00:00:00.000Z'
DEFAULT_DRAW_MS: Final[int] = 40_000
DEFAULT_COOLDOWN_MS: Final[int] = 0
DEFAULT_RESOLVE_TIMEOUT_MS: Final[int] = 5_000
LEVEL_CYCLES: Final[int] = 12  # cycles per sophistication level

# =============================================================================
# Section 3: Hashing Constants
# =============================================================================
GLOBAL_SALT: Final[int] = 0x85EBCA6B
MIX_PRE_XOR: Final[int] = 0x9E37
MIX_MULTIPLIER: Final[int] = 2654435761
LEVEL_SALT_MULTIPLIER: Final[int] = 0x27D4EB2D
UINT32_MASK: Final[int] = 0xFFFFFFFF

# =============================================================================
# Section 4: Store Keys
# =============================================================================
RECIPE_KEY_PREFIX: Final[str] = 'randraw:recipe:'
BANDIT_KEY: Final[str] = 'randraw:bandit'
COUNT_KEY: Final[str] = 'randraw:count'
LAST_GENERATOR_KEY: Final[str] = 'randraw_last_gen'
LOCAL_BANDIT_KEY: Final[str] = 'randraw_brain_v1'

# =============================================================================
# Section 5: Governor Constants
# =============================================================================
DEFAULT_SAFETY_MARGIN: Final[float] = 0.85
MIN_SEGMENTS: Final[int] = 300
MAX_SEGMENTS: Final[int] = 7000
MIN_OPS_PER_SEGMENT: Final[float] = 8.0
THIN_KEEP_FRACTION: Final[float] = 0.6
MAX_COMPLEXITY: Final[float] = 2.0
DEFAULT_THROUGHPUT: Final[float] = 10.0  # strokes per ms when the benchmark fails
BENCHMARK_STROKES: Final[int] = 800

# =============================================================================
# Section 6: Scoring Constants
# =============================================================================
THUMBNAIL_SIZE: Final[int] = 128

# =============================================================================
# Section 7: Collection Constants (immutable)
# =============================================================================
PALETTES: Final[tuple[tuple[str, ...], ...]] = (
    ('#0b132b', '#1c2541', '#3a506b', '#5bc0be', '#e4f4f3'),
    ('#1b1b1b', '#4e342e', '#8d6e63', '#ffcc80', '#ffe0b2'),
    ('#0a0a0a', '#1f4068', '#e43f5a', '#162447', '#f1f1f1'),
    ('#0a0a0a', '#262626', '#595959', '#a6a6a6', '#e6e6e6'),
    ('#001219', '#005f73', '#0a9396', '#94d2bd', '#e9d8a6'),
    ('#0a0a0a', '#2d6a4f', '#95d5b2', '#ffd166', '#ef476f'),
)
