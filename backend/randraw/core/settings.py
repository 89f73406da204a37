"""Settings for randraw.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from datetime import datetime

# Third-party (alphabetical)
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Local imports (core first, then alphabetical)
from .constants import (
    DEFAULT_COOLDOWN_MS,
    DEFAULT_DRAW_MS,
    DEFAULT_EPOCH_ISO,
    DEFAULT_RESOLVE_TIMEOUT_MS,
    DEFAULT_SAFETY_MARGIN,
    GLOBAL_SALT,
    MAX_SEGMENTS,
    MIN_SEGMENTS,
)
from .types import ResolverMode

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("KvSettings", "RandrawSettings")


# =============================================================================
# Section 11: Classes
# =============================================================================
class RandrawSettings(BaseSettings):
    """Display and service settings.

    Environment variables are prefixed with RANDRAW_.
    """

    model_config = SettingsConfigDict(
        env_prefix="RANDRAW_",
        env_file=".env",
        extra="ignore",
        validate_default=True,
    )

    environment: str = Field(default="development", description="Deployment environment name")
    epoch_iso: str = Field(default=DEFAULT_EPOCH_ISO, description="Instant cycle zero starts")
    draw_ms: int = Field(default=DEFAULT_DRAW_MS, gt=0, description="Drawing phase duration")
    cooldown_ms: int = Field(default=DEFAULT_COOLDOWN_MS, ge=0, description="Cooldown phase duration")
    global_salt: int = Field(default=GLOBAL_SALT, ge=0, description="Salt mixed into every cycle seed")
    mode: ResolverMode = Field(default="deterministic", description="Recipe resolution strategy")
    api_base_url: str = Field(default="http://localhost:8000", description="Base URL of the randraw service")
    http_timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    frame_interval_ms: int = Field(default=16, gt=0, description="Delay between render ticks")
    resolve_timeout_ms: int = Field(
        default=DEFAULT_RESOLVE_TIMEOUT_MS, gt=0, description="Wait for a recipe before drawing the fallback"
    )
    safety_margin: float = Field(default=DEFAULT_SAFETY_MARGIN, gt=0, le=1, description="Fraction of budget used")
    min_segments: int = Field(default=MIN_SEGMENTS, ge=1, description="Lower bound of the segment budget")
    max_segments: int = Field(default=MAX_SEGMENTS, ge=1, description="Upper bound of the segment budget")
    bandit_path: str = Field(default="~/.randraw/brain.json", description="Local bandit state file")
    recipe_ttl_seconds: int | None = Field(default=None, ge=1, description="Optional expiry for cached recipes")

    @field_validator("epoch_iso")
    @classmethod
    def validate_epoch(cls, v: str) -> str:
        """Epoch must parse as ISO-8601."""
        datetime.fromisoformat(v.replace("Z", "+00:00"))
        return v

    @property
    def epoch_ms(self) -> int:
        """Epoch as Unix milliseconds."""
        parsed = datetime.fromisoformat(self.epoch_iso.replace("Z", "+00:00"))
        return round(parsed.timestamp() * 1000)


class KvSettings(BaseSettings):
    """Settings for the REST key-value store.

    Environment variables are prefixed with KV_REST_API_.
    """

    model_config = SettingsConfigDict(env_prefix="KV_REST_API_", env_file=".env", extra="ignore")

    url: str | None = Field(default=None, description="Base URL of the REST key-value service")
    token: str | None = Field(default=None, description="Bearer token for the key-value service")

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.token)
