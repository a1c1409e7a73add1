"""Tunable limits for hand evaluation and scoring.

The defaults are the game's shipped values. Hosts that want different limits
(balance testing, modes) build their own ``ScoringRules`` and pass it to
``evaluate_hand`` / ``calculate_score``.
"""

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

MAX_RETRIGGER_COUNT = 10
WILD_SAMPLE_SIZE = 20


class ScoringRules(BaseModel):
    """Validated engine limits."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retrigger_count: int = Field(
        MAX_RETRIGGER_COUNT,
        ge=0,
        description="Upper clamp for retriggers on a single card.",
    )
    wild_sample_size: int = Field(
        WILD_SAMPLE_SIZE,
        ge=0,
        description="Substitution candidates tried per wild when two or more wilds are played.",
    )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> Self:
        """Build rules from a host-supplied mapping, falling back to defaults."""
        return cls.model_validate(dict(values or {}))

    def clamp_retriggers(self, count: int) -> int:
        """Clamp a retrigger count into ``[0, max_retrigger_count]``."""
        return max(0, min(count, self.max_retrigger_count))


DEFAULT_RULES = ScoringRules()
