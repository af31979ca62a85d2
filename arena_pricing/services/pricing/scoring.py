"""Value ("bang for buck") scoring for leaderboard rows."""

from __future__ import annotations

import math

from arena_pricing.services.pricing.types import PricingRecord

# Arena score floor: models at or below it get no value score.
ELO_BASELINE = 1000.0
# Each rank keeps this fraction of the previous rank's multiplier.
RANK_DECAY_BASE = 0.85


def value_score(
    arena_score: float | None,
    input_cost_per_1m: float | None,
    output_cost_per_1m: float | None,
    rank: int | None = 1,
    *,
    baseline: float = ELO_BASELINE,
    rank_decay_base: float = RANK_DECAY_BASE,
) -> float | None:
    """Score capability per dollar with logarithmic price compression.

    ``(arena_score - baseline) / ln(1 + blended_price) * rank_decay_base ** (rank - 1)``

    The blended price is the mean of input and output cost per 1M tokens.
    Returns None when the arena score is missing or not above the baseline,
    or when the blended price is not positive (free or invalid pricing).
    """
    if arena_score is None or math.isnan(arena_score) or arena_score <= baseline:
        return None

    blended_price = ((input_cost_per_1m or 0.0) + (output_cost_per_1m or 0.0)) / 2
    if not blended_price > 0:
        return None

    base_score = (arena_score - baseline) / math.log1p(blended_price)
    safe_rank = max(int(rank or 1), 1)
    return base_score * rank_decay_base ** (safe_rank - 1)


def score_record(
    arena_score: float | None,
    record: PricingRecord | None,
    rank: int | None = 1,
    *,
    baseline: float = ELO_BASELINE,
    rank_decay_base: float = RANK_DECAY_BASE,
) -> float | None:
    """Value score for a matched pricing record; None when nothing matched."""
    if record is None:
        return None
    return value_score(
        arena_score,
        record.input_cost_per_1m,
        record.output_cost_per_1m,
        rank,
        baseline=baseline,
        rank_decay_base=rank_decay_base,
    )
