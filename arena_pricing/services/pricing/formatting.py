"""Display helpers for pricing, context and value columns."""

from __future__ import annotations

import math
from collections.abc import Iterable

NOT_AVAILABLE = "N/A"

TOKEN_UNIT_LABELS: dict[int, str] = {
    1_000_000: "1M",
    100_000: "100K",
}

MODALITY_ORDER: tuple[str, ...] = ("text", "image", "audio", "video", "file")
MODALITY_NAMES: dict[str, str] = {
    "text": "Text",
    "image": "Image",
    "audio": "Audio",
    "video": "Video",
    "file": "File",
}


def token_unit_label(unit: int) -> str:
    return TOKEN_UNIT_LABELS.get(unit, "1M")


def convert_cost_to_unit(cost_per_1m: float, unit: int) -> float:
    """Rescale a per-1M cost to a per-``unit`` cost."""
    return cost_per_1m * (unit / 1_000_000)


def format_cost(cost: float) -> str:
    return f"{cost:.2f}"


def format_context_window(tokens: int | None) -> str:
    """Compact context size: 128000 -> 128K, 1048576 -> 1M, 2000000 -> 2M."""
    if not tokens or tokens <= 0:
        return NOT_AVAILABLE
    if tokens >= 1_000_000:
        return f"{_compact(tokens / 1_000_000)}M"
    if tokens >= 1000:
        return f"{_compact(tokens / 1000)}K"
    return str(tokens)


def _compact(value: float) -> str:
    rounded = round(value, 1)
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)


def format_modalities(modalities: Iterable[str]) -> str:
    """Display names in canonical order, "None" when empty."""
    present = set(modalities)
    names = [MODALITY_NAMES[key] for key in MODALITY_ORDER if key in present]
    names.extend(sorted(key for key in present if key not in MODALITY_NAMES))
    return ", ".join(names) if names else "None"


def format_value_score(score: float | None) -> str:
    if score is None:
        return NOT_AVAILABLE
    # Half-up, so 12.5 shows as 13.
    return str(math.floor(score + 0.5))
