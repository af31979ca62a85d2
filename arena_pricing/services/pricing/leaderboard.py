"""Arena leaderboard rows: parsing, pricing lookup and value sorting."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Literal

import httpx
from bs4 import BeautifulSoup, Tag

from arena_pricing.config import settings
from arena_pricing.services.pricing.catalog import ContextCatalog, PricingCatalog
from arena_pricing.services.pricing.matching import resolve, resolve_context
from arena_pricing.services.pricing.scoring import ELO_BASELINE, RANK_DECAY_BASE, score_record
from arena_pricing.services.pricing.types import ContextRecord, PricingRecord

logger = logging.getLogger(__name__)

ARENA_REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    )
}
SCORE_HEADER_TEXTS = frozenset({"arena score", "elo", "score"})

SortColumn = Literal["pricing", "value", "context"]
SortDirection = Literal["asc", "desc"]


@dataclass(slots=True)
class LeaderboardRow:
    """One leaderboard table row as displayed."""

    model_name: str
    arena_score: float | None = None
    rank: int = 1


@dataclass(slots=True)
class RowValuation:
    """Pricing/context lookups and value score for a leaderboard row."""

    row: LeaderboardRow
    position: int
    pricing: PricingRecord | None = None
    context: ContextRecord | None = None
    value_score: float | None = None

    @property
    def total_cost_per_1m(self) -> float | None:
        if self.pricing is None:
            return None
        return self.pricing.total_cost_per_1m

    @property
    def context_length(self) -> int | None:
        if self.context is None:
            return None
        return self.context.context_length

    def to_dict(self) -> dict[str, Any]:
        """Serialize valuation to JSON-compatible dict."""
        return {
            "rank": self.row.rank,
            "model": self.row.model_name,
            "arena_score": self.row.arena_score,
            "pricing": (
                {
                    "source_model_name": self.pricing.source_model_name,
                    "input_cost_per_1m": self.pricing.input_cost_per_1m,
                    "output_cost_per_1m": self.pricing.output_cost_per_1m,
                }
                if self.pricing is not None
                else None
            ),
            "value_score": self.value_score,
            "context_length": self.context_length,
            "input_modalities": sorted(self.context.input_modalities) if self.context else None,
            "output_modalities": sorted(self.context.output_modalities) if self.context else None,
        }


class ArenaLeaderboardClient:
    """Fetches leaderboard HTML."""

    def __init__(self, url: str | None = None, timeout_seconds: int | None = None) -> None:
        self.url = url or settings.arena_leaderboard_url
        self.timeout_seconds = timeout_seconds or settings.provider_timeout_seconds

    async def fetch_html(self) -> tuple[str | None, dict[str, Any]]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(self.url, headers=ARENA_REQUEST_HEADERS)
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                "Arena leaderboard fetch failed",
                extra={"url": self.url, "error": str(exc)},
            )
            return None, {"source": "arena", "ok": False, "url": self.url, "error": str(exc)}

        return response.text, {"source": "arena", "ok": True, "url": self.url}


def parse_leaderboard_rows(html: str) -> list[LeaderboardRow]:
    """Parse ``table tbody tr`` rows into leaderboard rows.

    The model and score columns are located from the header row ("model",
    "arena score"/"elo"/"score"). Without a matching header the model is read
    from the first cell and the score is left empty.
    """
    soup = BeautifulSoup(html, "html.parser")
    rows: list[LeaderboardRow] = []

    for table in soup.find_all("table"):
        header_cells = _header_cells(table)
        model_index = find_model_column_index(header_cells)
        score_index = find_score_column_index(header_cells)

        body = table.find("tbody") or table
        for tr in body.find_all("tr"):
            cells = tr.find_all("td")
            if not cells:
                continue

            model_cell = cells[model_index] if model_index < len(cells) else cells[0]
            model_name = extract_model_name(model_cell)
            if not model_name:
                continue

            arena_score = None
            if score_index is not None and score_index < len(cells):
                arena_score = parse_score_from_text(cells[score_index].get_text(" ", strip=True))

            rank = 1
            if model_index != 0:
                rank = parse_rank_from_text(cells[0].get_text(" ", strip=True))

            rows.append(LeaderboardRow(model_name=model_name, arena_score=arena_score, rank=rank))

    return rows


def _header_cells(table: Tag) -> list[str]:
    thead = table.find("thead")
    header_row = thead.find("tr") if isinstance(thead, Tag) else None
    if header_row is None:
        first_row = table.find("tr")
        if isinstance(first_row, Tag) and first_row.find("th"):
            header_row = first_row
    if not isinstance(header_row, Tag):
        return []
    return [
        cell.get_text(" ", strip=True).lower()
        for cell in header_row.find_all(["th", "td"])
    ]


def find_model_column_index(header_cells: list[str]) -> int:
    for index, text in enumerate(header_cells):
        if "model" in text:
            return index
    return 0


def find_score_column_index(header_cells: list[str]) -> int | None:
    for index, text in enumerate(header_cells):
        if text in SCORE_HEADER_TEXTS or "arena" in text or "elo" in text:
            return index
    return None


def extract_model_name(cell: Tag) -> str:
    """Prefer link text, then span text, then the whole cell."""
    for selector in ("a", "span"):
        nested = cell.find(selector)
        if isinstance(nested, Tag):
            return nested.get_text(strip=True)
    return cell.get_text(" ", strip=True)


def parse_score_from_text(text: str) -> float | None:
    """Parse leaderboard score value from text ("1289 ±9" -> 1289.0)."""
    match = re.search(r"([0-9]+(?:\.[0-9]+)?)", text)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_rank_from_text(text: str) -> int:
    """Digits-only rank ("🥇 1" -> 1); anything unusable ranks first."""
    digits = re.sub(r"[^0-9]", "", text)
    if not digits:
        return 1
    rank = int(digits)
    return rank if rank > 0 else 1


def value_row(
    row: LeaderboardRow,
    pricing_catalog: PricingCatalog,
    context_catalog: ContextCatalog | None = None,
    *,
    position: int = 0,
    baseline: float = ELO_BASELINE,
    rank_decay_base: float = RANK_DECAY_BASE,
) -> RowValuation:
    """Look up pricing and context for a row and compute its value score."""
    pricing = resolve(pricing_catalog, row.model_name)
    context = resolve_context(context_catalog, row.model_name) if context_catalog else None
    return RowValuation(
        row=row,
        position=position,
        pricing=pricing,
        context=context,
        value_score=score_record(
            row.arena_score,
            pricing,
            row.rank,
            baseline=baseline,
            rank_decay_base=rank_decay_base,
        ),
    )


def value_rows(
    rows: list[LeaderboardRow],
    pricing_catalog: PricingCatalog,
    context_catalog: ContextCatalog | None = None,
    *,
    baseline: float | None = None,
    rank_decay_base: float | None = None,
) -> list[RowValuation]:
    resolved_baseline = settings.value_elo_baseline if baseline is None else baseline
    resolved_decay = settings.value_rank_decay_base if rank_decay_base is None else rank_decay_base
    valuations = [
        value_row(
            row,
            pricing_catalog,
            context_catalog,
            position=position,
            baseline=resolved_baseline,
            rank_decay_base=resolved_decay,
        )
        for position, row in enumerate(rows)
    ]
    matched = sum(1 for valuation in valuations if valuation.pricing is not None)
    logger.info(
        "Valued leaderboard rows",
        extra={"rows": len(valuations), "priced": matched, "unpriced": len(valuations) - matched},
    )
    return valuations


def sort_valuations(
    valuations: list[RowValuation],
    column: SortColumn,
    direction: SortDirection | None,
) -> list[RowValuation]:
    """Sort by a derived column; rows without a value always go last.

    ``direction=None`` restores the original leaderboard order.
    """
    if direction is None:
        return sorted(valuations, key=lambda valuation: valuation.position)

    def sort_value(valuation: RowValuation) -> float | None:
        if column == "pricing":
            return valuation.total_cost_per_1m
        if column == "value":
            return valuation.value_score
        return valuation.context_length

    present = [valuation for valuation in valuations if sort_value(valuation) is not None]
    missing = [valuation for valuation in valuations if sort_value(valuation) is None]
    present.sort(key=sort_value, reverse=direction == "desc")
    return present + missing


def next_sort_direction(
    current_column: SortColumn | None,
    current_direction: SortDirection | None,
    clicked_column: SortColumn,
) -> SortDirection | None:
    """Header click cycle: asc -> desc -> original order; a new column starts at asc."""
    if current_column != clicked_column:
        return "asc"
    if current_direction == "asc":
        return "desc"
    if current_direction == "desc":
        return None
    return "asc"
