"""Annotate Arena leaderboard rows with provider pricing, context size and value scores."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from arena_pricing.config import settings
from arena_pricing.core.exceptions import ArenaPricingError, LeaderboardParseError
from arena_pricing.core.logging import setup_logging
from arena_pricing.services.pricing.formatting import (
    convert_cost_to_unit,
    format_context_window,
    format_cost,
    format_modalities,
    format_value_score,
    token_unit_label,
)
from arena_pricing.services.pricing.leaderboard import (
    ArenaLeaderboardClient,
    LeaderboardRow,
    RowValuation,
    parse_leaderboard_rows,
    sort_valuations,
    value_rows,
)
from arena_pricing.services.pricing.service import ContextService, PricingService
from arena_pricing.services.pricing.types import PricingProvider

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--version",
        action="version",
        version=f"{settings.app_name} {settings.app_version}",
    )
    parser.add_argument(
        "--provider",
        choices=[provider.value for provider in PricingProvider],
        default=settings.default_provider,
        help=f"Pricing provider (default: {settings.default_provider})",
    )
    parser.add_argument(
        "--html-file",
        help="Read leaderboard HTML from this file instead of fetching it",
    )
    parser.add_argument(
        "--token-unit",
        type=int,
        choices=[1_000_000, 100_000],
        default=settings.token_unit,
        help="Show costs per this many tokens",
    )
    parser.add_argument(
        "--sort",
        choices=["pricing", "value", "context"],
        help="Sort rows by a derived column",
    )
    parser.add_argument(
        "--desc",
        action="store_true",
        help="Sort descending instead of ascending",
    )
    parser.add_argument(
        "--format",
        choices=["table", "json", "yaml"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=0,
        help="Only print the first N rows (default: all)",
    )
    return parser.parse_args(argv)


async def load_rows(html_file: str | None) -> list[LeaderboardRow]:
    """Load leaderboard rows from disk or the live leaderboard."""
    if html_file:
        html = Path(html_file).read_text(encoding="utf-8")
    else:
        fetched, meta = await ArenaLeaderboardClient().fetch_html()
        if fetched is None:
            raise LeaderboardParseError(f"Leaderboard fetch failed: {meta.get('error')}", meta)
        html = fetched

    rows = parse_leaderboard_rows(html)
    if not rows:
        raise LeaderboardParseError("No leaderboard rows found")
    return rows


def render_table(valuations: list[RowValuation], token_unit: int) -> str:
    """Render valuations as a fixed-width text table."""
    unit_label = token_unit_label(token_unit)
    header = (
        f"{'Rank':>4}  {'Model':<40}  {'Score':>6}  "
        f"{'Price/' + unit_label + ' (in/out)':>22}  {'Value':>6}  {'Context':>7}  Modalities"
    )
    lines = [header, "-" * len(header)]
    for valuation in valuations:
        row = valuation.row
        if valuation.pricing is not None:
            input_cost = convert_cost_to_unit(valuation.pricing.input_cost_per_1m, token_unit)
            output_cost = convert_cost_to_unit(valuation.pricing.output_cost_per_1m, token_unit)
            price = f"${format_cost(input_cost)} / ${format_cost(output_cost)}"
        else:
            price = "N/A"
        score = f"{row.arena_score:.0f}" if row.arena_score is not None else "-"
        modalities = "N/A"
        if valuation.context is not None:
            modalities = (
                f"{format_modalities(valuation.context.input_modalities)}"
                f" -> {format_modalities(valuation.context.output_modalities)}"
            )
        lines.append(
            f"{row.rank:>4}  {row.model_name[:40]:<40}  {score:>6}  {price:>22}  "
            f"{format_value_score(valuation.value_score):>6}  "
            f"{format_context_window(valuation.context_length):>7}  {modalities}"
        )
    return "\n".join(lines)


def render(valuations: list[RowValuation], output_format: str, token_unit: int) -> str:
    if output_format == "table":
        return render_table(valuations, token_unit)

    payload: list[dict[str, Any]] = [valuation.to_dict() for valuation in valuations]
    if output_format == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    return json.dumps(payload, indent=2)


async def async_main(argv: list[str] | None = None) -> int:
    """Async entrypoint."""
    args = parse_args(argv)
    setup_logging("DEBUG" if settings.debug else "WARNING")

    try:
        rows = await load_rows(args.html_file)
    except (OSError, ArenaPricingError) as exc:
        print(f"Failed to load leaderboard: {exc}", file=sys.stderr)
        return 1

    pricing_service = PricingService()
    context_service = ContextService()
    await asyncio.gather(
        pricing_service.initialize(args.provider),
        context_service.initialize(),
    )
    if not len(pricing_service.catalog):
        print(f"Warning: no pricing data loaded from {args.provider}", file=sys.stderr)

    valuations = value_rows(rows, pricing_service.catalog, context_service.catalog)
    if args.sort:
        valuations = sort_valuations(valuations, args.sort, "desc" if args.desc else "asc")
    if args.limit > 0:
        valuations = valuations[: args.limit]

    print(render(valuations, args.format, args.token_unit))
    return 0


def main() -> int:
    """Sync wrapper."""
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
