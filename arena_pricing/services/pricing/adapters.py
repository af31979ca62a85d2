"""Provider payload adapters.

Each adapter turns one provider's already-parsed JSON into a fresh catalog.
Malformed entries are skipped one at a time and a payload with the wrong
top-level shape produces an empty catalog.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

from arena_pricing.services.pricing.catalog import ContextCatalog, PricingCatalog
from arena_pricing.services.pricing.types import (
    DEFAULT_MODALITIES,
    MODALITIES,
    ContextRecord,
    MatchOperator,
    PricingProvider,
    PricingRecord,
)

logger = logging.getLogger(__name__)

TOKENS_PER_MILLION = 1_000_000
LITELLM_SAMPLE_KEY = "sample_spec"


def coerce_float(value: Any) -> float | None:
    """Safely parse finite float values from API payloads."""
    try:
        if value is None or isinstance(value, bool):
            return None
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def coerce_token_count(value: Any) -> int | None:
    """Parse a positive token count, treating zero and junk as unknown."""
    parsed = coerce_float(value)
    if parsed is None or parsed <= 0:
        return None
    return int(parsed)


class ProviderAdapter(ABC):
    """Base adapter: subclasses yield ``(raw_name, record)`` pairs in provider order."""

    provider: PricingProvider

    def build(self, payload: Any) -> PricingCatalog:
        """Build a new catalog from a raw provider payload."""
        catalog = PricingCatalog()
        entries = 0
        for raw_name, record in self.iter_records(payload):
            entries += 1
            catalog.register(raw_name, record)

        logger.info(
            "Built pricing catalog",
            extra={
                "provider": self.provider.value,
                "entries": entries,
                "keys": len(catalog),
            },
        )
        return catalog

    @abstractmethod
    def iter_records(self, payload: Any) -> Iterator[tuple[str, PricingRecord]]:
        """Yield provider entries in payload order."""
        pass


class OpenRouterAdapter(ProviderAdapter):
    """``{"data": [{"id", "pricing": {"prompt", "completion"}, "context_length"}]}``."""

    provider = PricingProvider.OPENROUTER

    def iter_records(self, payload: Any) -> Iterator[tuple[str, PricingRecord]]:
        for row in _openrouter_rows(payload):
            model_id = row.get("id")
            pricing = row.get("pricing")
            if not isinstance(model_id, str) or not model_id or not isinstance(pricing, dict):
                logger.debug("Skipping OpenRouter entry without id/pricing", extra={"id": model_id})
                continue

            # OpenRouter reports USD per token.
            prompt_price = coerce_float(pricing.get("prompt")) or 0.0
            completion_price = coerce_float(pricing.get("completion")) or 0.0
            yield model_id, PricingRecord(
                input_cost_per_1m=prompt_price * TOKENS_PER_MILLION,
                output_cost_per_1m=completion_price * TOKENS_PER_MILLION,
                match_operator=MatchOperator.EQUALS,
                source_model_name=model_id,
                context_length=coerce_token_count(row.get("context_length")),
            )


class HeliconeAdapter(ProviderAdapter):
    """``[{"model", "input_cost_per_1m", "output_cost_per_1m", "operator"}]``.

    The list may also arrive wrapped as ``{"data": [...]}``. Helicone is the
    only source whose records carry ``includes``/``startsWith`` operators.
    """

    provider = PricingProvider.HELICONE

    def iter_records(self, payload: Any) -> Iterator[tuple[str, PricingRecord]]:
        entries = payload.get("data", payload) if isinstance(payload, dict) else payload
        if not isinstance(entries, list):
            logger.warning(
                "Helicone payload is not a list",
                extra={"payload_type": type(entries).__name__},
            )
            return

        for entry in entries:
            if not isinstance(entry, dict):
                continue
            model = entry.get("model")
            if not isinstance(model, str) or not model:
                logger.debug("Skipping Helicone entry without model")
                continue

            yield model, PricingRecord(
                input_cost_per_1m=coerce_float(entry.get("input_cost_per_1m")) or 0.0,
                output_cost_per_1m=coerce_float(entry.get("output_cost_per_1m")) or 0.0,
                match_operator=MatchOperator.parse(entry.get("operator")),
                source_model_name=model,
            )


class LiteLLMAdapter(ProviderAdapter):
    """``{"<model>": {"input_cost_per_token", "output_cost_per_token", "max_input_tokens"}}``."""

    provider = PricingProvider.LITELLM

    def iter_records(self, payload: Any) -> Iterator[tuple[str, PricingRecord]]:
        if not isinstance(payload, dict):
            logger.warning(
                "LiteLLM payload is not a mapping",
                extra={"payload_type": type(payload).__name__},
            )
            return

        for model_name, model_data in payload.items():
            if model_name == LITELLM_SAMPLE_KEY or not isinstance(model_data, dict):
                continue
            if not isinstance(model_name, str) or not model_name:
                continue

            input_cost = coerce_float(model_data.get("input_cost_per_token")) or 0.0
            output_cost = coerce_float(model_data.get("output_cost_per_token")) or 0.0
            if not input_cost and not output_cost:
                continue

            context_length = coerce_token_count(model_data.get("max_input_tokens"))
            if context_length is None:
                context_length = coerce_token_count(model_data.get("max_tokens"))

            yield model_name, PricingRecord(
                input_cost_per_1m=input_cost * TOKENS_PER_MILLION,
                output_cost_per_1m=output_cost * TOKENS_PER_MILLION,
                match_operator=MatchOperator.EQUALS,
                source_model_name=model_name,
                context_length=context_length,
            )


ADAPTERS: dict[PricingProvider, ProviderAdapter] = {
    adapter.provider: adapter
    for adapter in (OpenRouterAdapter(), HeliconeAdapter(), LiteLLMAdapter())
}


def get_adapter(provider: PricingProvider | str) -> ProviderAdapter:
    """Return the adapter for a provider; unknown identifiers raise."""
    return ADAPTERS[PricingProvider.coerce(provider)]


def build_pricing_catalog(provider: PricingProvider | str, payload: Any) -> PricingCatalog:
    """Build a pricing catalog from a raw payload in ``provider``'s shape."""
    return get_adapter(provider).build(payload)


def build_context_catalog(payload: Any) -> ContextCatalog:
    """Build the context-window/modality catalog from an OpenRouter payload."""
    catalog = ContextCatalog()
    for row in _openrouter_rows(payload):
        model_id = row.get("id")
        if not isinstance(model_id, str) or not model_id:
            continue

        architecture = row.get("architecture")
        if not isinstance(architecture, dict):
            architecture = {}
        raw_input = architecture.get("input_modalities")
        raw_output = architecture.get("output_modalities")

        catalog.register(
            model_id,
            ContextRecord(
                context_length=coerce_token_count(row.get("context_length")),
                source_model_name=model_id,
                input_modalities=_parse_modalities(raw_input),
                output_modalities=_parse_modalities(raw_output),
                has_explicit_modalities=isinstance(raw_input, list)
                or isinstance(raw_output, list),
            ),
        )

    logger.info("Built context catalog", extra={"keys": len(catalog)})
    return catalog


def _openrouter_rows(payload: Any) -> Iterator[dict[str, Any]]:
    rows = payload.get("data", []) if isinstance(payload, dict) else []
    if not isinstance(rows, list):
        return
    for row in rows:
        if isinstance(row, dict):
            yield row


def _parse_modalities(value: Any) -> frozenset[str]:
    if not isinstance(value, list):
        return DEFAULT_MODALITIES
    return frozenset(
        item.lower() for item in value if isinstance(item, str) and item.lower() in MODALITIES
    )
