"""Session services holding the active pricing and context catalogs."""

from __future__ import annotations

import logging
from typing import Any

from arena_pricing.config import settings
from arena_pricing.services.pricing.adapters import build_context_catalog, build_pricing_catalog
from arena_pricing.services.pricing.catalog import ContextCatalog, PricingCatalog
from arena_pricing.services.pricing.matching import resolve, resolve_context
from arena_pricing.services.pricing.provider_client import ProviderClient
from arena_pricing.services.pricing.types import ContextRecord, PricingProvider, PricingRecord

logger = logging.getLogger(__name__)


class _RebuildTracker:
    """Generation counter so only the most recent rebuild request is applied."""

    def __init__(self) -> None:
        self._requested = 0
        self._applied = 0

    def begin(self) -> int:
        self._requested += 1
        return self._requested

    def is_current(self, generation: int) -> bool:
        return generation == self._requested

    def finish(self, generation: int) -> None:
        self._applied = generation

    @property
    def in_flight(self) -> bool:
        return self._applied != self._requested


class PricingService:
    """Owns the catalog for the selected pricing provider.

    Catalogs are never patched: every load builds a new catalog and swaps it
    in once complete, so readers only ever see a fully built catalog. When
    rebuilds overlap, results from superseded requests are dropped.
    """

    def __init__(self, client: ProviderClient | None = None) -> None:
        self.client = client or ProviderClient()
        self.active_provider: PricingProvider | None = None
        self._catalog = PricingCatalog()
        self._rebuilds = _RebuildTracker()

    @property
    def catalog(self) -> PricingCatalog:
        return self._catalog

    @property
    def is_loading(self) -> bool:
        return self._rebuilds.in_flight

    def load(self, provider: PricingProvider | str, payload: Any) -> PricingCatalog:
        """Build from an already-fetched payload and make it the active catalog."""
        resolved = PricingProvider.coerce(provider)
        generation = self._rebuilds.begin()
        catalog = build_pricing_catalog(resolved, payload)
        self._swap(generation, resolved, catalog)
        return catalog

    async def initialize(self, provider: PricingProvider | str | None = None) -> bool:
        """Fetch and build the catalog for ``provider``.

        Returns True when the resulting catalog was installed, False when a
        newer request superseded this one while it was fetching.
        """
        resolved = PricingProvider.coerce(provider or settings.default_provider)
        generation = self._rebuilds.begin()

        payload, meta = await self.client.fetch_payload(resolved)
        if not self._rebuilds.is_current(generation):
            logger.info(
                "Discarding superseded pricing rebuild",
                extra={"provider": resolved.value, "generation": generation},
            )
            return False

        if meta.get("ok"):
            catalog = build_pricing_catalog(resolved, payload)
        else:
            catalog = PricingCatalog()
        self._swap(generation, resolved, catalog)
        return True

    async def switch_provider(self, provider: PricingProvider | str) -> bool:
        """Replace the active catalog with one built from another provider."""
        resolved = PricingProvider.coerce(provider)
        logger.info(
            "Switching pricing provider",
            extra={
                "provider": resolved.value,
                "previous": self.active_provider.value if self.active_provider else None,
            },
        )
        return await self.initialize(resolved)

    def get_pricing(self, model_name: str | None) -> PricingRecord | None:
        return resolve(self._catalog, model_name)

    def _swap(self, generation: int, provider: PricingProvider, catalog: PricingCatalog) -> None:
        self._catalog = catalog
        self.active_provider = provider
        self._rebuilds.finish(generation)


class ContextService:
    """Owns the context-window/modality catalog (always OpenRouter-sourced)."""

    def __init__(self, client: ProviderClient | None = None) -> None:
        self.client = client or ProviderClient()
        self._catalog = ContextCatalog()
        self._rebuilds = _RebuildTracker()

    @property
    def catalog(self) -> ContextCatalog:
        return self._catalog

    @property
    def is_loading(self) -> bool:
        return self._rebuilds.in_flight

    def load(self, payload: Any) -> ContextCatalog:
        generation = self._rebuilds.begin()
        catalog = build_context_catalog(payload)
        self._catalog = catalog
        self._rebuilds.finish(generation)
        return catalog

    async def initialize(self) -> bool:
        generation = self._rebuilds.begin()
        payload, meta = await self.client.fetch_context_payload()
        if not self._rebuilds.is_current(generation):
            return False

        self._catalog = build_context_catalog(payload) if meta.get("ok") else ContextCatalog()
        self._rebuilds.finish(generation)
        return True

    def get_context(self, model_name: str | None) -> ContextRecord | None:
        return resolve_context(self._catalog, model_name)
