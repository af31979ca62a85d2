"""Fetch raw pricing payloads from provider endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from arena_pricing.config import settings
from arena_pricing.core.exceptions import ExternalAPIError
from arena_pricing.services.pricing.types import PricingProvider

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


class ProviderClient:
    """Client for provider cost catalogs. Always fetches fresh data."""

    def __init__(self, timeout_seconds: int | None = None) -> None:
        self.timeout_seconds = timeout_seconds or settings.provider_timeout_seconds

    async def fetch_payload(
        self,
        provider: PricingProvider | str,
    ) -> tuple[Any | None, dict[str, Any]]:
        """Fetch one provider's raw JSON. Failures yield ``(None, meta)`` with ``ok=False``."""
        resolved = PricingProvider.coerce(provider)
        url = settings.get_provider_url(resolved.value)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, headers=NO_CACHE_HEADERS)
                response.raise_for_status()
            payload = _decode_payload(resolved, response)
        except (httpx.HTTPError, httpx.InvalidURL, ExternalAPIError) as exc:
            logger.warning(
                "Pricing provider fetch failed",
                extra={"provider": resolved.value, "url": url, "error": str(exc)},
            )
            return None, {
                "source": resolved.value,
                "ok": False,
                "url": url,
                "error": str(exc),
            }

        return payload, {
            "source": resolved.value,
            "ok": True,
            "url": url,
        }

    async def fetch_context_payload(self) -> tuple[Any | None, dict[str, Any]]:
        """Context metadata always comes from OpenRouter."""
        return await self.fetch_payload(PricingProvider.OPENROUTER)


def _decode_payload(provider: PricingProvider, response: httpx.Response) -> Any:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ExternalAPIError(provider.display_name, f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict | list):
        raise ExternalAPIError(
            provider.display_name,
            f"unexpected payload type {type(payload).__name__}",
        )
    return payload
