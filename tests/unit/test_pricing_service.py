"""Tests for pricing/context session services and the provider client."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from arena_pricing.core.exceptions import UnknownProviderError
from arena_pricing.services.pricing.provider_client import ProviderClient
from arena_pricing.services.pricing.service import ContextService, PricingService
from arena_pricing.services.pricing.types import PricingProvider

OPENROUTER_PAYLOAD = {
    "data": [
        {
            "id": "x-ai/grok-4",
            "pricing": {"prompt": "0.000003", "completion": "0.000015"},
            "context_length": 256000,
            "architecture": {"input_modalities": ["text", "image"], "output_modalities": ["text"]},
        }
    ]
}
HELICONE_PAYLOAD = [
    {"model": "grok-4", "input_cost_per_1m": 5, "output_cost_per_1m": 20},
]
LITELLM_PAYLOAD = {
    "xai/grok-4": {"input_cost_per_token": 4e-06, "output_cost_per_token": 1.6e-05},
}
PAYLOADS: dict[PricingProvider, Any] = {
    PricingProvider.OPENROUTER: OPENROUTER_PAYLOAD,
    PricingProvider.HELICONE: HELICONE_PAYLOAD,
    PricingProvider.LITELLM: LITELLM_PAYLOAD,
}


class FakeProviderClient:
    """Provider client returning canned payloads, optionally blocking per provider."""

    def __init__(self, failing: set[PricingProvider] | None = None) -> None:
        self.failing = failing or set()
        self.gates: dict[PricingProvider, asyncio.Event] = {}
        self.calls: list[PricingProvider] = []

    async def fetch_payload(self, provider: PricingProvider | str) -> tuple[Any, dict[str, Any]]:
        resolved = PricingProvider.coerce(provider)
        self.calls.append(resolved)
        gate = self.gates.get(resolved)
        if gate is not None:
            await gate.wait()
        if resolved in self.failing:
            return None, {"source": resolved.value, "ok": False, "error": "HTTP 503"}
        return PAYLOADS[resolved], {"source": resolved.value, "ok": True}

    async def fetch_context_payload(self) -> tuple[Any, dict[str, Any]]:
        return await self.fetch_payload(PricingProvider.OPENROUTER)


def test_load_swaps_in_new_catalog() -> None:
    service = PricingService(client=FakeProviderClient())

    service.load("helicone", HELICONE_PAYLOAD)
    first_catalog = service.catalog
    assert service.active_provider is PricingProvider.HELICONE
    assert service.get_pricing("Grok 4").input_cost_per_1m == 5.0

    service.load(PricingProvider.LITELLM, LITELLM_PAYLOAD)
    assert service.catalog is not first_catalog
    assert service.get_pricing("grok-4").input_cost_per_1m == pytest.approx(4.0)
    assert len(first_catalog) == 1


@pytest.mark.asyncio
async def test_initialize_uses_default_provider() -> None:
    client = FakeProviderClient()
    service = PricingService(client=client)

    applied = await service.initialize()

    assert applied is True
    assert client.calls == [PricingProvider.OPENROUTER]
    assert service.active_provider is PricingProvider.OPENROUTER
    assert service.get_pricing("grok-4").source_model_name == "x-ai/grok-4"
    assert service.is_loading is False


@pytest.mark.asyncio
async def test_switch_provider_rebuilds_from_scratch() -> None:
    service = PricingService(client=FakeProviderClient())
    await service.initialize("openrouter")

    await service.switch_provider("helicone")

    assert service.active_provider is PricingProvider.HELICONE
    assert "x-ai/grok-4" not in service.catalog
    assert service.get_pricing("grok-4").source_model_name == "grok-4"


@pytest.mark.asyncio
async def test_failed_fetch_leaves_empty_catalog() -> None:
    service = PricingService(client=FakeProviderClient(failing={PricingProvider.LITELLM}))
    await service.initialize("openrouter")

    await service.switch_provider("litellm")

    assert len(service.catalog) == 0
    assert service.get_pricing("grok-4") is None


@pytest.mark.asyncio
async def test_superseded_rebuild_is_discarded() -> None:
    """Only the most recently requested provider's catalog is installed."""
    client = FakeProviderClient()
    gate = asyncio.Event()
    client.gates[PricingProvider.LITELLM] = gate
    service = PricingService(client=client)

    slow = asyncio.create_task(service.switch_provider("litellm"))
    await asyncio.sleep(0)
    assert service.is_loading is True

    fast_applied = await service.switch_provider("helicone")
    gate.set()
    slow_applied = await slow

    assert fast_applied is True
    assert slow_applied is False
    assert service.active_provider is PricingProvider.HELICONE
    assert service.get_pricing("grok-4").input_cost_per_1m == 5.0
    assert service.is_loading is False


@pytest.mark.asyncio
async def test_switch_provider_rejects_unknown_provider() -> None:
    service = PricingService(client=FakeProviderClient())

    with pytest.raises(UnknownProviderError):
        await service.switch_provider("bedrock")


@pytest.mark.asyncio
async def test_context_service_resolves_context_records() -> None:
    service = ContextService(client=FakeProviderClient())

    assert await service.initialize() is True

    context = service.get_context("Grok-4")
    assert context is not None
    assert context.context_length == 256000
    assert context.input_modalities == frozenset({"text", "image"})
    assert service.get_context("unknown-model") is None


def test_context_service_load_from_payload() -> None:
    service = ContextService(client=FakeProviderClient())

    service.load({"data": [{"id": "openai/gpt-5", "context_length": 400000}]})

    context = service.get_context("gpt-5")
    assert context is not None
    assert context.has_explicit_modalities is False


class _FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, invalid_json: bool = False) -> None:
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json
        self.request = httpx.Request("GET", "https://openrouter.ai/api/v1/models")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise httpx.HTTPStatusError("server error", request=self.request, response=self)

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._body


def _patch_async_client(monkeypatch: pytest.MonkeyPatch, response: _FakeResponse) -> list[dict]:
    calls: list[dict] = []

    class FakeAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            pass

        async def __aenter__(self) -> "FakeAsyncClient":
            return self

        async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
            return False

        async def get(self, url: str, **kwargs: Any) -> _FakeResponse:
            calls.append({"url": url, **kwargs})
            return response

    monkeypatch.setattr(
        "arena_pricing.services.pricing.provider_client.httpx.AsyncClient",
        FakeAsyncClient,
    )
    return calls


@pytest.mark.asyncio
async def test_provider_client_fetches_without_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_async_client(monkeypatch, _FakeResponse(body=HELICONE_PAYLOAD))

    payload, meta = await ProviderClient().fetch_payload("helicone")

    assert meta["ok"] is True
    assert payload == HELICONE_PAYLOAD
    assert calls[0]["url"] == "https://www.helicone.ai/api/llm-costs"
    assert calls[0]["headers"]["Cache-Control"] == "no-cache"


@pytest.mark.asyncio
async def test_provider_client_reports_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_async_client(monkeypatch, _FakeResponse(status_code=503))

    payload, meta = await ProviderClient().fetch_payload(PricingProvider.LITELLM)

    assert payload is None
    assert meta["ok"] is False
    assert meta["source"] == "litellm"


@pytest.mark.asyncio
async def test_provider_client_reports_invalid_json(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_async_client(monkeypatch, _FakeResponse(invalid_json=True))

    payload, meta = await ProviderClient().fetch_context_payload()

    assert payload is None
    assert meta["ok"] is False
    assert "invalid JSON" in meta["error"]


@pytest.mark.asyncio
async def test_provider_client_reports_invalid_url(monkeypatch: pytest.MonkeyPatch) -> None:
    class RaisingAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            pass

        async def __aenter__(self) -> "RaisingAsyncClient":
            return self

        async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
            return False

        async def get(self, url: str, **kwargs: Any) -> _FakeResponse:
            raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    monkeypatch.setattr(
        "arena_pricing.services.pricing.provider_client.httpx.AsyncClient",
        RaisingAsyncClient,
    )

    payload, meta = await ProviderClient().fetch_payload("openrouter")

    assert payload is None
    assert meta["ok"] is False
    assert "non-printable" in meta["error"]
