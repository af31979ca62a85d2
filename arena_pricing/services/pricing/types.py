"""Domain types for provider pricing lookup."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from arena_pricing.core.exceptions import UnknownProviderError

MODALITIES: frozenset[str] = frozenset({"text", "image", "audio", "video", "file"})
DEFAULT_MODALITIES: frozenset[str] = frozenset({"text"})


class PricingProvider(str, Enum):
    """Supported pricing catalogs."""

    OPENROUTER = "openrouter"
    HELICONE = "helicone"
    LITELLM = "litellm"

    @property
    def display_name(self) -> str:
        return _PROVIDER_DISPLAY_NAMES[self]

    @classmethod
    def coerce(cls, value: "PricingProvider | str") -> "PricingProvider":
        """Parse a provider identifier, raising for unknown providers."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownProviderError(str(value)) from None


_PROVIDER_DISPLAY_NAMES: dict[PricingProvider, str] = {
    PricingProvider.OPENROUTER: "OpenRouter",
    PricingProvider.HELICONE: "Helicone",
    PricingProvider.LITELLM: "LiteLLM",
}


class MatchOperator(str, Enum):
    """How a catalog key is compared against a search term."""

    EQUALS = "equals"
    INCLUDES = "includes"
    STARTS_WITH = "startsWith"

    @classmethod
    def parse(cls, value: object) -> "MatchOperator":
        """Parse a provider-supplied operator, defaulting to EQUALS."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for operator in cls:
                if operator.value == value:
                    return operator
        return cls.EQUALS


@dataclass(frozen=True, slots=True)
class PricingRecord:
    """Canonical cost record for one provider model entry."""

    input_cost_per_1m: float
    output_cost_per_1m: float
    match_operator: MatchOperator
    source_model_name: str
    context_length: int | None = None

    @property
    def blended_cost_per_1m(self) -> float:
        """Mean of input and output cost."""
        return (self.input_cost_per_1m + self.output_cost_per_1m) / 2

    @property
    def total_cost_per_1m(self) -> float:
        """Input plus output cost, used as the pricing sort key."""
        return self.input_cost_per_1m + self.output_cost_per_1m


@dataclass(frozen=True, slots=True)
class ContextRecord:
    """Context window and modality metadata for one model."""

    context_length: int | None
    source_model_name: str
    input_modalities: frozenset[str] = field(default=DEFAULT_MODALITIES)
    output_modalities: frozenset[str] = field(default=DEFAULT_MODALITIES)
    has_explicit_modalities: bool = False

    @property
    def match_operator(self) -> MatchOperator:
        return MatchOperator.EQUALS
