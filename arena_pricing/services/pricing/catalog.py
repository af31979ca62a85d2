"""Insertion-ordered key -> record catalogs."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

from arena_pricing.services.pricing.normalization import normalize_model_name
from arena_pricing.services.pricing.types import ContextRecord, PricingRecord

RecordT = TypeVar("RecordT", PricingRecord, ContextRecord)


class ModelCatalog(Generic[RecordT]):
    """Normalized-name lookup table for one provider snapshot.

    Keys are unique and the first record registered under a key wins, so
    provider list order is the tie-break. Iteration follows insertion order.
    """

    def __init__(self) -> None:
        self._records: dict[str, RecordT] = {}

    def register(self, raw_name: str, record: RecordT) -> bool:
        """Index a record under its normalized name and its bare model name.

        The bare name is the part after the last "/", so both
        ``vendor/model`` and ``model`` resolve. Returns True when at least one
        key was added.
        """
        key = normalize_model_name(raw_name)
        if not key:
            return False

        added = self._add(key, record)
        short_key = key.rsplit("/", 1)[-1]
        if short_key and short_key != key:
            added = self._add(short_key, record) or added
        return added

    def _add(self, key: str, record: RecordT) -> bool:
        if key in self._records:
            return False
        self._records[key] = record
        return True

    def get(self, key: str) -> RecordT | None:
        return self._records.get(key)

    def items(self) -> Iterator[tuple[str, RecordT]]:
        return iter(self._records.items())

    def keys(self) -> list[str]:
        return list(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={len(self._records)})"


PricingCatalog = ModelCatalog[PricingRecord]
ContextCatalog = ModelCatalog[ContextRecord]
