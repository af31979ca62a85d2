"""Resolve leaderboard display names against a pricing or context catalog."""

from __future__ import annotations

from arena_pricing.services.pricing.catalog import ContextCatalog, ModelCatalog, RecordT
from arena_pricing.services.pricing.normalization import SEPARATORS, search_variants
from arena_pricing.services.pricing.types import ContextRecord, MatchOperator

DIGITS = frozenset("0123456789")


def resolve(catalog: ModelCatalog[RecordT], model_name: str | None) -> RecordT | None:
    """Find the catalog record for a raw model name.

    Lookup terms are tried from most to least exact (normalized, then with
    release suffixes, date stamps, thinking qualifiers, and dates plus
    thinking qualifiers removed). The first term that matches wins.
    """
    if not catalog:
        return None

    for term in search_variants(model_name):
        match = find_match(catalog, term)
        if match is not None:
            return match
    return None


def resolve_context(catalog: ContextCatalog, model_name: str | None) -> ContextRecord | None:
    """Context-catalog flavour of :func:`resolve`."""
    return resolve(catalog, model_name)


def find_match(catalog: ModelCatalog[RecordT], term: str) -> RecordT | None:
    """Match one normalized term: exact, operator, key-prefix, then key-extension."""
    exact = catalog.get(term)
    if exact is not None:
        return exact

    return (
        _match_operator(catalog, term)
        or _match_key_prefix(catalog, term)
        or _match_key_extension(catalog, term)
    )


def _match_operator(catalog: ModelCatalog[RecordT], term: str) -> RecordT | None:
    """Longest ``includes``/``startsWith`` key satisfied by the term."""
    best: RecordT | None = None
    best_length = 0
    for key, record in catalog.items():
        operator = record.match_operator
        if operator is MatchOperator.INCLUDES:
            matched = key in term
        elif operator is MatchOperator.STARTS_WITH:
            matched = term.startswith(key)
        else:
            continue
        # Strictly longer only: equal lengths keep the earlier entry.
        if matched and len(key) > best_length:
            best = record
            best_length = len(key)
    return best


def _match_key_prefix(catalog: ModelCatalog[RecordT], term: str) -> RecordT | None:
    """Longest key that the term extends at a separator boundary."""
    best: RecordT | None = None
    best_length = 0
    for key, record in catalog.items():
        if not key or not term.startswith(key):
            continue
        if len(key) < len(term):
            next_char = term[len(key)]
            if next_char not in SEPARATORS or is_version_continuation(term, key):
                continue
        if len(key) > best_length:
            best = record
            best_length = len(key)
    return best


def _match_key_extension(catalog: ModelCatalog[RecordT], term: str) -> RecordT | None:
    """Shortest key that extends the term at a separator boundary."""
    best: RecordT | None = None
    best_length = 0
    for key, record in catalog.items():
        if len(key) <= len(term) or not key.startswith(term):
            continue
        if key[len(term)] not in SEPARATORS:
            continue
        if best is None or len(key) < best_length:
            best = record
            best_length = len(key)
    return best


def is_version_continuation(term: str, key: str) -> bool:
    """Whether ``term`` continues ``key``'s version number (``grok-4`` -> ``grok-4.1``)."""
    after = term[len(key):len(key) + 2]
    return (
        len(after) == 2
        and after[0] in ".-"
        and after[1] in DIGITS
        and key[-1:] in DIGITS
    )
