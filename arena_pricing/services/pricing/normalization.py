"""Model-name canonicalization shared by catalog building and lookup.

Providers spell the same model differently (``Claude Sonnet 4.5``,
``anthropic/claude-sonnet-4-5``, ``claude-sonnet-4-5-20250929-thinking-32k``).
``normalize_model_name`` produces the canonical key used on both sides of a
lookup. The ``strip_*`` helpers derive looser variants from an already
normalized name and return their input unchanged when their pattern is
absent, so callers can compare by equality to see whether anything changed.
"""

from __future__ import annotations

import re

_URL_ENCODED_COLON = re.compile(r"%3a", re.IGNORECASE)
# Single digit, "-" or "_", single digit: 4-5 -> 4.5, 3_5 -> 3.5, 3.1-8b -> 3.1.8b.
_VERSION_SEPARATOR = re.compile(r"(^|[^0-9])(\d)[-_](\d)(?![0-9])")
_WHITESPACE_RUN = re.compile(r"\s+")

_SUFFIX_TOKEN = re.compile(r"[.-](?:preview|beta|latest|v\d+)\b", re.IGNORECASE)
_EIGHT_DIGIT_TOKEN = re.compile(r"[.-]\d{8}\b")
_DATE_TOKEN = re.compile(r"[.-]20\d{6}(?=[.-]|$)")
_THINKING_GROUP = re.compile(r"\(thinking[^)]*\)", re.IGNORECASE)
_THINKING_SUFFIX = re.compile(r"[.-]thinking(?:-[a-z0-9]+)*$", re.IGNORECASE)
_REPEATED_DASH = re.compile(r"--+")
_TRAILING_SEPARATOR = re.compile(r"[.-]$")

SEPARATORS = frozenset("-./:")


def normalize_model_name(name: str | None) -> str:
    """Normalize a model name or provider id into a catalog key."""
    if not name:
        return ""
    normalized = name.strip().lower()
    normalized = _URL_ENCODED_COLON.sub(":", normalized)
    normalized = _rewrite_version_separators(normalized)
    normalized = _WHITESPACE_RUN.sub("-", normalized)
    return normalized.strip()


def _rewrite_version_separators(value: str) -> str:
    # Matches consume their second digit, so chains like 1-2-3 need another pass.
    while True:
        rewritten = _VERSION_SEPARATOR.sub(r"\1\2.\3", value)
        if rewritten == value:
            return rewritten
        value = rewritten


def strip_suffixes(normalized: str) -> str:
    """Drop release-channel tokens (-preview, -beta, -latest, -v2) and 8-digit stamps."""
    stripped = _SUFFIX_TOKEN.sub("", normalized)
    return _EIGHT_DIGIT_TOKEN.sub("", stripped)


def strip_dates(normalized: str) -> str:
    """Drop 20xxxxxx date tokens anywhere in the name."""
    stripped, count = _DATE_TOKEN.subn("", normalized)
    if not count:
        return normalized
    return _tidy_separators(stripped)


def strip_thinking(normalized: str) -> str:
    """Drop "(thinking...)" groups and trailing -thinking[-budget] qualifiers."""
    stripped, group_count = _THINKING_GROUP.subn("", normalized)
    stripped, suffix_count = _THINKING_SUFFIX.subn("", stripped)
    if not group_count and not suffix_count:
        return normalized
    return _tidy_separators(stripped)


def _tidy_separators(value: str) -> str:
    value = _REPEATED_DASH.sub("-", value)
    value = _TRAILING_SEPARATOR.sub("", value)
    return value.strip()


def search_variants(name: str | None) -> list[str]:
    """Return the distinct, non-empty lookup terms for a raw name, most exact first.

    Order: normalized, without suffixes, without dates, without thinking
    qualifiers, without dates and thinking qualifiers.
    """
    normalized = normalize_model_name(name)
    without_dates = strip_dates(normalized)
    candidates = (
        normalized,
        strip_suffixes(normalized),
        without_dates,
        strip_thinking(normalized),
        strip_thinking(without_dates),
    )

    variants: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants
