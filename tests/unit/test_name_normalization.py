"""Unit tests for model-name normalization."""

import pytest

from arena_pricing.services.pricing.normalization import (
    normalize_model_name,
    search_variants,
    strip_dates,
    strip_suffixes,
    strip_thinking,
)


def test_normalize_lowercases_and_joins_whitespace() -> None:
    assert normalize_model_name("Claude Sonnet 4.5") == "claude-sonnet-4.5"
    assert normalize_model_name("  GPT   4o  ") == "gpt-4o"


def test_normalize_empty_input() -> None:
    assert normalize_model_name("") == ""
    assert normalize_model_name(None) == ""


def test_normalize_decodes_url_encoded_colon() -> None:
    assert normalize_model_name("google%3Agemma-3-27b-it%3afree") == "google:gemma-3-27b-it:free"


def test_normalize_rewrites_single_digit_version_separators() -> None:
    assert normalize_model_name("anthropic/claude-sonnet-4-5") == "anthropic/claude-sonnet-4.5"
    assert normalize_model_name("claude-3_5-sonnet") == "claude-3.5-sonnet"
    assert normalize_model_name("llama-3-1-8b") == "llama-3.1.8b"


def test_normalize_rewrites_separator_after_dotted_version() -> None:
    assert normalize_model_name("llama-3.1-8b") == "llama-3.1.8b"
    assert normalize_model_name("vendor/qwen-2.5_7b") == "vendor/qwen-2.5.7b"
    assert normalize_model_name("Qwen 2.5-7B") == "qwen-2.5.7b"
    assert normalize_model_name("x-1-2-3") == "x-1.2.3"


def test_normalize_leaves_multi_digit_runs_alone() -> None:
    assert normalize_model_name("claude-35-sonnet") == "claude-35-sonnet"
    assert normalize_model_name("gpt-4-0613") == "gpt-4-0613"
    assert normalize_model_name("qwen-14-7b") == "qwen-14-7b"


@pytest.mark.parametrize(
    "raw",
    [
        "Claude Sonnet 4.5",
        "anthropic/claude-sonnet-4-5-20250929",
        "llama-3-1-8b",
        "llama-3.1-8b",
        "qwen-2.5_7b",
        "1-2-3",
        "x-1-2-3",
        "Gemini 2.5 Pro (thinking-minimal)",
        "google%3Agemini-3-pro",
        "  spaced  out  ",
    ],
)
def test_normalize_is_idempotent(raw: str) -> None:
    once = normalize_model_name(raw)
    assert normalize_model_name(once) == once


def test_strip_suffixes_removes_release_tokens() -> None:
    assert strip_suffixes("gemini-2.5-pro-preview") == "gemini-2.5-pro"
    assert strip_suffixes("chatgpt-4o-latest") == "chatgpt-4o"
    assert strip_suffixes("mistral-large-v2") == "mistral-large"
    assert strip_suffixes("claude-3-opus-20240229") == "claude-3-opus"
    assert strip_suffixes("gemini-2.5-pro-preview-06-05") == "gemini-2.5-pro-06-05"


def test_strip_suffixes_is_noop_without_suffix() -> None:
    for value in ("gpt-4o-mini", "gemini-previewer", "o3-pro", "claude-opus-4.1"):
        assert strip_suffixes(value) == value


def test_strip_dates_removes_year_stamps_anywhere() -> None:
    assert strip_dates("claude-sonnet-4.5-20250929") == "claude-sonnet-4.5"
    assert (
        strip_dates("claude-sonnet-4.5-20250929-thinking-32k")
        == "claude-sonnet-4.5-thinking-32k"
    )


def test_strip_dates_is_noop_without_date() -> None:
    for value in ("model-19991231", "gpt-4o-2024-08-06", "grok-4-", "o1"):
        assert strip_dates(value) == value


def test_strip_thinking_removes_qualifiers() -> None:
    assert strip_thinking("claude-opus-4.1-thinking-16k") == "claude-opus-4.1"
    assert strip_thinking("deepseek-r1-thinking") == "deepseek-r1"
    assert strip_thinking(normalize_model_name("Claude Opus 4.1 (thinking-minimal)")) == (
        "claude-opus-4.1"
    )
    assert strip_thinking("gemini-2.5-flash-THINKING") == "gemini-2.5-flash"


def test_strip_thinking_is_noop_without_qualifier() -> None:
    for value in ("thinking-machines-1", "claude-opus-4.1", "grok-4-"):
        assert strip_thinking(value) == value


def test_search_variants_order_and_dedupe() -> None:
    variants = search_variants("claude-sonnet-4-5-20250929-thinking-32k")

    assert variants == [
        "claude-sonnet-4.5-20250929-thinking-32k",
        "claude-sonnet-4.5-thinking-32k",
        "claude-sonnet-4.5-20250929",
        "claude-sonnet-4.5",
    ]


def test_search_variants_for_plain_name_is_single_term() -> None:
    assert search_variants("GPT-4o") == ["gpt-4o"]
    assert search_variants("") == []
