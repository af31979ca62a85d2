"""Custom exception classes for the application."""

from typing import Any


class ArenaPricingError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class UnknownProviderError(ArenaPricingError):
    """Pricing provider identifier is not supported."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown pricing provider: {provider}", {"provider": provider})


# External API Errors
class ExternalAPIError(ArenaPricingError):
    """Error calling external API."""

    def __init__(self, api_name: str, message: str) -> None:
        super().__init__(f"{api_name} API error: {message}", {"api_name": api_name})


class LeaderboardParseError(ArenaPricingError):
    """Leaderboard markup did not contain any usable rows."""

    pass
