"""Remote sampler error hierarchy and exceptions."""

from __future__ import annotations


class RemoteSamplerError(Exception):
    """Base exception for all remote sampler errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigError(RemoteSamplerError):
    """Raised when configuration is invalid or conflicting."""
    pass


class FetchError(RemoteSamplerError):
    """Raised when the sampling strategy could not be fetched."""
    pass


class MalformedStrategyError(RemoteSamplerError):
    """Raised when a strategy document has an unrecognized or inconsistent shape."""
    pass


class InvalidRateError(MalformedStrategyError, ValueError):
    """Raised when a sampling rate or rate limit is out of range."""
    pass
