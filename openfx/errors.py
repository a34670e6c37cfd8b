"""Exception types raised by :mod:`openfx`.

Upstream error payloads (``{"error": true, "message": ...}``) are *not*
exceptions; they are returned as :class:`openfx.models.UpstreamError` values.
"""

from __future__ import annotations


class OpenFXError(Exception):
    """Base class for every exception raised by the package."""


class AuthenticationError(OpenFXError):
    """The upstream rejected the configured ``app_id``."""


class InvalidDateError(OpenFXError, ValueError):
    """A date argument could not be parsed as a calendar date."""


class UnknownCurrencyError(OpenFXError, KeyError):
    """A conversion or rebase referenced a currency absent from the rate table."""

    def __init__(self, currency: str) -> None:
        super().__init__(currency)
        self.currency = currency

    def __str__(self) -> str:
        return f"Unknown currency '{self.currency}'"


class FetchError(OpenFXError):
    """Transport or decoding failure while talking to the upstream."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class CacheConfigurationError(OpenFXError, ValueError):
    """A cache DSN or cache directory cannot be used."""


__all__ = [
    "AuthenticationError",
    "CacheConfigurationError",
    "FetchError",
    "InvalidDateError",
    "OpenFXError",
    "UnknownCurrencyError",
]
