"""Exception hierarchy for potr."""

from __future__ import annotations


class PotrError(Exception):
    """Base exception for all potr errors."""


class ConfigurationError(PotrError):
    """Raised when settings or credentials are invalid. Fatal."""


class CatalogError(PotrError):
    """Raised when a catalog cannot be loaded or written. Fatal."""


class ProviderError(PotrError):
    """Raised when a translation engine fails for a single message."""
