"""Custom exceptions for urlnotes."""


class UrlNotesError(Exception):
    """Base exception for urlnotes."""


class ConfigError(UrlNotesError):
    """Raised when configuration is missing or invalid."""


class StoreError(UrlNotesError):
    """Raised when the underlying key-value store rejects a read or write."""


class BundleError(UrlNotesError):
    """Raised when an export bundle cannot be decoded."""
