"""Custom exception classes for the release scoring service."""


class ScoringServiceError(Exception):
    """Base exception for all scoring service errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ScoringServiceError):
    """Raised when a scoring config document cannot be read or is invalid."""

    pass


class CatalogSourceError(ScoringServiceError):
    """Raised when a catalog source returns a payload that cannot be mapped."""

    pass
