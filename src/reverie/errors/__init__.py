"""Centralized error definitions for Reverie.

This module provides a unified error hierarchy and user-friendly error handling
for the pattern engine and its collaborators.

Usage:
    from reverie.errors import (
        ReverieError,
        PatternNotFoundError,
    )
    from reverie.errors.user_messages import format_error_for_cli

    try:
        detail = engine.get_pattern_detail(user_id, pattern_id)
    except ReverieError as e:
        print(format_error_for_cli(e))
"""

from __future__ import annotations

from reverie.errors.user_messages import (
    get_user_message,
    get_recovery_suggestion,
)


# =============================================================================
# Base Error
# =============================================================================


class ReverieError(Exception):
    """Base exception for all Reverie errors.

    Attributes:
        code: Error code for categorization
        user_message: User-friendly message (optional override)
        recoverable: Whether the error is potentially recoverable
        details: Additional error details for debugging
    """

    code: str = "REVERIE_ERROR"
    default_message: str = "An unexpected error occurred"
    recoverable: bool = True

    def __init__(
        self,
        message: str | None = None,
        *,
        user_message: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message or self.default_message
        self._user_message = user_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        """Get user-friendly message."""
        if self._user_message:
            return self._user_message
        return get_user_message(self)

    @property
    def recovery_suggestion(self) -> str:
        """Get recovery suggestion."""
        return get_recovery_suggestion(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "recoverable": self.recoverable,
            "details": self.details,
        }


# =============================================================================
# Analysis Errors
# =============================================================================


class AnalysisError(ReverieError):
    """Base error for pattern analysis."""

    code = "ANALYSIS_ERROR"
    default_message = "Pattern analysis failed"


class InsufficientDataError(AnalysisError):
    """Snapshot is smaller than the minimum required for analysis."""

    code = "INSUFFICIENT_DATA"
    default_message = "Not enough entries to detect patterns"

    def __init__(self, available: int, required: int, *, message: str | None = None) -> None:
        self.available = available
        self.required = required
        super().__init__(
            message or f"Need at least {required} entries, found {available}",
            details={"available": available, "required": required},
        )


class PatternNotFoundError(AnalysisError):
    """Requested pattern does not exist for this user."""

    code = "PATTERN_NOT_FOUND"
    default_message = "Pattern not found"

    def __init__(self, pattern_id: str, *, message: str | None = None) -> None:
        self.pattern_id = pattern_id
        super().__init__(
            message or f"Pattern {pattern_id} not found",
            details={"pattern_id": pattern_id},
        )


# =============================================================================
# Collaborator Errors
# =============================================================================


class CollaboratorError(ReverieError):
    """Base error for external collaborators."""

    code = "COLLABORATOR_ERROR"
    default_message = "External collaborator failed"


class CollaboratorUnavailableError(CollaboratorError):
    """Suggestion service timed out or could not be reached."""

    code = "COLLABORATOR_UNAVAILABLE"
    default_message = "Suggestion service unavailable"
    recoverable = True


class MalformedCollaboratorResponse(CollaboratorError):
    """Suggestion service returned a payload that could not be parsed."""

    code = "MALFORMED_COLLABORATOR_RESPONSE"
    default_message = "Suggestion service returned an unreadable response"


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(ReverieError):
    """Base error for storage collaborators."""

    code = "STORAGE_ERROR"
    default_message = "Storage operation failed"


class SnapshotProviderError(StorageError):
    """Entries could not be read from the entry store."""

    code = "SNAPSHOT_PROVIDER_ERROR"
    default_message = "Could not read journal entries"


class PersistenceError(StorageError):
    """A single pattern could not be written."""

    code = "PERSISTENCE_ERROR"
    default_message = "Could not save pattern"

    def __init__(
        self,
        pattern_name: str,
        *,
        message: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.pattern_name = pattern_name
        merged = {"pattern_name": pattern_name}
        merged.update(details or {})
        super().__init__(
            message or f"Could not save pattern '{pattern_name}'",
            details=merged,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ReverieError):
    """Base error for configuration issues."""

    code = "CONFIGURATION_ERROR"
    default_message = "Configuration error"
    recoverable = True


class InvalidWindowError(ConfigurationError):
    """Requested analysis window is outside the allowed range."""

    code = "INVALID_WINDOW"
    default_message = "Invalid analysis window"

    def __init__(self, days: int, minimum: int, maximum: int) -> None:
        self.days = days
        super().__init__(
            f"Window of {days} days is outside {minimum}-{maximum}",
            details={"days": days, "minimum": minimum, "maximum": maximum},
        )


class InvalidConfigError(ConfigurationError):
    """Configuration is invalid."""

    code = "INVALID_CONFIG"
    default_message = "Invalid configuration"


__all__ = [
    # Base
    "ReverieError",
    # Analysis
    "AnalysisError",
    "InsufficientDataError",
    "PatternNotFoundError",
    # Collaborators
    "CollaboratorError",
    "CollaboratorUnavailableError",
    "MalformedCollaboratorResponse",
    # Storage
    "StorageError",
    "SnapshotProviderError",
    "PersistenceError",
    # Configuration
    "ConfigurationError",
    "InvalidWindowError",
    "InvalidConfigError",
]
