"""User-friendly error messages for Reverie.

Human-readable messages and recovery suggestions for every error code, so CLI
users never see raw tracebacks.

Privacy Note:
- Error messages NEVER include journal content
- Entry narratives are never echoed back
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Error Message Catalog
# =============================================================================

ERROR_MESSAGES: dict[str, str] = {
    # Analysis errors
    "ANALYSIS_ERROR": "We couldn't analyze your entries. Please try again.",
    "INSUFFICIENT_DATA": "There aren't enough entries yet to find patterns.",
    "PATTERN_NOT_FOUND": "That pattern wasn't found.",
    # Collaborator errors
    "COLLABORATOR_ERROR": "An external service encountered an issue.",
    "COLLABORATOR_UNAVAILABLE": "The suggestion service is unavailable. Local analysis was used.",
    "MALFORMED_COLLABORATOR_RESPONSE": "The suggestion service sent an unreadable response.",
    # Storage errors
    "STORAGE_ERROR": "A storage issue occurred.",
    "SNAPSHOT_PROVIDER_ERROR": "Your journal entries couldn't be read.",
    "PERSISTENCE_ERROR": "A pattern couldn't be saved.",
    # Configuration errors
    "CONFIGURATION_ERROR": "There's a configuration issue.",
    "INVALID_WINDOW": "The time range must be between 7 and 365 days.",
    "INVALID_CONFIG": "The configuration is invalid. Check settings.",
    # Generic
    "REVERIE_ERROR": "An unexpected error occurred. Please try again.",
    "UNKNOWN_ERROR": "Something went wrong. Please try again.",
}


# =============================================================================
# Recovery Suggestions
# =============================================================================

RECOVERY_SUGGESTIONS: dict[str, str] = {
    "ANALYSIS_ERROR": "Run the detection again with --refresh.",
    "INSUFFICIENT_DATA": "Keep recording entries regularly, or widen the range with --days.",
    "PATTERN_NOT_FOUND": "List available patterns with: reverie patterns list",
    "COLLABORATOR_ERROR": "Check the suggestion service settings: reverie config show",
    "COLLABORATOR_UNAVAILABLE": "Start the service with 'ollama serve' or disable suggestions.",
    "MALFORMED_COLLABORATOR_RESPONSE": "Try a different model in suggestions.model.",
    "STORAGE_ERROR": "Check disk space and file permissions.",
    "SNAPSHOT_PROVIDER_ERROR": "Verify the database path: reverie config show",
    "PERSISTENCE_ERROR": "Run the detection again; other patterns were saved.",
    "CONFIGURATION_ERROR": "Check config: reverie config show",
    "INVALID_WINDOW": "Pass --days with a value between 7 and 365.",
    "INVALID_CONFIG": "Recreate the file with: reverie config init",
    "REVERIE_ERROR": "If this persists, please report the issue.",
    "UNKNOWN_ERROR": "Try again. Report if the issue continues.",
}


# =============================================================================
# Helper Functions
# =============================================================================


def _error_code(error: Any) -> str:
    if hasattr(error, "code"):
        return error.code
    if isinstance(error, str):
        return error
    return type(error).__name__.upper()


def get_user_message(error: Any) -> str:
    """Get user-friendly message for an error.

    Args:
        error: The error (can be Exception or error code string)

    Returns:
        User-friendly error message
    """
    return ERROR_MESSAGES.get(_error_code(error), ERROR_MESSAGES["UNKNOWN_ERROR"])


def get_recovery_suggestion(error: Any) -> str:
    """Get recovery suggestion for an error."""
    return RECOVERY_SUGGESTIONS.get(_error_code(error), RECOVERY_SUGGESTIONS["UNKNOWN_ERROR"])


def format_error_for_cli(error: Any) -> str:
    """Format error for CLI output.

    Args:
        error: The error to format

    Returns:
        CLI-formatted error message
    """
    message = get_user_message(error)
    suggestion = get_recovery_suggestion(error)
    code = getattr(error, "code", "ERROR")

    lines = [
        f"Error [{code}]: {message}",
        "",
        f"Suggestion: {suggestion}",
    ]

    if getattr(error, "details", None):
        lines.append("")
        lines.append("Details:")
        for key, value in error.details.items():
            # Don't expose journal content
            if key not in ("narrative", "content", "api_key"):
                lines.append(f"  {key}: {value}")

    return "\n".join(lines)


__all__ = [
    "ERROR_MESSAGES",
    "RECOVERY_SUGGESTIONS",
    "get_user_message",
    "get_recovery_suggestion",
    "format_error_for_cli",
]
