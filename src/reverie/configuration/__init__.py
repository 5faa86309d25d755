"""Configuration utilities for Reverie."""

from .settings import (
    DEFAULT_CONFIG_PATH,
    AnalysisSettings,
    SecretStore,
    Settings,
    StorageSettings,
    SuggestionSettings,
    WorkspaceSettings,
    bootstrap_settings,
    load_settings,
    save_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AnalysisSettings",
    "SecretStore",
    "Settings",
    "StorageSettings",
    "SuggestionSettings",
    "WorkspaceSettings",
    "bootstrap_settings",
    "load_settings",
    "save_settings",
]
