"""Typed settings management for the Reverie workspace.

This module wraps user configuration in Pydantic models so the CLI and the
pattern engine can rely on validated thresholds, windows and collaborator
endpoints. The suggestion service API key never lands in the config file; it
is kept in the OS keyring through SecretStore.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import keyring
from keyring.errors import PasswordDeleteError
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator, model_validator

from reverie.errors import InvalidConfigError

logger = logging.getLogger(__name__)


DEFAULT_HOME = Path.home() / ".reverie"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"
DEFAULT_SECRETS_SERVICE = "reverie"
API_KEY_SECRET = "suggestions:api_key"
MASK = "***"


class AnalysisSettings(BaseModel):
    """Thresholds used by the local analyzers and the ranker."""

    min_entries: int = Field(3, ge=1, description="Snapshot size below which nothing is detected")
    min_occurrences: int = Field(3, ge=1)
    min_relative_frequency: float = Field(0.2, ge=0.0, le=1.0)
    max_related: int = Field(5, ge=1, le=5)
    max_patterns: int = Field(10, ge=1)
    lucidity_threshold: float = Field(7, ge=0, le=10)
    suggestion_min_entries: int = Field(5, ge=1)
    default_window_days: int = Field(90, ge=1)
    min_window_days: int = Field(7, ge=1)
    max_window_days: int = Field(365, ge=1)

    @model_validator(mode="after")
    def _validate_window_bounds(self) -> "AnalysisSettings":
        if not self.min_window_days <= self.default_window_days <= self.max_window_days:
            raise ValueError("default_window_days must lie between min_window_days and max_window_days")
        return self


class SuggestionSettings(BaseModel):
    """External suggestion service (Ollama-compatible generate endpoint)."""

    enabled: bool = Field(False, description="Ask the suggestion service for extra patterns")
    base_url: str = Field("http://localhost:11434", description="Service base URL")
    model: str = Field("llama3.1:8b-instruct-q4_0", description="Model name to request")
    timeout_seconds: float = Field(30.0, gt=0, le=600)
    api_key: Optional[SecretStr] = Field(
        default=None, description="Bearer token for hosted gateways"
    )

    @field_validator("base_url")
    def _validate_base_url(cls, value: str) -> str:
        if not value.startswith("http://") and not value.startswith("https://"):
            raise ValueError("base_url must start with http:// or https://")
        return value.rstrip("/")


class StorageSettings(BaseModel):
    """Where entries and patterns live."""

    database_path: Path = Field(
        default=DEFAULT_HOME / "workspace" / "reverie.db",
        description="SQLite database holding entries and patterns",
    )


class WorkspaceSettings(BaseModel):
    """Top-level workspace configuration."""

    workspace_path: Path = Field(default=DEFAULT_HOME / "workspace")
    storage: StorageSettings = Field(default_factory=StorageSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    suggestions: SuggestionSettings = Field(default_factory=SuggestionSettings)


class Settings(BaseModel):
    """Root configuration state."""

    workspace: WorkspaceSettings = Field(default_factory=WorkspaceSettings)


@dataclass
class SecretStore:
    """Keyring abstraction for storing credentials."""

    service_name: str = DEFAULT_SECRETS_SERVICE
    keyring_module: Any = field(default=keyring)

    def set_secret(self, key: str, value: str) -> None:
        self.keyring_module.set_password(self.service_name, key, value)

    def get_secret(self, key: str) -> Optional[str]:
        return self.keyring_module.get_password(self.service_name, key)

    def delete_secret(self, key: str) -> None:
        try:
            self.keyring_module.delete_password(self.service_name, key)
        except PasswordDeleteError:
            logger.debug(f"No secret stored for {key}")


def load_settings(path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """Load settings from disk or raise if invalid."""

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at {path}")
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise InvalidConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    _drop_masked_secrets(payload)
    try:
        return Settings.model_validate(payload)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}") from exc


def save_settings(settings: Settings, path: Path = DEFAULT_CONFIG_PATH) -> None:
    """Persist settings to disk with masked secrets."""

    payload = settings.model_dump(mode="json")
    payload = _mask_secret_fields(payload, settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))


def bootstrap_settings(
    *,
    path: Path = DEFAULT_CONFIG_PATH,
    secret_store: SecretStore | None = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Create or load settings respecting overrides and environment variables.

    Precedence, lowest first: file (or defaults), ``overrides``, ``REVERIE_*``
    environment variables. A plain API key from any of these is moved into the
    keyring; a masked one is read back from it.
    """

    secret_store = secret_store or SecretStore()
    overrides = overrides or {}

    if path.exists():
        settings = load_settings(path)
    else:
        settings = Settings()
        logger.info(f"Creating default configuration at {path}")

    merged = settings.model_dump(mode="python")
    merged = _apply_overrides(merged, overrides)
    merged = _apply_env_overrides(merged)

    try:
        resolved = Settings.model_validate(merged)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}") from exc
    _ensure_directories(resolved)
    _hydrate_secrets(resolved, secret_store)
    save_settings(resolved, path)
    return resolved


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _apply_overrides(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    workspace = data.setdefault("workspace", {})
    _set_env_override(workspace, "workspace_path", "REVERIE_WORKSPACE_PATH")

    storage = workspace.setdefault("storage", {})
    _set_env_override(storage, "database_path", "REVERIE_DATABASE_PATH")

    analysis = workspace.setdefault("analysis", {})
    _set_env_override(analysis, "min_entries", "REVERIE_MIN_ENTRIES", cast_int=True)
    _set_env_override(analysis, "max_patterns", "REVERIE_MAX_PATTERNS", cast_int=True)
    _set_env_override(analysis, "default_window_days", "REVERIE_DEFAULT_WINDOW_DAYS", cast_int=True)

    suggestions = workspace.setdefault("suggestions", {})
    _set_env_override(suggestions, "enabled", "REVERIE_SUGGESTIONS_ENABLED", cast_bool=True)
    _set_env_override(suggestions, "base_url", "REVERIE_SUGGESTIONS_BASE_URL")
    _set_env_override(suggestions, "model", "REVERIE_SUGGESTIONS_MODEL")
    _set_env_override(suggestions, "timeout_seconds", "REVERIE_SUGGESTIONS_TIMEOUT", cast_float=True)
    _set_env_override(suggestions, "api_key", "REVERIE_SUGGESTIONS_API_KEY")
    return data


def _set_env_override(
    mapping: Dict[str, Any],
    key: str,
    env_name: str,
    *,
    cast_bool: bool = False,
    cast_int: bool = False,
    cast_float: bool = False,
) -> None:
    raw = os.getenv(env_name)
    if raw is None:
        return
    try:
        if cast_bool:
            mapping[key] = raw.lower() in {"1", "true", "yes"}
        elif cast_int:
            mapping[key] = int(raw)
        elif cast_float:
            mapping[key] = float(raw)
        else:
            mapping[key] = raw
    except ValueError as exc:
        raise InvalidConfigError(f"Invalid value for {env_name}: {raw!r}") from exc


def _ensure_directories(settings: Settings) -> None:
    settings.workspace.workspace_path.mkdir(parents=True, exist_ok=True)
    settings.workspace.storage.database_path.parent.mkdir(parents=True, exist_ok=True)


def _hydrate_secrets(settings: Settings, secret_store: SecretStore) -> None:
    suggestions = settings.workspace.suggestions
    if suggestions.api_key is not None:
        secret_store.set_secret(API_KEY_SECRET, suggestions.api_key.get_secret_value())
        return
    if not suggestions.enabled:
        return
    stored = secret_store.get_secret(API_KEY_SECRET)
    if stored:
        suggestions.api_key = SecretStr(stored)


def _drop_masked_secrets(payload: Dict[str, Any]) -> None:
    suggestions = payload.get("workspace", {}).get("suggestions", {})
    if suggestions.get("api_key") == MASK:
        suggestions["api_key"] = None


def _mask_secret_fields(payload: Dict[str, Any], settings: Settings) -> Dict[str, Any]:
    suggestions = payload.get("workspace", {}).get("suggestions", {})
    if settings.workspace.suggestions.api_key is not None:
        suggestions["api_key"] = MASK
    return payload
