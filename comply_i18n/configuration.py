"""Configuration loader: ``comply.yml``, ``.env`` and the process environment."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import ConfigurationError
from .structures import ProviderConfig

PROJECT_FILE = "comply.yml"


class TranslationSettings(BaseModel):
    """The ``translation:`` block of ``comply.yml``."""

    enabled: bool = Field(default=False, description="Whether translation runs at all.")
    languages: List[str] = Field(default_factory=list, description="Target language tags.")
    provider: Optional[str] = Field(default=None, description="openai, anthropic or ollama.")
    model: Optional[str] = Field(default=None, description="Provider-specific model name.")

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data: Any) -> Any:
        if isinstance(data, dict):
            provider = data.get("provider")
            if isinstance(provider, str):
                data["provider"] = provider.strip().lower() or None
            languages = data.get("languages")
            if isinstance(languages, str):
                data["languages"] = [part.strip() for part in languages.split(",") if part.strip()]
            elif languages is None:
                data["languages"] = []
        return data


class EnvironmentSettings(BaseModel):
    """Credentials and endpoints taken from ``.env`` and the environment."""

    OPENAI_API_KEY: Optional[str] = Field(default=None, repr=False)
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None, repr=False)
    OLLAMA_URL: str = Field(default="http://localhost:11434")
    OLLAMA_MODEL: str = Field(default="llama3:8b")
    COMPLY_PROVIDER_DEBUG: bool = Field(default=False)


@lru_cache(maxsize=4)
def _load_translation_settings(app_dir: Path) -> TranslationSettings:
    """Load the translation block once per project directory."""

    project_file = app_dir / PROJECT_FILE
    if not project_file.exists():
        return TranslationSettings()
    try:
        parsed = yaml.safe_load(project_file.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigurationError(
            f"Configuration file {project_file} could not be read: {exc}"
        ) from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Configuration file {project_file} is not valid YAML: {exc}"
        ) from exc
    if not isinstance(parsed, Mapping):
        raise ConfigurationError(
            f"Invalid configuration file {project_file}: expected a mapping at the root."
        )

    block = parsed.get("translation") or {}
    if not isinstance(block, Mapping):
        raise ConfigurationError(
            f"Invalid configuration file {project_file}: 'translation' must be a mapping."
        )
    try:
        return TranslationSettings.model_validate(dict(block))
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_errors(exc.errors())) from exc


@lru_cache(maxsize=4)
def _load_environment(app_dir: Path) -> EnvironmentSettings:
    """Merge ``.env`` and process environment variables, the latter winning."""

    allowed = set(EnvironmentSettings.model_fields.keys())
    combined: dict[str, Any] = {}

    def merge_values(values: Mapping[str, Optional[str]]) -> None:
        for key, value in sorted(values.items()):
            if key not in allowed or value is None or value == "":
                continue
            combined[key] = value

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        merge_values(dotenv_values(dotenv_path))
    merge_values(dict(os.environ))

    try:
        return EnvironmentSettings.model_validate(combined)
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_errors(exc.errors())) from exc


def _format_validation_errors(entries: Sequence[Mapping[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        location = ".".join(str(part) for part in entry.get("loc") or () if part not in {None, ""})
        message = str(entry.get("msg") or "Invalid value")
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_translation_settings(app_dir: Path | None = None) -> TranslationSettings:
    """Return the validated ``translation:`` block of ``comply.yml``."""

    return _load_translation_settings((app_dir or Path.cwd()).resolve())


def get_environment(app_dir: Path | None = None) -> EnvironmentSettings:
    return _load_environment((app_dir or Path.cwd()).resolve())


def reset_configuration_cache() -> None:
    """Forget loaded settings so the next call reads the sources again."""

    _load_translation_settings.cache_clear()
    _load_environment.cache_clear()


def provider_config_from_settings(
    kind: str,
    model: Optional[str],
    environment: EnvironmentSettings,
) -> ProviderConfig:
    """Attach credentials or the local endpoint to a provider kind."""

    normalized = kind.strip().lower()
    if normalized == "openai":
        return ProviderConfig(kind=normalized, model=model, api_key=environment.OPENAI_API_KEY)
    if normalized == "anthropic":
        return ProviderConfig(kind=normalized, model=model, api_key=environment.ANTHROPIC_API_KEY)
    if normalized == "ollama":
        return ProviderConfig(
            kind=normalized,
            model=model or environment.OLLAMA_MODEL,
            base_url=environment.OLLAMA_URL,
        )
    return ProviderConfig(kind=kind, model=model)
