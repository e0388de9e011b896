"""Layered configuration loader for pagewright."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Sequence

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import TranslationProviderConfigurationError

APP_NAME = "pagewright"
CONFIG_FILENAME = "config.yaml"


class PagewrightConfig(BaseModel):
    """Schema describing all supported configuration options."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    LLM_PROVIDER: Literal["azure_openai", "openai"] = Field(
        default="openai",
        description="Large language model provider selection.",
    )
    AZURE_OPENAI_API_KEY: str | None = Field(default=None, repr=False)
    AZURE_OPENAI_ENDPOINT: str | None = Field(default=None)
    AZURE_OPENAI_API_VERSION: str | None = Field(default=None)
    AZURE_OPENAI_DEPLOYMENT_NAME: str | None = Field(default=None)
    OPENAI_API_KEY: str | None = Field(default=None, repr=False)
    PAGEWRIGHT_PROVIDER_DEBUG: bool = Field(default=False)
    PAGEWRIGHT_TARGET_LANGUAGE: str | None = Field(default=None)
    PAGEWRIGHT_SOURCE_LANGUAGE: str | None = Field(default=None)
    PAGEWRIGHT_INTER_CALL_DELAY: float = Field(default=0.2, ge=0)
    PAGEWRIGHT_RETRY_DELAY: float = Field(default=0.3, ge=0)
    PAGEWRIGHT_FINE_GRAINED: bool = Field(default=False)

    @model_validator(mode="before")
    @classmethod
    def _normalise_provider(cls, data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("LLM_PROVIDER")
            if isinstance(raw_value, str):
                normalized = raw_value.strip().lower().replace("-", "_")
                synonyms = {
                    "azure_open_ai": "azure_openai",
                    "azureopenai": "azure_openai",
                }
                normalized = synonyms.get(normalized, normalized)
                if normalized not in {"openai", "azure_openai"}:
                    normalized = "openai"
                data["LLM_PROVIDER"] = normalized
        return data


@dataclass(frozen=True)
class ConfigInstance:
    """Validated settings plus the layer that supplied each key."""

    settings: PagewrightConfig
    provenance: Dict[str, str] = field(default_factory=dict)

    def model(self) -> PagewrightConfig:
        return self.settings


def home_config_path() -> Path:
    return Path.home() / ".config" / APP_NAME / CONFIG_FILENAME


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    combined: dict[str, Any] = {}
    provenance: dict[str, str] = {}

    _load_discovered_yaml(combined, provenance=provenance, app_dir=base_dir)
    _merge_env_sources(combined, provenance=provenance, app_dir=base_dir)

    try:
        model = PagewrightConfig.model_validate(combined)
    except ValidationError as exc:
        issues = _format_validation_errors(exc.errors(), provenance)
        raise TranslationProviderConfigurationError(issues) from exc
    return ConfigInstance(settings=model, provenance=provenance)


def _load_discovered_yaml(
    target: dict[str, Any],
    *,
    provenance: dict[str, str],
    app_dir: Path,
) -> None:
    """Merge the home and local YAML files; the local file wins."""

    candidates = [("home", home_config_path()), ("local", app_dir / CONFIG_FILENAME)]
    for label, path in candidates:
        if not path.is_file():
            continue
        try:
            with path.open("r", encoding="utf-8") as handle:
                parsed = yaml.safe_load(handle)
        except (OSError, yaml.YAMLError) as exc:
            raise TranslationProviderConfigurationError(
                f"Configuration files could not be read: {path}: {exc}"
            ) from exc
        if parsed is None:
            continue
        if not isinstance(parsed, Mapping):
            raise TranslationProviderConfigurationError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        for key, value in parsed.items():
            target[str(key)] = value
            provenance[str(key)] = f"file:{label}:{path}"


def _merge_env_sources(
    target: dict[str, Any],
    *,
    provenance: dict[str, str],
    app_dir: Path,
) -> None:
    """Merge .env and process environment variables into the target mapping."""

    allowed = set(PagewrightConfig.model_fields.keys())

    def merge_values(values: Mapping[str, str | None], *, source_prefix: str) -> None:
        for key, value in sorted(values.items()):
            if value is None:
                continue
            if key not in allowed:
                continue
            target[key] = value
            provenance[key] = f"env:{source_prefix}:{key}"

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        merge_values(dotenv_values(dotenv_path), source_prefix=".env")

    merge_values(
        {k: v for k, v in os.environ.items() if isinstance(v, str)},
        source_prefix="process",
    )


def validate_provider_settings(settings: PagewrightConfig) -> None:
    provider = settings.LLM_PROVIDER
    errors: list[str] = []

    if provider == "openai":
        if not settings.OPENAI_API_KEY:
            errors.append(
                "OPENAI_API_KEY is required when LLM_PROVIDER is 'openai'."
            )
    elif provider == "azure_openai":
        missing = [
            name
            for name, value in {
                "AZURE_OPENAI_API_KEY": settings.AZURE_OPENAI_API_KEY,
                "AZURE_OPENAI_ENDPOINT": settings.AZURE_OPENAI_ENDPOINT,
                "AZURE_OPENAI_API_VERSION": settings.AZURE_OPENAI_API_VERSION,
                "AZURE_OPENAI_DEPLOYMENT_NAME": settings.AZURE_OPENAI_DEPLOYMENT_NAME,
            }.items()
            if not value
        ]
        if missing:
            errors.append(
                "The following Azure OpenAI settings must be provided when "
                f"LLM_PROVIDER is 'azure_openai': {', '.join(missing)}."
            )

    if errors:
        bullet_list = "\n".join(f"- {message}" for message in errors)
        raise TranslationProviderConfigurationError(
            "Configuration validation errors detected:\n" + bullet_list
        )


def _format_validation_errors(
    entries: Sequence[Mapping[str, Any]],
    provenance: Mapping[str, str] | None = None,
) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("loc") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("msg") or "Invalid value")
        source = (provenance or {}).get(location)
        origin = f" (source: {source})" if source else ""
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}{origin}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> PagewrightConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()


def clear_cache() -> None:
    _load_config_instance.cache_clear()
