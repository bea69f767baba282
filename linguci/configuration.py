"""Project and environment configuration loading for Linguci."""

from __future__ import annotations

import os
import pathlib
from functools import lru_cache
from typing import Any, List, Mapping, Optional, Sequence

import yaml
from dotenv import dotenv_values
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import (
    CatalogNotFoundError,
    ConfigurationError,
    TranslationProviderConfigurationError,
)
from .locales import (
    LANGUAGE_NAMES,
    LOCALE_PLACEHOLDER,
    detect_source_locale,
    is_known_locale,
    resolve_translation_path,
)
from .providers import ProviderKind

CONFIG_FILENAMES = ("linguci.yml", "linguci.yaml")


class LinguciSettings(BaseModel):
    """Secrets and switches read from ``.env`` and the process environment."""

    model_config = ConfigDict(extra="ignore")

    LLM_PROVIDER: Optional[str] = Field(default=None)
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    AZURE_OPENAI_API_KEY: Optional[str] = Field(default=None)
    AZURE_OPENAI_ENDPOINT: Optional[str] = Field(default=None)
    AZURE_OPENAI_API_VERSION: Optional[str] = Field(default=None)
    AZURE_OPENAI_DEPLOYMENT_NAME: Optional[str] = Field(default=None)
    LINGUCI_PROVIDER_DEBUG: bool = Field(default=False)


class FileMapping(BaseModel):
    """One source catalog and the template of its translations."""

    source: str
    translation: str

    @property
    def is_templated(self) -> bool:
        return LOCALE_PLACEHOLDER in self.translation


class LLMConfig(BaseModel):
    provider: ProviderKind = ProviderKind.OPENAI
    model: Optional[str] = None

    @field_validator("provider", mode="before")
    @classmethod
    def _normalise_provider(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return ProviderKind.parse(value)
            except TranslationProviderConfigurationError as exc:
                raise ValueError(str(exc)) from exc
        return value


class ProjectConfig(BaseModel):
    """Schema of ``linguci.yml``."""

    base_path: pathlib.Path
    locales: List[str] = Field(min_length=1)
    files: List[FileMapping] = Field(min_length=1)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    batch_size: PositiveInt = 5
    language_concurrency: PositiveInt = 1
    max_retries: NonNegativeInt = 3
    retry_delay: NonNegativeFloat = 1.0
    strict_batches: bool = False
    task_timeout: Optional[PositiveFloat] = None
    backup: bool = True
    instruction: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _reject_non_mapping(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            raise ValueError("expected a mapping at the root of the configuration file")
        return data

    @field_validator("locales")
    @classmethod
    def _known_locales(cls, value: List[str]) -> List[str]:
        unknown = [locale for locale in value if not is_known_locale(locale)]
        if unknown:
            raise ValueError(
                f"Invalid locale code(s): {', '.join(unknown)}. "
                f"Must be one of: {', '.join(LANGUAGE_NAMES)}"
            )
        return value

    def source_path(self, mapping: FileMapping) -> pathlib.Path:
        return self.base_path / mapping.source

    def target_locales(self, mapping: FileMapping) -> List[str]:
        """Configured locales minus the source catalog's own locale."""

        source_locale = detect_source_locale(mapping.source, self.locales)
        return [locale for locale in self.locales if locale != source_locale]

    def translation_path(self, mapping: FileMapping, locale: str) -> pathlib.Path:
        if mapping.is_templated:
            return resolve_translation_path(self.base_path, mapping.translation, locale)
        return self.base_path / mapping.translation


def find_config_file(workspace: pathlib.Path) -> pathlib.Path:
    for name in CONFIG_FILENAMES:
        candidate = workspace / name
        if candidate.is_file():
            return candidate
    raise ConfigurationError(
        "Config file not found: linguci.yml or linguci.yaml must exist in "
        f"{workspace}."
    )


def load_project(
    workspace: pathlib.Path,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ProjectConfig:
    """Read, merge, and validate the project configuration file."""

    config_path = find_config_file(workspace)
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading config file: {exc}") from exc

    data = dict(raw) if isinstance(raw, Mapping) else raw
    if isinstance(data, dict):
        base = data.get("base_path")
        data["base_path"] = workspace / base if base else workspace
        for key, value in (overrides or {}).items():
            if value is not None:
                data[key] = value

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_errors(exc.errors())) from exc


def validate_paths(project: ProjectConfig) -> None:
    """Ensure every source and translation catalog exists before any work starts."""

    missing: List[str] = []
    for mapping in project.files:
        source = project.source_path(mapping)
        if not source.is_file():
            missing.append(f"Source file does not exist: {mapping.source}")
            continue
        targets = {
            project.translation_path(mapping, locale)
            for locale in project.target_locales(mapping)
        }
        for target in sorted(targets):
            if not target.is_file():
                missing.append(f"Translation file does not exist: {target}")

    if missing:
        raise CatalogNotFoundError("\n".join(missing))


def _env_sources(workspace: pathlib.Path) -> dict[str, Any]:
    """Merge .env and process environment variables, process env last."""

    allowed = set(LinguciSettings.model_fields)
    merged: dict[str, Any] = {}

    def merge_values(values: Mapping[str, Optional[str]]) -> None:
        for key, value in sorted(values.items()):
            if value is None or key not in allowed:
                continue
            merged[key] = value

    dotenv_path = workspace / ".env"
    if dotenv_path.exists():
        merge_values(dotenv_values(dotenv_path))
    merge_values({k: v for k, v in os.environ.items() if isinstance(v, str)})
    return merged


@lru_cache(maxsize=8)
def _load_settings(workspace: pathlib.Path) -> LinguciSettings:
    try:
        return LinguciSettings.model_validate(_env_sources(workspace))
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_errors(exc.errors())) from exc


def get_settings(workspace: pathlib.Path | None = None) -> LinguciSettings:
    """Return the validated environment settings for ``workspace``."""

    return _load_settings((workspace or pathlib.Path.cwd()).resolve())


def _format_validation_errors(entries: Sequence[Mapping[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("loc") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("msg") or "Invalid value")
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}")
    return "Configuration validation errors detected:\n" + "\n".join(details)
