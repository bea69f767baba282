"""Error definitions for the Linguci catalog translator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises runtime errors for reporting in the run summary."""

    FILE_IO = auto()
    FORMAT = auto()
    TRANSLATION = auto()
    TIMEOUT = auto()
    OTHER = auto()


class LinguciError(Exception):
    """Base exception for all custom errors."""


class ConfigurationError(LinguciError):
    """Raised when the project configuration is missing or invalid."""


class CatalogNotFoundError(LinguciError):
    """Raised when a source or translation catalog does not exist."""


class CatalogReadError(LinguciError):
    """Raised when a catalog file cannot be read or parsed."""


class TranslationProviderConfigurationError(LinguciError):
    """Raised when the translation provider is misconfigured."""


class TranslationProviderError(LinguciError):
    """Raised when a single provider request fails."""


class SchemaValidationError(TranslationProviderError):
    """Raised when a provider response does not satisfy the batch schema."""


class IncompleteBatchError(TranslationProviderError):
    """Raised in strict mode when a response omits requested keys."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            "Translation provider response missing keys: " + ", ".join(repr(k) for k in missing)
        )


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None


def categorise(exc: BaseException) -> ErrorCategory:
    """Map an exception raised while executing a task to its category."""

    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, SchemaValidationError):
        return ErrorCategory.FORMAT
    if isinstance(exc, TranslationProviderError):
        return ErrorCategory.TRANSLATION
    if isinstance(exc, OSError):
        return ErrorCategory.FILE_IO
    return ErrorCategory.OTHER
