"""Error definitions for the comply translation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises pipeline errors for batch reporting."""

    CONFIGURATION = auto()
    FILE_IO = auto()
    PROVIDER = auto()
    RENDERER = auto()
    OTHER = auto()


class ComplyError(Exception):
    """Base exception for all custom errors."""


class ConfigurationError(ComplyError):
    """Raised when translation is disabled or misconfigured."""


class ProviderConfigurationError(ConfigurationError):
    """Raised when the translation provider cannot be resolved."""


class TranslationProviderError(ComplyError):
    """Raised when a translation provider call fails."""


class ProviderHTTPError(TranslationProviderError):
    """Raised when a provider answers with a non-success status code."""

    def __init__(self, provider: str, status_code: int, body: str) -> None:
        super().__init__(
            f"{provider} API request failed with status {status_code}: {body}"
        )
        self.provider = provider
        self.status_code = status_code
        self.body = body


class UnexpectedResponseFormatError(TranslationProviderError):
    """Raised when a successful provider response has an unexpected shape."""

    def __init__(self, provider: str, body: str) -> None:
        super().__init__(f"{provider} returned an unexpected response format: {body}")
        self.provider = provider
        self.body = body


class DocumentFormatError(ComplyError):
    """Raised when a source document lacks well-formed frontmatter."""


class RendererError(ComplyError):
    """Raised when the external renderer fails."""


class UnsupportedFormatError(RendererError):
    """Raised when an output format other than pdf or html is requested."""


class DocumentTranslationError(ComplyError):
    """Raised when one document cannot be translated and rendered."""

    def __init__(self, document: str, stage: str, language: str) -> None:
        super().__init__(
            f"unable to {stage} for document '{document}' ({language})"
        )
        self.document = document
        self.stage = stage
        self.language = language

    def __str__(self) -> str:
        message = super().__str__()
        if self.__cause__ is not None:
            return f"{message}: {self.__cause__}"
        return message


class TemplateTranslationError(ComplyError):
    """Raised when a template cannot be translated into one language."""

    def __init__(self, path: str, language: str) -> None:
        super().__init__(f"failed to translate {path} to {language}")
        self.path = path
        self.language = language

    def __str__(self) -> str:
        message = super().__str__()
        if self.__cause__ is not None:
            return f"{message}: {self.__cause__}"
        return message


class BatchError(ComplyError):
    """Raised when at least one translated batch reported a failure."""

    def __init__(self, errors: list[BaseException], reports: Optional[list] = None) -> None:
        first = errors[0] if errors else None
        super().__init__(
            f"{len(errors)} translated batch(es) failed; first error: {first}"
        )
        self.errors = errors
        self.first = first
        self.reports = reports or []


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None


def categorise(exc: BaseException) -> ErrorCategory:
    """Map an exception (or the cause it wraps) to an error category."""

    cause = exc
    if isinstance(exc, (DocumentTranslationError, TemplateTranslationError)):
        cause = exc.__cause__ or exc
    if isinstance(cause, ConfigurationError):
        return ErrorCategory.CONFIGURATION
    if isinstance(cause, TranslationProviderError):
        return ErrorCategory.PROVIDER
    if isinstance(cause, RendererError):
        return ErrorCategory.RENDERER
    if isinstance(cause, (OSError, DocumentFormatError)):
        return ErrorCategory.FILE_IO
    return ErrorCategory.OTHER
