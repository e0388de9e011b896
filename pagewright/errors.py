"""Error definitions for the pagewright translator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .structures import ParagraphTranslation


class ErrorCategory(Enum):
    """Categorises handled conditions so they can be counted and reported."""

    CAPTURE = auto()
    TRANSLATION = auto()
    REAPPLY = auto()
    STRUCTURE = auto()
    DIRECTION = auto()


class PagewrightError(Exception):
    """Base exception for all custom errors."""


class UnsupportedFileTypeError(PagewrightError):
    """Raised when a given file extension is not supported."""


class OverwriteRefusedError(PagewrightError):
    """Raised when attempting to overwrite an output without consent."""


class TranslationProviderConfigurationError(PagewrightError):
    """Raised when the translation provider is misconfigured."""


class TranslationProviderError(PagewrightError):
    """Raised when the translation provider fails a request."""


class NoTextSelectedError(PagewrightError):
    """Raised when a selection resolves to no translatable text."""


class NothingTranslatedError(PagewrightError):
    """Raised when no paragraph of a span (or document) could be translated.

    The document is left untouched when this is raised.
    """

    def __init__(
        self,
        message: str,
        results: Optional[Sequence["ParagraphTranslation"]] = None,
    ) -> None:
        super().__init__(message)
        self.results = list(results or [])


class ResourceNotFound(PagewrightError, LookupError):
    """Raised when a named font, color or style cannot be resolved."""


class AttributeUnavailable(PagewrightError):
    """Raised when a host cannot read or write a style attribute."""


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None
