"""Interfaces a document host must provide to the translation pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Sequence


class Character(ABC):
    """A single character whose style attributes can be read and written."""

    @property
    @abstractmethod
    def text(self) -> str:
        """The character itself."""

    @abstractmethod
    def read(self, key: str) -> Any:
        """Return the value of one style key; raise on failure."""

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """Write one style key; raise on failure."""


class Paragraph(ABC):
    """An ordered run of characters closed by a paragraph break."""

    @property
    @abstractmethod
    def text(self) -> str:
        """Paragraph text without its terminator."""

    @abstractmethod
    def characters(self) -> Sequence[Character]:
        """Characters of the paragraph, terminator excluded."""

    @abstractmethod
    def set_property(self, name: str, value: Any) -> None:
        """Write a paragraph-level property; raise if unsupported."""


class TextSpan(ABC):
    """A contiguous run of paragraphs owned by one text container."""

    paragraph_break: str = "\r"

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable position of the span."""

    @property
    @abstractmethod
    def contents(self) -> str:
        """Whole text of the span."""

    @abstractmethod
    def paragraphs(self) -> Sequence[Paragraph]:
        """Enumerate paragraphs from the live structure."""

    @abstractmethod
    def replace_contents(self, text: str) -> None:
        """Replace the whole span in a single write."""


class ResourceTable(ABC):
    """Named resources of a document; each lookup may fail independently."""

    @abstractmethod
    def font(self, name: str) -> Any:
        """Resolve a font by name or raise ``ResourceNotFound``."""

    @abstractmethod
    def color(self, name: str) -> Any:
        """Resolve a color swatch by name or raise ``ResourceNotFound``."""

    @abstractmethod
    def colors(self) -> Iterable[Any]:
        """Iterate every color swatch in the document."""

    @abstractmethod
    def paragraph_style(self, name: str) -> Any:
        """Resolve a paragraph style by name or raise ``ResourceNotFound``."""

    @abstractmethod
    def character_style(self, name: str) -> Any:
        """Resolve a character style by name or raise ``ResourceNotFound``."""


class DocumentHost(ABC):
    """The shared mutable document the pipeline writes into."""

    @property
    @abstractmethod
    def resources(self) -> ResourceTable:
        """Named-resource lookup for the document."""

    @abstractmethod
    def enable_interaction_suppression(self) -> None:
        """Stop the host from interleaving user edits."""

    @abstractmethod
    def disable_interaction_suppression(self) -> None:
        """Restore normal interaction."""

    @contextmanager
    def suppress_interaction(self) -> Iterator[None]:
        """Hold interaction suppression for the duration of the block."""

        self.enable_interaction_suppression()
        try:
            yield
        finally:
            self.disable_interaction_suppression()


@dataclass(frozen=True)
class SpanTarget:
    """A span selected for translation together with its owning container."""

    span: TextSpan
    owner: Any

    def __post_init__(self) -> None:
        if self.owner is None:
            raise ValueError("A text span must have an owning container.")

    @property
    def location(self) -> str:
        return self.span.location
