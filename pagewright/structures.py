"""Core data structures for the pagewright translator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple


STYLE_KEYS: Tuple[str, ...] = (
    "fillColor",
    "strokeColor",
    "font",
    "pointSize",
    "leading",
    "tracking",
    "horizontalScale",
    "verticalScale",
    "baselineShift",
    "skew",
    "underline",
    "strikethrough",
    "allCaps",
    "smallCaps",
    "superscript",
    "subscript",
    "paragraphStyleName",
    "characterStyleName",
)

COLOR_KEYS: Tuple[str, ...] = ("fillColor", "strokeColor")
NAMED_KEYS: Tuple[str, ...] = ("font", "paragraphStyleName", "characterStyleName")
NUMERIC_KEYS: Tuple[str, ...] = (
    "leading",
    "tracking",
    "horizontalScale",
    "verticalScale",
    "baselineShift",
    "skew",
)
DECORATION_KEYS: Tuple[str, ...] = (
    "underline",
    "strikethrough",
    "allCaps",
    "smallCaps",
    "superscript",
    "subscript",
)


class Direction(Enum):
    """Paragraph reading direction."""

    LEFT_TO_RIGHT = "ltr"
    RIGHT_TO_LEFT = "rtl"


class Justification(Enum):
    """Paragraph alignment used as a direction fallback."""

    LEFT_ALIGN = "left"
    RIGHT_ALIGN = "right"


@dataclass(frozen=True)
class Swatch:
    """A named color resource held by a document."""

    name: str
    value: Any = None


@dataclass(frozen=True)
class ColorValue:
    """A captured color: a resolvable name plus the direct handle, if any."""

    name: Optional[str]
    ref: Any = None


class StyleAttributeSet(Mapping[str, Any]):
    """Immutable mapping over ``STYLE_KEYS`` that tolerates partial population.

    A key that was never captured is *absent*. Absence means "skip this
    attribute during reapplication" and is distinct from falsy values.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        cleaned: Dict[str, Any] = {}
        for key, value in (values or {}).items():
            if key not in STYLE_KEYS:
                raise KeyError(f"Unknown style key '{key}'.")
            if value is None:
                continue
            cleaned[key] = value
        self._values = cleaned

    @classmethod
    def empty(cls) -> "StyleAttributeSet":
        return cls()

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return (key for key in STYLE_KEYS if key in self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StyleAttributeSet):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        inner = ", ".join(f"{key}={self._values[key]!r}" for key in self)
        return f"StyleAttributeSet({inner})"

    def is_absent(self, key: str) -> bool:
        return key not in self._values


@dataclass(frozen=True)
class FormattingSnapshot:
    """Pre-translation style state of one span."""

    paragraph_styles: Tuple[StyleAttributeSet, ...]
    paragraph_texts: Tuple[str, ...]
    character_styles: Optional[Tuple[Tuple[StyleAttributeSet, ...], ...]] = None

    @property
    def paragraph_count(self) -> int:
        return len(self.paragraph_styles)

    @property
    def fine_grained(self) -> bool:
        return self.character_styles is not None


class TranslationOutcome(Enum):
    """How a single paragraph's translation ended."""

    TRANSLATED = "translated"
    UNCHANGED = "unchanged"
    EMPTY = "empty"
    SKIPPED = "skipped"


@dataclass
class ParagraphTranslation:
    """Result of translating one paragraph."""

    index: int
    source: str
    text: str
    outcome: TranslationOutcome
    attempts: int = 0
    error: Optional[str] = None

    @property
    def translated(self) -> bool:
        return self.outcome is TranslationOutcome.TRANSLATED


@dataclass
class SpanReport:
    """Summary of one span's translate-and-reapply run."""

    location: str
    paragraphs: List[ParagraphTranslation] = field(default_factory=list)
    original_count: int = 0
    new_count: int = 0
    reapply_failures: int = 0
    direction_failures: int = 0

    @property
    def structure_mismatch(self) -> bool:
        return self.original_count != self.new_count

    def outcome_count(self, outcome: TranslationOutcome) -> int:
        return sum(1 for item in self.paragraphs if item.outcome is outcome)


def texts_of(results: Sequence[ParagraphTranslation]) -> List[str]:
    """Return the write-back strings of the results in paragraph order."""

    return [item.text for item in sorted(results, key=lambda item: item.index)]
