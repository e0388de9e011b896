"""Capture of paragraph and character styles before translation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import ErrorCategory
from .host import Character, TextSpan
from .policy import ErrorPolicy
from .structures import (
    COLOR_KEYS,
    STYLE_KEYS,
    ColorValue,
    FormattingSnapshot,
    StyleAttributeSet,
)

logger = logging.getLogger(__name__)


def _read_attribute(character: Character, key: str) -> Any:
    """Read one key and normalise it into its snapshot form."""

    value = character.read(key)
    if value is None:
        return None
    if key in COLOR_KEYS:
        name = getattr(value, "name", None)
        if name is None and isinstance(value, str):
            return ColorValue(name=value, ref=None)
        return ColorValue(name=name, ref=value)
    return value


def capture_style(
    character: Character,
    *,
    policy: Optional[ErrorPolicy] = None,
) -> StyleAttributeSet:
    """Read every style key of ``character`` independently.

    A key whose read raises is left absent; the remaining keys are still
    captured.
    """

    values: Dict[str, Any] = {}
    for key in STYLE_KEYS:
        try:
            values[key] = _read_attribute(character, key)
        except Exception as exc:
            if policy is not None:
                policy.note(
                    ErrorCategory.CAPTURE,
                    f"Could not read {key}: {exc}",
                )
    return StyleAttributeSet(values)


def capture_snapshot(
    span: TextSpan,
    *,
    fine_grained: bool = False,
    policy: Optional[ErrorPolicy] = None,
) -> FormattingSnapshot:
    """Capture one style set per paragraph, and per character when asked.

    The paragraph set comes from the paragraph's first character; a
    paragraph without characters yields an empty set.
    """

    paragraph_styles: List[StyleAttributeSet] = []
    paragraph_texts: List[str] = []
    character_styles: List[tuple] = []

    for index, paragraph in enumerate(span.paragraphs()):
        try:
            text = paragraph.text or ""
        except Exception as exc:
            if policy is not None:
                policy.note(
                    ErrorCategory.CAPTURE,
                    f"Could not read paragraph {index + 1} text: {exc}",
                )
            text = ""
        try:
            characters = list(paragraph.characters())
        except Exception as exc:
            if policy is not None:
                policy.note(
                    ErrorCategory.CAPTURE,
                    f"Could not enumerate paragraph {index + 1} characters: {exc}",
                )
            characters = []

        paragraph_texts.append(text)
        if characters:
            paragraph_styles.append(capture_style(characters[0], policy=policy))
        else:
            paragraph_styles.append(StyleAttributeSet.empty())

        if fine_grained:
            character_styles.append(
                tuple(capture_style(character, policy=policy) for character in characters)
            )

    logger.debug(
        "Captured %d paragraph styles from %s%s.",
        len(paragraph_styles),
        span.location,
        " with character styles" if fine_grained else "",
    )

    return FormattingSnapshot(
        paragraph_styles=tuple(paragraph_styles),
        paragraph_texts=tuple(paragraph_texts),
        character_styles=tuple(character_styles) if fine_grained else None,
    )
