"""Reapplication of captured styles onto reconstructed text."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Tuple

from .errors import ErrorCategory, ResourceNotFound
from .host import Character, Paragraph, ResourceTable, TextSpan
from .policy import ErrorPolicy
from .structures import (
    DECORATION_KEYS,
    NUMERIC_KEYS,
    ColorValue,
    FormattingSnapshot,
    StyleAttributeSet,
)

logger = logging.getLogger(__name__)

# Later writes can be overridden by earlier ones in the host, so the order
# is fixed: font, size, numeric metrics, decorations, named styles, colors.
APPLY_ORDER: Tuple[str, ...] = (
    "font",
    "pointSize",
    *NUMERIC_KEYS,
    *DECORATION_KEYS,
    "paragraphStyleName",
    "characterStyleName",
    "fillColor",
    "strokeColor",
)

CORRECTIVE_KEYS: Tuple[str, ...] = ("font", "pointSize", "fillColor")


class StyleReapplier:
    """Writes a ``FormattingSnapshot`` back onto a span's new characters.

    Every attribute write is guarded on its own; a failed write is counted
    and skipped. After the full pass a corrective pass re-applies font,
    size and fill color because hosts re-derive those when text changes.
    """

    def __init__(
        self,
        resources: ResourceTable,
        *,
        policy: Optional[ErrorPolicy] = None,
        corrective_pass: bool = True,
    ) -> None:
        self.resources = resources
        self.policy = policy or ErrorPolicy()
        self.corrective_pass = corrective_pass
        self.failures = 0

    def reapply(
        self,
        span: TextSpan,
        snapshot: FormattingSnapshot,
        paragraphs: Optional[Sequence[Paragraph]] = None,
    ) -> int:
        """Run both passes and return the number of failed writes."""

        self.failures = 0
        if paragraphs is None:
            paragraphs = list(span.paragraphs())
        self._apply_pass(snapshot, paragraphs, APPLY_ORDER)

        if self.corrective_pass:
            self._apply_pass(snapshot, list(span.paragraphs()), CORRECTIVE_KEYS)

        if self.failures:
            logger.info(
                "%d style writes could not be applied in %s.",
                self.failures,
                span.location,
            )
        return self.failures

    def _apply_pass(
        self,
        snapshot: FormattingSnapshot,
        paragraphs: Sequence[Paragraph],
        keys: Sequence[str],
    ) -> None:
        count_preserved = snapshot.paragraph_count == len(paragraphs)
        limit = min(snapshot.paragraph_count, len(paragraphs))
        for index in range(limit):
            style = snapshot.paragraph_styles[index]
            try:
                characters = list(paragraphs[index].characters())
            except Exception as exc:
                self._fail(f"Could not enumerate paragraph {index + 1}: {exc}")
                continue
            per_character = self._character_styles(
                snapshot, index, len(characters), count_preserved
            )
            for position, character in enumerate(characters):
                chosen = per_character[position] if per_character else style
                self.apply_style(character, chosen, keys)

    @staticmethod
    def _character_styles(
        snapshot: FormattingSnapshot,
        index: int,
        length: int,
        count_preserved: bool,
    ) -> Optional[Tuple[StyleAttributeSet, ...]]:
        """Per-character sets when the paragraph kept its exact shape."""

        if snapshot.character_styles is None or not count_preserved:
            return None
        captured = snapshot.character_styles[index]
        if len(captured) != length or not captured:
            return None
        return captured

    def apply_style(
        self,
        character: Character,
        style: StyleAttributeSet,
        keys: Sequence[str] = APPLY_ORDER,
    ) -> None:
        for key in keys:
            if style.is_absent(key):
                continue
            try:
                self._write(character, key, style[key])
            except Exception as exc:
                self._fail(f"Could not apply {key}: {exc}")

    def _write(self, character: Character, key: str, value: Any) -> None:
        if key == "font":
            character.write(key, self.resources.font(value))
        elif key == "paragraphStyleName":
            character.write(key, self.resources.paragraph_style(value))
        elif key == "characterStyleName":
            character.write(key, self.resources.character_style(value))
        elif isinstance(value, ColorValue):
            self._write_color(character, key, value)
        else:
            character.write(key, value)

    def _write_color(self, character: Character, key: str, value: ColorValue) -> None:
        """Direct handle first, then the color table by name, then a scan."""

        if value.ref is not None:
            try:
                character.write(key, value.ref)
                return
            except Exception as exc:
                logger.debug("Direct %s reference rejected: %s", key, exc)

        if not value.name:
            raise ResourceNotFound(f"No usable {key} for this character.")

        try:
            character.write(key, self.resources.color(value.name))
            return
        except Exception as exc:
            logger.debug("Swatch lookup for '%s' failed: %s", value.name, exc)

        for swatch in self.resources.colors():
            if getattr(swatch, "name", None) == value.name:
                character.write(key, swatch)
                return

        raise ResourceNotFound(f"Color '{value.name}' is not defined in the document.")

    def _fail(self, message: str) -> None:
        self.failures += 1
        self.policy.note(ErrorCategory.REAPPLY, message)
