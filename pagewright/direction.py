"""Reading-direction normalisation after translation."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Sequence, Tuple

from .errors import ErrorCategory
from .host import Paragraph
from .policy import ErrorPolicy
from .structures import Direction, Justification

logger = logging.getLogger(__name__)

RTL_LANGUAGES = frozenset(
    {
        "ar", "ara", "arabic",
        "he", "heb", "hebrew", "iw",
        "fa", "fas", "per", "persian", "farsi",
        "ur", "urd", "urdu",
        "ps", "pus", "pashto",
        "sd", "snd", "sindhi",
        "yi", "yid", "yiddish",
        "dv", "div", "dhivehi", "divehi",
        "ug", "uig", "uyghur",
        "ckb", "sorani", "kurdish sorani", "central kurdish",
    }
)


def is_rtl_language(language: Optional[str]) -> bool:
    """Return True when ``language`` names a right-to-left language."""

    if not language:
        return False
    normalized = re.sub(r"[_\s]+", " ", language.strip().lower())
    if normalized in RTL_LANGUAGES:
        return True
    primary = re.split(r"[-\s(]", normalized, maxsplit=1)[0]
    return primary in RTL_LANGUAGES


class DirectionNormalizer:
    """Sets paragraph direction, trying alternate mechanisms in turn."""

    def __init__(
        self,
        direction: Direction = Direction.LEFT_TO_RIGHT,
        *,
        enabled: bool = True,
        policy: Optional[ErrorPolicy] = None,
    ) -> None:
        self.direction = direction
        self.enabled = enabled
        self.policy = policy or ErrorPolicy()

    @classmethod
    def for_language(
        cls,
        target_language: Optional[str],
        *,
        policy: Optional[ErrorPolicy] = None,
    ) -> "DirectionNormalizer":
        """Force left-to-right unless the target itself reads right-to-left."""

        if is_rtl_language(target_language):
            logger.info(
                "Target language %s reads right to left; paragraph direction is left as is.",
                target_language,
            )
            return cls(Direction.RIGHT_TO_LEFT, enabled=False, policy=policy)
        return cls(Direction.LEFT_TO_RIGHT, policy=policy)

    def mechanisms(self) -> Tuple[Tuple[str, Any], ...]:
        alignment = (
            Justification.LEFT_ALIGN
            if self.direction is Direction.LEFT_TO_RIGHT
            else Justification.RIGHT_ALIGN
        )
        return (
            ("paragraphDirection", self.direction),
            ("direction", self.direction),
            ("justification", alignment),
        )

    def normalize(self, paragraphs: Sequence[Paragraph]) -> int:
        """Apply the direction to every paragraph; return the failure count."""

        if not self.enabled:
            return 0
        failures = 0
        for index, paragraph in enumerate(paragraphs):
            if not self._apply(paragraph):
                failures += 1
                self.policy.note(
                    ErrorCategory.DIRECTION,
                    f"Could not set direction of paragraph {index + 1}.",
                )
        return failures

    def _apply(self, paragraph: Paragraph) -> bool:
        for name, value in self.mechanisms():
            try:
                paragraph.set_property(name, value)
                return True
            except Exception as exc:
                logger.debug("Direction mechanism %s failed: %s", name, exc)
        return False
