"""Write translated paragraphs back into a span."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import ErrorCategory
from .host import Paragraph, TextSpan
from .policy import ErrorPolicy

logger = logging.getLogger(__name__)


@dataclass
class Reconstruction:
    """The span's structure after its contents were replaced."""

    paragraphs: List[Paragraph]
    original_count: int

    @property
    def new_count(self) -> int:
        return len(self.paragraphs)

    @property
    def overlap(self) -> int:
        """Number of leading paragraphs that can take a captured style."""

        return min(self.original_count, self.new_count)

    @property
    def mismatch(self) -> bool:
        return self.original_count != self.new_count


class TextReconstructor:
    """Replaces a span's text with translated paragraphs in one write."""

    def __init__(self, policy: Optional[ErrorPolicy] = None) -> None:
        self.policy = policy or ErrorPolicy()

    def join(self, span: TextSpan, texts: Sequence[str]) -> str:
        return span.paragraph_break.join(texts)

    def reconstruct(self, span: TextSpan, texts: Sequence[str]) -> Reconstruction:
        joined = self.join(span, texts)
        span.replace_contents(joined)

        paragraphs = list(span.paragraphs())
        result = Reconstruction(paragraphs=paragraphs, original_count=len(texts))
        if result.mismatch:
            self.policy.record(
                ErrorCategory.STRUCTURE,
                f"{span.location} has {result.new_count} paragraphs after "
                f"translation instead of {result.original_count}; styles are "
                f"restored on the first {result.overlap} only.",
            )
        else:
            logger.debug(
                "Reconstructed %d paragraphs in %s.", result.new_count, span.location
            )
        return result
