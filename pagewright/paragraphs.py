"""Paragraph-by-paragraph translation with one retry per soft failure."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import ErrorCategory, NothingTranslatedError
from .policy import ErrorPolicy
from .providers import TranslationClient
from .structures import ParagraphTranslation, TranslationOutcome

logger = logging.getLogger(__name__)

DEFAULT_INTER_CALL_DELAY = 0.2
DEFAULT_RETRY_DELAY = 0.3


def clean_paragraph_text(text: str) -> str:
    """Drop embedded paragraph and line terminators from a paragraph."""

    return (text or "").replace("\r", "").replace("\n", "")


class ParagraphTranslator:
    """Drives a ``TranslationClient`` over the paragraphs of one span.

    Each non-blank paragraph is sent once. An empty reply, a reply equal
    to the source, or a client exception is retried once after a short
    wait; if the retry fails as well the original text is kept.
    """

    def __init__(
        self,
        client: TranslationClient,
        *,
        inter_call_delay: float = DEFAULT_INTER_CALL_DELAY,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        policy: Optional[ErrorPolicy] = None,
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self.client = client
        self.inter_call_delay = max(0.0, inter_call_delay)
        self.retry_delay = max(0.0, retry_delay)
        self.sleep = sleep
        self.policy = policy or ErrorPolicy()
        self.progress = progress

    def translate_paragraphs(
        self,
        texts: Sequence[str],
        *,
        location: str = "span",
    ) -> List[ParagraphTranslation]:
        """Translate ``texts`` in order.

        Raises ``NothingTranslatedError`` when no paragraph was translated.
        """

        results: List[ParagraphTranslation] = []
        calls_made = False
        total = len(texts)

        for index, raw in enumerate(texts):
            if self.progress is not None:
                self.progress(index + 1, total)
            source = clean_paragraph_text(raw)
            if not source.strip():
                results.append(
                    ParagraphTranslation(
                        index=index,
                        source=source,
                        text=source,
                        outcome=TranslationOutcome.SKIPPED,
                    )
                )
                continue

            if calls_made and self.inter_call_delay:
                self.sleep(self.inter_call_delay)
            calls_made = True
            results.append(self._translate_one(index, source, location=location))

        if not any(result.translated for result in results):
            raise NothingTranslatedError(
                f"Nothing was translated in {location}. Check the provider "
                "configuration and network connection.",
                results,
            )
        return results

    def _translate_one(
        self,
        index: int,
        source: str,
        *,
        location: str,
    ) -> ParagraphTranslation:
        reply, error = self._call(source)
        attempts = 1
        outcome = self._classify(source, reply)

        if outcome is not TranslationOutcome.TRANSLATED:
            logger.info(
                "Paragraph %d of %s came back %s; retrying once.",
                index + 1,
                location,
                outcome.value,
            )
            if self.retry_delay:
                self.sleep(self.retry_delay)
            reply, error = self._call(source)
            attempts += 1
            outcome = self._classify(source, reply)

        if outcome is TranslationOutcome.TRANSLATED:
            return ParagraphTranslation(
                index=index,
                source=source,
                text=reply,
                outcome=outcome,
                attempts=attempts,
            )

        self.policy.record(
            ErrorCategory.TRANSLATION,
            f"Paragraph {index + 1} of {location} could not be translated "
            f"({outcome.value}); keeping the original text.",
            details=error,
        )
        return ParagraphTranslation(
            index=index,
            source=source,
            text=source,
            outcome=outcome,
            attempts=attempts,
            error=error,
        )

    def _call(self, source: str) -> Tuple[str, Optional[str]]:
        """Invoke the client; an exception counts as an empty reply."""

        try:
            reply = self.client.translate(source)
        except Exception as exc:
            logger.debug("Translation client raised: %s", exc)
            return "", str(exc)
        return (reply or ""), None

    @staticmethod
    def _classify(source: str, reply: str) -> TranslationOutcome:
        trimmed = reply.strip()
        if not trimmed:
            return TranslationOutcome.EMPTY
        if trimmed == source.strip():
            return TranslationOutcome.UNCHANGED
        return TranslationOutcome.TRANSLATED
