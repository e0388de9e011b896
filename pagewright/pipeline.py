"""Formatting-preserving translate-and-reconstruct pipeline for one span."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .direction import DirectionNormalizer
from .host import DocumentHost, SpanTarget
from .paragraphs import DEFAULT_INTER_CALL_DELAY, DEFAULT_RETRY_DELAY, ParagraphTranslator
from .policy import ErrorPolicy
from .providers import TranslationClient
from .reapply import StyleReapplier
from .reconstruct import TextReconstructor
from .snapshot import capture_snapshot
from .structures import SpanReport, texts_of

__all__ = ["SpanPipeline", "SpanReport"]

logger = logging.getLogger(__name__)


class SpanPipeline:
    """Translates a span while keeping its paragraph and character styles.

    The document is only written after at least one paragraph translated;
    the write phase runs with host interaction suppressed. Writes already
    made are not rolled back if a later step raises.
    """

    def __init__(
        self,
        host: DocumentHost,
        client: TranslationClient,
        *,
        fine_grained: bool = False,
        inter_call_delay: float = DEFAULT_INTER_CALL_DELAY,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        policy: Optional[ErrorPolicy] = None,
        normalizer: Optional[DirectionNormalizer] = None,
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self.host = host
        self.client = client
        self.fine_grained = fine_grained
        self.policy = policy or ErrorPolicy()
        self.translator = ParagraphTranslator(
            client,
            inter_call_delay=inter_call_delay,
            retry_delay=retry_delay,
            sleep=sleep,
            policy=self.policy,
            progress=progress,
        )
        self.reconstructor = TextReconstructor(policy=self.policy)
        self.normalizer = normalizer or DirectionNormalizer.for_language(
            client.target_language, policy=self.policy
        )

    def run(self, target: SpanTarget) -> SpanReport:
        span = target.span
        snapshot = capture_snapshot(
            span, fine_grained=self.fine_grained, policy=self.policy
        )
        logger.info(
            "Translating %d paragraphs in %s.", snapshot.paragraph_count, span.location
        )

        results = self.translator.translate_paragraphs(
            snapshot.paragraph_texts, location=span.location
        )

        reapplier = StyleReapplier(self.host.resources, policy=self.policy)
        with self.host.suppress_interaction():
            reconstruction = self.reconstructor.reconstruct(span, texts_of(results))
            failures = reapplier.reapply(span, snapshot, reconstruction.paragraphs)
            direction_failures = self.normalizer.normalize(list(span.paragraphs()))

        return SpanReport(
            location=span.location,
            paragraphs=results,
            original_count=reconstruction.original_count,
            new_count=reconstruction.new_count,
            reapply_failures=failures,
            direction_failures=direction_failures,
        )
