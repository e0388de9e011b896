"""High-level orchestration for document translation."""

from __future__ import annotations

import logging
import pathlib
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, TYPE_CHECKING

from .documents import detect_handler
from .errors import (
    ErrorCategory,
    NothingTranslatedError,
    OverwriteRefusedError,
    PagewrightError,
)
from .paragraphs import DEFAULT_INTER_CALL_DELAY, DEFAULT_RETRY_DELAY
from .pipeline import SpanPipeline
from .policy import ErrorPolicy
from .providers import build_client
from .selection import resolve_selection
from .structures import SpanReport, TranslationOutcome

if TYPE_CHECKING:  # pragma: no cover
    from .configuration import PagewrightConfig

logger = logging.getLogger(__name__)


@dataclass
class TranslationSummary:
    """Report returned after processing a document."""

    input_path: pathlib.Path
    output_path: pathlib.Path
    document_type: str
    total_spans: int
    translated_spans: int
    total_paragraphs: int
    translated_paragraphs: int
    failed_paragraphs: int
    skipped_paragraphs: int
    structure_mismatches: int
    reapply_failures: int
    provider_name: str
    model: str | None
    target_language: str
    source_language: str | None
    elapsed_seconds: float
    error_messages: List[str] = field(default_factory=list)


class TranslationRunner:
    """Coordinates selection, per-span translation, and saving."""

    def __init__(
        self,
        *,
        input_path: pathlib.Path,
        output_path: pathlib.Path,
        target_language: str,
        source_language: str | None,
        provider_name: str | None,
        model: str | None,
        selectors: Sequence[str] | None = None,
        fine_grained: bool = False,
        inter_call_delay: float = DEFAULT_INTER_CALL_DELAY,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        verbose: bool = False,
        provider_debug: bool = False,
        settings: "PagewrightConfig | None" = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.input_path = input_path
        self.output_path = output_path
        self.target_language = target_language
        self.source_language = source_language
        self.provider_name = provider_name
        self.model = model
        self.selectors = list(selectors or [])
        self.fine_grained = fine_grained
        self.inter_call_delay = inter_call_delay
        self.retry_delay = retry_delay
        self.verbose = verbose
        self.provider_debug = provider_debug
        self.settings = settings
        self.sleep = sleep

        self.error_policy = ErrorPolicy()

    def run(self) -> TranslationSummary:
        start_time = time.time()

        document_type, handler = detect_handler(self.input_path)
        targets = resolve_selection(handler.text_containers(), self.selectors)
        logger.info(
            "Selected %d text containers in %s.", len(targets), self.input_path.name
        )

        client = build_client(
            self.provider_name,
            target_language=self.target_language,
            source_language=self.source_language,
            model=self.model,
            settings=self.settings,
            debug=self.provider_debug,
        )
        pipeline = SpanPipeline(
            handler,
            client,
            fine_grained=self.fine_grained,
            inter_call_delay=self.inter_call_delay,
            retry_delay=self.retry_delay,
            sleep=self.sleep,
            policy=self.error_policy,
            progress=self._progress if self.verbose else None,
        )

        reports: List[SpanReport] = []
        for target in targets:
            try:
                reports.append(pipeline.run(target))
            except NothingTranslatedError as exc:
                self.error_policy.record(
                    ErrorCategory.TRANSLATION,
                    f"Nothing translated at {target.location}. Leaving it unchanged.",
                    details=str(exc),
                )
                continue
            if self.verbose:
                print(f"Translated {target.location}.")

        if not reports:
            raise NothingTranslatedError(
                "No text could be translated. The document was not saved."
            )

        try:
            handler.save(self.output_path)
        except OSError as exc:
            raise PagewrightError(
                f"Could not write the translated document: {exc}"
            ) from exc

        return self._summarise(
            document_type=document_type,
            total_spans=len(targets),
            reports=reports,
            elapsed=time.time() - start_time,
            model=self.model or getattr(client, "_default_model", None),
        )

    def _progress(self, done: int, total: int) -> None:
        print(f"  paragraph {done} of {total}")

    def _summarise(
        self,
        *,
        document_type: str,
        total_spans: int,
        reports: Sequence[SpanReport],
        elapsed: float,
        model: Optional[str],
    ) -> TranslationSummary:
        def outcome(kind: TranslationOutcome) -> int:
            return sum(report.outcome_count(kind) for report in reports)

        return TranslationSummary(
            input_path=self.input_path,
            output_path=self.output_path,
            document_type=document_type,
            total_spans=total_spans,
            translated_spans=len(reports),
            total_paragraphs=sum(len(report.paragraphs) for report in reports),
            translated_paragraphs=outcome(TranslationOutcome.TRANSLATED),
            failed_paragraphs=outcome(TranslationOutcome.UNCHANGED)
            + outcome(TranslationOutcome.EMPTY),
            skipped_paragraphs=outcome(TranslationOutcome.SKIPPED),
            structure_mismatches=sum(1 for report in reports if report.structure_mismatch),
            reapply_failures=sum(report.reapply_failures for report in reports),
            provider_name=self.provider_name or "openai",
            model=model,
            target_language=self.target_language,
            source_language=self.source_language,
            elapsed_seconds=elapsed,
            error_messages=self.error_policy.messages,
        )


def validate_paths(
    input_path: pathlib.Path,
    output_path: pathlib.Path,
    force_overwrite: bool,
) -> None:
    """Validate input/output path combinations and overwrite policy."""

    if not input_path.exists():
        raise FileNotFoundError(
            "Input file not found. Please provide a readable .docx or .pptx file."
        )
    if not input_path.is_file():
        raise PagewrightError("Input path must be a file.")

    if input_path.resolve() == output_path.resolve():
        raise OverwriteRefusedError(
            "The output path matches the input document. Refusing to overwrite the source file."
        )

    if output_path.exists() and not force_overwrite:
        raise OverwriteRefusedError(
            "The output file already exists. Rename it or use the overwrite flag."
        )
