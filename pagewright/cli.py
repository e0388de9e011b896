"""Command line interface for the pagewright translator."""

from __future__ import annotations

import argparse
import logging
import pathlib
import re
import sys
from typing import Iterable, Optional, Sequence

from .configuration import PagewrightConfig, get_settings
from .errors import (
    NothingTranslatedError,
    NoTextSelectedError,
    OverwriteRefusedError,
    PagewrightError,
    TranslationProviderConfigurationError,
    UnsupportedFileTypeError,
)
from .translator import TranslationRunner, TranslationSummary, validate_paths

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagewright",
        description=(
            "Translate Word (.docx) and PowerPoint (.pptx) documents paragraph by "
            "paragraph while keeping character and paragraph formatting."
        ),
    )
    parser.add_argument(
        "input_file",
        help="Path to the .docx or .pptx file to translate.",
    )
    parser.add_argument(
        "-t",
        "--target-language",
        help="Destination language (name or ISO-639 code). "
        "Defaults to PAGEWRIGHT_TARGET_LANGUAGE.",
    )
    parser.add_argument(
        "-s",
        "--source-language",
        help="Optional source language hint (name or ISO-639 code).",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file path. Defaults to appending the target language code.",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider identifier (openai, legacy-openai).",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="Provider-specific model or engine identifier.",
    )
    parser.add_argument(
        "--select",
        action="append",
        metavar="GLOB",
        help="Only translate text containers whose location matches GLOB "
        "(for example 'Slide 2*'). May be repeated.",
    )
    parser.add_argument(
        "--fine-grained",
        action="store_true",
        default=None,
        help="Capture styles per character instead of per paragraph.",
    )
    parser.add_argument(
        "--delay",
        type=float,
        metavar="SECONDS",
        help="Pause between paragraph translation requests (default: 0.2).",
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        metavar="SECONDS",
        help="Pause before retrying a failed paragraph (default: 0.3).",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Allow overwriting the output file if it already exists.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    return parser


def configure_logging(*, verbose: bool, provider_debug: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if provider_debug:
        logging.getLogger("pagewright.providers").setLevel(logging.DEBUG)


def sanitise_language_for_filename(language: str) -> str:
    """Generate a filesystem-friendly suffix from a language descriptor."""

    collapsed = re.sub(r"\s+", "-", language.strip())
    ascii_only = collapsed.encode("ascii", "ignore").decode("ascii")
    cleaned = re.sub(r"[^A-Za-z0-9\-]+", "", ascii_only)
    return cleaned or "translated"


def derive_output_path(input_path: pathlib.Path, language: str) -> pathlib.Path:
    suffix = input_path.suffix
    stem = input_path.stem
    addition = sanitise_language_for_filename(language)
    candidate = f"{stem}_{addition}{suffix}"
    return input_path.with_name(candidate)


def execute_translation(
    *,
    input_file: str,
    output_file: str | None,
    target_language: str,
    source_language: str | None,
    provider: str | None,
    model: str | None,
    selectors: Sequence[str] | None,
    fine_grained: bool,
    inter_call_delay: float,
    retry_delay: float,
    force_overwrite: bool,
    verbose: bool,
    provider_debug: bool,
    settings: PagewrightConfig | None,
) -> tuple[int, TranslationSummary | None, str | None]:
    """Execute a translation run and return the exit code, summary, and message."""

    input_path = pathlib.Path(input_file).expanduser().resolve()
    output_path = (
        pathlib.Path(output_file).expanduser().resolve()
        if output_file
        else derive_output_path(input_path, target_language)
    )

    try:
        validate_paths(input_path, output_path, force_overwrite=force_overwrite)
    except FileNotFoundError as exc:
        return 1, None, str(exc)
    except OverwriteRefusedError as exc:
        return 1, None, str(exc)
    except PagewrightError as exc:
        return 1, None, str(exc)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    runner = TranslationRunner(
        input_path=input_path,
        output_path=output_path,
        target_language=target_language,
        source_language=source_language,
        provider_name=provider,
        model=model,
        selectors=selectors,
        fine_grained=fine_grained,
        inter_call_delay=inter_call_delay,
        retry_delay=retry_delay,
        verbose=verbose,
        provider_debug=provider_debug,
        settings=settings,
    )

    try:
        summary = runner.run()
    except UnsupportedFileTypeError as exc:
        return 1, None, str(exc)
    except TranslationProviderConfigurationError as exc:
        return 1, None, str(exc)
    except NoTextSelectedError as exc:
        return 1, None, str(exc)
    except NothingTranslatedError as exc:
        return 1, None, str(exc)
    except PagewrightError as exc:
        return 1, None, str(exc)
    except KeyboardInterrupt:
        return 2, None, "Translation interrupted by user."
    except Exception as exc:  # pragma: no cover - last-resort report
        logger.debug("Unexpected failure", exc_info=True)
        error_message = (
            f"{exc}\n"
            "An unexpected error occurred. Please rerun with --verbose for more details."
        )
        return 1, None, error_message

    return 0, summary, None


def print_summary(summary: TranslationSummary) -> None:
    """Output a friendly report once processing completes."""

    print("\nTranslation complete.")
    print(f"  Input file:      {summary.input_path}")
    print(f"  Output file:     {summary.output_path}")
    print(f"  Document type:   {summary.document_type}")
    print(
        "  Text containers: "
        f"{summary.translated_spans} translated / {summary.total_spans} selected"
    )
    print(
        "  Paragraphs:      "
        f"{summary.translated_paragraphs} translated / {summary.total_paragraphs} total "
        f"({summary.failed_paragraphs} kept original, "
        f"{summary.skipped_paragraphs} blank)"
    )
    if summary.structure_mismatches or summary.reapply_failures:
        print(
            f"  Formatting:      {summary.structure_mismatches} paragraph-count "
            f"mismatches, {summary.reapply_failures} style writes failed"
        )
    print(
        f"  Provider:        {summary.provider_name}"
        + (f" ({summary.model})" if summary.model else "")
    )
    if summary.source_language:
        print(f"  Source language: {summary.source_language}")
    print(f"  Target language: {summary.target_language}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")
    if summary.error_messages:
        print("  Notes:")
        for message in summary.error_messages:
            print(f"    - {message}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = get_settings()
    except TranslationProviderConfigurationError as exc:
        print(exc)
        return 1

    provider_debug = bool(args.debug_provider or settings.PAGEWRIGHT_PROVIDER_DEBUG)
    configure_logging(verbose=args.verbose, provider_debug=provider_debug)

    target_language = args.target_language or settings.PAGEWRIGHT_TARGET_LANGUAGE
    if not target_language:
        parser.error("the following arguments are required: -t/--target-language")

    fine_grained = (
        args.fine_grained
        if args.fine_grained is not None
        else settings.PAGEWRIGHT_FINE_GRAINED
    )

    exit_code, summary, message = execute_translation(
        input_file=args.input_file,
        output_file=args.output,
        target_language=target_language,
        source_language=args.source_language or settings.PAGEWRIGHT_SOURCE_LANGUAGE,
        provider=args.provider,
        model=args.model,
        selectors=args.select,
        fine_grained=fine_grained,
        inter_call_delay=(
            args.delay if args.delay is not None else settings.PAGEWRIGHT_INTER_CALL_DELAY
        ),
        retry_delay=(
            args.retry_delay
            if args.retry_delay is not None
            else settings.PAGEWRIGHT_RETRY_DELAY
        ),
        force_overwrite=args.force,
        verbose=args.verbose,
        provider_debug=provider_debug,
        settings=settings,
    )

    if message:
        print(message)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
