"""Resolution of a user selection into translatable spans."""

from __future__ import annotations

import fnmatch
import logging
from typing import Iterable, List, Optional, Sequence

from .errors import NoTextSelectedError
from .host import SpanTarget, TextSpan

logger = logging.getLogger(__name__)


def _has_text(span: TextSpan) -> bool:
    try:
        contents = span.contents
    except Exception as exc:
        logger.debug("Could not read contents of %s: %s", span.location, exc)
        return False
    return bool(contents and contents.strip())


def _target(span: TextSpan) -> SpanTarget:
    return SpanTarget(span=span, owner=getattr(span, "owner", None) or span.location)


def resolve_selection(
    containers: Iterable[TextSpan],
    selectors: Optional[Sequence[str]] = None,
) -> List[SpanTarget]:
    """Select the spans to translate, in document order.

    Without selectors every container with text is chosen. Selectors are
    glob patterns matched case-insensitively against span locations; if
    none match, the first container with text is used instead.
    """

    candidates = [span for span in containers if _has_text(span)]
    if not candidates:
        raise NoTextSelectedError(
            "No text found in the selection. Select a text frame or some text."
        )

    patterns = [pattern.lower() for pattern in (selectors or []) if pattern.strip()]
    if not patterns:
        return [_target(span) for span in candidates]

    chosen = [
        span
        for span in candidates
        if any(fnmatch.fnmatchcase(span.location.lower(), pattern) for pattern in patterns)
    ]
    if chosen:
        return [_target(span) for span in chosen]

    logger.warning(
        "No text container matched %s; using %s instead.",
        ", ".join(selectors or []),
        candidates[0].location,
    )
    return [_target(candidates[0])]
