"""Bookkeeping for handled, non-fatal errors."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional

from .errors import ErrorCategory, ErrorRecord

logger = logging.getLogger(__name__)


class ErrorPolicy:
    """Collects isolated failures so they can be reported once processing ends.

    Nothing recorded here aborts processing: capture, reapplication and
    direction failures degrade to "skip this attribute" and translation
    failures degrade to "keep the original text".
    """

    def __init__(self) -> None:
        self.records: List[ErrorRecord] = []
        self.counts: Counter[ErrorCategory] = Counter()

    def record(
        self,
        category: ErrorCategory,
        message: str,
        details: Optional[str] = None,
    ) -> ErrorRecord:
        """Store a reportable condition and log it as a warning."""

        record = ErrorRecord(category=category, message=message, details=details)
        self.records.append(record)
        self.counts[category] += 1
        if details:
            logger.warning("%s (%s)", message, details)
        else:
            logger.warning("%s", message)
        return record

    def note(self, category: ErrorCategory, message: str) -> None:
        """Count a high-volume isolated failure without keeping a record."""

        self.counts[category] += 1
        logger.debug("%s", message)

    def count(self, category: ErrorCategory) -> int:
        return self.counts[category]

    @property
    def messages(self) -> List[str]:
        return [record.message for record in self.records]
