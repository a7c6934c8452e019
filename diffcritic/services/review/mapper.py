"""Resolve model findings to file/line review comments."""

import math
from dataclasses import dataclass, field
from typing import Any

import structlog

from diffcritic.core.metrics import record_dropped_finding
from diffcritic.services.github.models import ReviewComment
from diffcritic.services.review.diff_parser import Hunk
from diffcritic.services.review.requester import ReviewFinding

logger = structlog.get_logger()


def coerce_line_number(value: Any) -> int | None:
    """
    Turn a model-supplied line reference into a line number.

    Integers pass through, integral floats and numeric strings are converted.
    Anything else (missing, null, booleans, free text, fractions) gives None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return coerce_line_number(number)
    return None


@dataclass
class MappingOutcome:
    comments: list[ReviewComment] = field(default_factory=list)
    dropped: int = 0


class FeedbackMapper:
    """Converts findings for one hunk into review comments."""

    def __init__(self, validate_lines: bool = True) -> None:
        self.validate_lines = validate_lines

    def map(
        self,
        path: str,
        findings: list[ReviewFinding],
        hunk: Hunk | None = None,
    ) -> MappingOutcome:
        """
        Build one comment per finding, in order.

        Findings whose line cannot be read as a number are dropped. When a
        hunk is given and validation is on, findings pointing at a line the
        hunk does not show in the new file are dropped as well.
        """
        allowed = hunk.destination_line_numbers() if hunk and self.validate_lines else None
        outcome = MappingOutcome()

        for finding in findings:
            line = coerce_line_number(finding.lineNumber)
            if line is None:
                logger.warning(
                    "Dropping finding with invalid line number",
                    path=path,
                    line_number=finding.lineNumber,
                )
                record_dropped_finding("invalid_line")
                outcome.dropped += 1
                continue

            if allowed is not None and line not in allowed:
                logger.warning(
                    "Dropping finding outside hunk",
                    path=path,
                    line=line,
                    hunk=hunk.header if hunk else None,
                )
                record_dropped_finding("outside_hunk")
                outcome.dropped += 1
                continue

            outcome.comments.append(ReviewComment(path=path, line=line, body=finding.reviewComment))

        return outcome
