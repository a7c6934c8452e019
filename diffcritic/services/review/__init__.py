"""Review service package."""

from diffcritic.services.review.diff_parser import DiffLine, DiffParser, FileDiff, Hunk, LineType
from diffcritic.services.review.filters import filter_reviewable, is_excluded, parse_patterns
from diffcritic.services.review.mapper import FeedbackMapper, coerce_line_number
from diffcritic.services.review.pipeline import PipelineResult, ReviewPipeline
from diffcritic.services.review.requester import FeedbackRequester, FeedbackResult, ReviewFinding

__all__ = [
    "DiffParser",
    "DiffLine",
    "FileDiff",
    "Hunk",
    "LineType",
    "filter_reviewable",
    "is_excluded",
    "parse_patterns",
    "FeedbackMapper",
    "coerce_line_number",
    "FeedbackRequester",
    "FeedbackResult",
    "ReviewFinding",
    "ReviewPipeline",
    "PipelineResult",
]
