"""Main review pipeline orchestration."""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from diffcritic.core.metrics import record_review_submitted, record_unit_outcome
from diffcritic.prompts.review import build_review_prompt
from diffcritic.services.github.client import GitHubClient
from diffcritic.services.github.models import PullRequestInfo, Review, ReviewComment
from diffcritic.services.review.diff_parser import DiffParser, FileDiff, Hunk
from diffcritic.services.review.filters import filter_reviewable
from diffcritic.services.review.mapper import FeedbackMapper, MappingOutcome
from diffcritic.services.review.requester import FeedbackRequester

logger = structlog.get_logger()


@dataclass
class PipelineResult:
    """Result of a review pipeline execution."""

    pr_number: int
    files_reviewed: int
    units_reviewed: int
    units_failed: int
    findings_dropped: int
    comments: list[ReviewComment] = field(default_factory=list)
    review_posted: bool = False
    github_review_id: int | None = None

    @property
    def total_comments(self) -> int:
        return len(self.comments)


@dataclass
class UnitOutcome:
    ok: bool
    mapping: MappingOutcome


class ReviewPipeline:
    """Reviews every (file, hunk) unit of a diff and posts one review."""

    def __init__(
        self,
        github_client: GitHubClient,
        requester: FeedbackRequester,
        mapper: FeedbackMapper | None = None,
        diff_parser: DiffParser | None = None,
        max_concurrency: int = 1,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.github = github_client
        self.requester = requester
        self.mapper = mapper or FeedbackMapper()
        self.diff_parser = diff_parser or DiffParser()
        self.max_concurrency = max_concurrency

    async def execute(
        self,
        pr_info: PullRequestInfo,
        diff_text: str,
        exclude_patterns: Iterable[str] = (),
        post_review: bool = True,
    ) -> PipelineResult:
        """
        Execute the review pipeline for a pull request diff.

        Args:
            pr_info: Pull request coordinates, title and description.
            diff_text: Unified diff to review.
            exclude_patterns: Globs for destination paths to skip.
            post_review: Whether to post the review to GitHub.

        Returns:
            PipelineResult with review details.
        """
        logger.info(
            "Starting review pipeline",
            owner=pr_info.owner,
            repo=pr_info.repo,
            pr_number=pr_info.number,
        )

        # 1. Parse diff and drop deleted or excluded files
        parsed = self.diff_parser.parse(diff_text)
        file_diffs = filter_reviewable(parsed, exclude_patterns)
        logger.info(
            "Parsed diff",
            files_total=len(parsed),
            files_reviewable=len(file_diffs),
        )

        # 2. Review each unit
        units = [(file_diff, hunk) for file_diff in file_diffs for hunk in file_diff.hunks]
        if self.max_concurrency == 1:
            outcomes = [await self._review_unit(pr_info, f, h) for f, h in units]
        else:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def bounded(file_diff: FileDiff, hunk: Hunk) -> UnitOutcome:
                async with semaphore:
                    return await self._review_unit(pr_info, file_diff, hunk)

            outcomes = list(await asyncio.gather(*(bounded(f, h) for f, h in units)))

        # 3. Aggregate in unit order
        comments: list[ReviewComment] = []
        for outcome in outcomes:
            comments.extend(outcome.mapping.comments)

        result = PipelineResult(
            pr_number=pr_info.number,
            files_reviewed=len(file_diffs),
            units_reviewed=len(units),
            units_failed=sum(1 for outcome in outcomes if not outcome.ok),
            findings_dropped=sum(outcome.mapping.dropped for outcome in outcomes),
            comments=comments,
        )

        logger.info(
            "Review units processed",
            units=result.units_reviewed,
            failed=result.units_failed,
            dropped=result.findings_dropped,
            comments=result.total_comments,
        )

        # 4. Post one review with everything collected
        if not comments:
            logger.info("No review comments to submit")
            return result

        if post_review:
            response = await self.github.create_review(
                pr_info.owner,
                pr_info.repo,
                pr_info.number,
                Review(event="COMMENT", comments=comments),
            )
            record_review_submitted(len(comments))
            result.review_posted = True
            result.github_review_id = response.get("id")
            logger.info("Posted review to GitHub", review_id=result.github_review_id)

        return result

    async def _review_unit(
        self,
        pr_info: PullRequestInfo,
        file_diff: FileDiff,
        hunk: Hunk,
    ) -> UnitOutcome:
        path = file_diff.path
        logger.info("Reviewing unit", path=path, hunk=hunk.header)

        prompt = build_review_prompt(path, hunk, pr_info)
        feedback = await self.requester.request(prompt)
        record_unit_outcome("ok" if feedback.ok else "failed")

        if not feedback.ok:
            logger.warning(
                "Review unit failed",
                path=path,
                hunk=hunk.header,
                reason=feedback.reason,
            )

        return UnitOutcome(ok=feedback.ok, mapping=self.mapper.map(path, feedback.findings, hunk))
