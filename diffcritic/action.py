"""GitHub Actions entry point: review the pull request that triggered the run."""

import asyncio
import json
from pathlib import Path

import structlog
from pydantic import ValidationError

from diffcritic.core.config import Settings, get_settings
from diffcritic.core.exceptions import ConfigurationError
from diffcritic.core.metrics import push_metrics
from diffcritic.services.github.client import GitHubClient
from diffcritic.services.github.models import PullRequestEvent, PullRequestInfo
from diffcritic.services.llm.base import CompletionProvider
from diffcritic.services.llm.openai import OpenAIProvider
from diffcritic.services.review.filters import parse_patterns
from diffcritic.services.review.mapper import FeedbackMapper
from diffcritic.services.review.pipeline import PipelineResult, ReviewPipeline
from diffcritic.services.review.requester import FeedbackRequester

logger = structlog.get_logger()

SUPPORTED_ACTIONS = ("opened", "synchronize")


def load_event(event_path: str) -> PullRequestEvent:
    """Read the event payload GitHub Actions stores on disk."""
    if not event_path:
        raise ConfigurationError("GITHUB_EVENT_PATH is not set")

    try:
        data = json.loads(Path(event_path).read_text(encoding="utf-8"))
        return PullRequestEvent.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigurationError(
            f"Could not read event payload: {e}", details={"path": event_path}
        ) from e


async def fetch_diff(
    github: GitHubClient,
    event: PullRequestEvent,
    pr_info: PullRequestInfo,
) -> str | None:
    """
    Fetch the diff to review for a supported action.

    ``opened`` reviews the whole pull request, ``synchronize`` only the pushed commits.
    """
    if event.action == "opened":
        logger.info("Using pull request diff", pr_number=pr_info.number)
        return await github.get_pull_request_diff(pr_info.owner, pr_info.repo, pr_info.number)

    if not event.before or not event.after:
        raise ConfigurationError("synchronize event is missing before/after commits")
    logger.info("Using comparison diff", base=event.before, head=event.after)
    return await github.compare_commits_diff(pr_info.owner, pr_info.repo, event.before, event.after)


async def run(
    settings: Settings,
    github: GitHubClient | None = None,
    provider: CompletionProvider | None = None,
) -> PipelineResult | None:
    """
    Review the pull request described by the event payload.

    Returns None when there was nothing to review (unsupported event or no diff).
    """
    event = load_event(settings.github_event_path)

    if event.action not in SUPPORTED_ACTIONS:
        logger.info(
            "Event not supported",
            event_name=settings.github_event_name,
            action=event.action,
        )
        return None

    if event.number is None or not event.owner or not event.repo:
        raise ConfigurationError("Event payload does not identify a pull request")

    github = github or GitHubClient(
        token=settings.github_token.get_secret_value(),
        base_url=settings.github_api_url,
    )
    provider = provider or OpenAIProvider(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.openai_api_model,
        timeout_seconds=settings.openai_timeout_seconds,
    )

    try:
        pr_info = await github.get_pull_request(event.owner, event.repo, event.number)
        logger.info("Fetched PR", title=pr_info.title, action=event.action)

        diff_text = await fetch_diff(github, event, pr_info)
        if not diff_text:
            logger.info("No diff data available")
            return None

        pipeline = ReviewPipeline(
            github_client=github,
            requester=FeedbackRequester(provider),
            mapper=FeedbackMapper(validate_lines=settings.validate_line_numbers),
            max_concurrency=settings.max_concurrent_units,
        )
        return await pipeline.execute(
            pr_info,
            diff_text,
            exclude_patterns=parse_patterns(settings.exclude),
        )
    finally:
        await github.close()
        await provider.close()


def main() -> int:
    """Run the action and return the process exit code."""
    settings: Settings | None = None
    try:
        settings = get_settings()
        result = asyncio.run(run(settings))
        if result is not None:
            logger.info(
                "Review complete",
                files_reviewed=result.files_reviewed,
                units_failed=result.units_failed,
                comments=result.total_comments,
                review_posted=result.review_posted,
            )
        return 0
    except Exception as e:
        logger.exception("Fatal error", error=str(e))
        return 1
    finally:
        if settings is not None and settings.metrics_pushgateway_url:
            try:
                push_metrics(settings.metrics_pushgateway_url)
            except OSError as e:
                logger.warning("Could not push metrics", error=str(e))
