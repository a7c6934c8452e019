"""Run the review pipeline against a live pull request without posting."""

import asyncio
import sys

from diffcritic.core.config import get_settings
from diffcritic.services.github.client import GitHubClient
from diffcritic.services.llm.openai import OpenAIProvider
from diffcritic.services.review.filters import parse_patterns
from diffcritic.services.review.mapper import FeedbackMapper
from diffcritic.services.review.pipeline import ReviewPipeline
from diffcritic.services.review.requester import FeedbackRequester


async def main() -> None:
    if len(sys.argv) != 4:
        print("Usage: python scripts/review_pr.py <owner> <repo> <pr_number>")
        print("Example: python scripts/review_pr.py octocat hello-world 123")
        sys.exit(1)

    owner = sys.argv[1]
    repo = sys.argv[2]
    pr_number = int(sys.argv[3])

    settings = get_settings()
    github = GitHubClient(
        token=settings.github_token.get_secret_value(),
        base_url=settings.github_api_url,
    )
    provider = OpenAIProvider(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.openai_api_model,
        timeout_seconds=settings.openai_timeout_seconds,
    )

    print(f"🔍 Reviewing PR #{pr_number} in {owner}/{repo}")
    print("-" * 50)

    try:
        pr_info = await github.get_pull_request(owner, repo, pr_number)
        diff_text = await github.get_pull_request_diff(owner, repo, pr_number)
        if not diff_text:
            print("No diff data available.")
            return

        pipeline = ReviewPipeline(
            github_client=github,
            requester=FeedbackRequester(provider),
            mapper=FeedbackMapper(validate_lines=settings.validate_line_numbers),
            max_concurrency=settings.max_concurrent_units,
        )
        result = await pipeline.execute(
            pr_info,
            diff_text,
            exclude_patterns=parse_patterns(settings.exclude),
            post_review=False,
        )

        print("\n✅ Review Complete!")
        print(f"   PR: #{result.pr_number} - {pr_info.title}")
        print(f"   Files Reviewed: {result.files_reviewed}")
        print(f"   Units: {result.units_reviewed} ({result.units_failed} failed)")
        print(f"   Dropped findings: {result.findings_dropped}")
        print(f"   Comments: {result.total_comments}")
        print()
        for comment in result.comments:
            print(f"{comment.path}:{comment.line}")
            print(f"   {comment.body}")

    except Exception as e:
        print(f"\n❌ Error: {e}")
        raise
    finally:
        await github.close()
        await provider.close()


if __name__ == "__main__":
    asyncio.run(main())
