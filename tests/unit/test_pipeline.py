from unittest.mock import MagicMock

import pytest

from diffcritic.services.github.models import PullRequestInfo, Review
from diffcritic.services.review.pipeline import ReviewPipeline
from diffcritic.services.review.requester import FeedbackRequester
from tests.fixtures.providers import ScriptedProvider
from tests.fixtures.sample_diffs import (
    DELETED_FILE,
    README_AND_MAIN,
    SINGLE_ADDITION,
    THREE_HUNKS,
)

EMPTY_REVIEWS = '{"reviews": []}'


def make_pipeline(
    github: MagicMock,
    provider: ScriptedProvider,
    max_concurrency: int = 1,
) -> ReviewPipeline:
    return ReviewPipeline(
        github_client=github,
        requester=FeedbackRequester(provider),
        max_concurrency=max_concurrency,
    )


class TestReviewPipeline:
    """Tests for the review pipeline."""

    @pytest.mark.asyncio
    async def test_single_added_line(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        """One finding on an added line becomes one submitted comment."""
        provider = ScriptedProvider(
            ['{"reviews":[{"lineNumber":5,"reviewComment":"avoid unused variable"}]}']
        )

        result = await make_pipeline(mock_github_client, provider).execute(pr_info, SINGLE_ADDITION)

        assert result.files_reviewed == 1
        assert result.units_reviewed == 1
        assert result.total_comments == 1
        assert result.review_posted is True
        assert result.github_review_id == 123

        mock_github_client.create_review.assert_called_once()
        owner, repo, number, review = mock_github_client.create_review.call_args.args
        assert (owner, repo, number) == ("owner", "repo", 42)
        assert isinstance(review, Review)
        assert review.event == "COMMENT"
        assert [(c.path, c.line, c.body) for c in review.comments] == [
            ("src/app.ts", 5, "avoid unused variable")
        ]

    @pytest.mark.asyncio
    async def test_deleted_file_not_reviewed(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        """A pure deletion produces no requests and no submission."""
        provider = ScriptedProvider([])

        result = await make_pipeline(mock_github_client, provider).execute(pr_info, DELETED_FILE)

        assert result.files_reviewed == 0
        assert result.total_comments == 0
        assert provider.prompts == []
        mock_github_client.create_review.assert_not_called()

    @pytest.mark.asyncio
    async def test_excluded_files_not_sent(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        """Only files surviving the exclusion globs reach the completion service."""
        provider = ScriptedProvider([EMPTY_REVIEWS])

        result = await make_pipeline(mock_github_client, provider).execute(
            pr_info, README_AND_MAIN, exclude_patterns=["*.md"]
        )

        assert result.files_reviewed == 1
        assert len(provider.prompts) == 1
        assert 'Diff of file "main.ts"' in provider.prompts[0]
        assert "README.md" not in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_failed_unit_does_not_abort_run(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        """Non-JSON output for one hunk leaves the other hunks' findings intact."""
        provider = ScriptedProvider(
            [
                '{"reviews":[{"lineNumber":2,"reviewComment":"Unused import."}]}',
                "I could not review this hunk.",
                '{"reviews":[{"lineNumber":6,"reviewComment":"Set in __init__."}]}',
            ]
        )

        result = await make_pipeline(mock_github_client, provider).execute(pr_info, THREE_HUNKS)

        assert result.units_reviewed == 3
        assert result.units_failed == 1
        review = mock_github_client.create_review.call_args.args[3]
        assert [(c.path, c.line, c.body) for c in review.comments] == [
            ("lib/a.py", 2, "Unused import."),
            ("lib/b.py", 6, "Set in __init__."),
        ]

    @pytest.mark.asyncio
    async def test_no_findings_no_submission(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        """Empty reviews everywhere finishes without posting."""
        provider = ScriptedProvider([EMPTY_REVIEWS] * 3)

        result = await make_pipeline(mock_github_client, provider).execute(pr_info, THREE_HUNKS)

        assert result.units_reviewed == 3
        assert result.units_failed == 0
        assert result.total_comments == 0
        assert result.review_posted is False
        mock_github_client.create_review.assert_not_called()

    @pytest.mark.asyncio
    async def test_hallucinated_line_dropped(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        provider = ScriptedProvider(
            [
                '{"reviews":[{"lineNumber":99,"reviewComment":"Not in the hunk."},'
                '{"lineNumber":5,"reviewComment":"avoid unused variable"}]}'
            ]
        )

        result = await make_pipeline(mock_github_client, provider).execute(pr_info, SINGLE_ADDITION)

        assert result.findings_dropped == 1
        assert [c.line for c in result.comments] == [5]

    @pytest.mark.asyncio
    async def test_empty_diff(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        result = await make_pipeline(mock_github_client, ScriptedProvider([])).execute(pr_info, "")

        assert result.files_reviewed == 0
        mock_github_client.create_review.assert_not_called()

    @pytest.mark.asyncio
    async def test_execute_without_posting(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        provider = ScriptedProvider(
            ['{"reviews":[{"lineNumber":5,"reviewComment":"avoid unused variable"}]}']
        )

        result = await make_pipeline(mock_github_client, provider).execute(
            pr_info, SINGLE_ADDITION, post_review=False
        )

        assert result.total_comments == 1
        assert result.review_posted is False
        assert result.github_review_id is None
        mock_github_client.create_review.assert_not_called()

    @pytest.mark.asyncio
    async def test_bounded_concurrency_keeps_unit_order(
        self,
        mock_github_client: MagicMock,
        pr_info: PullRequestInfo,
    ) -> None:
        provider = ScriptedProvider(
            [
                '{"reviews":[{"lineNumber":2,"reviewComment":"first"}]}',
                '{"reviews":[{"lineNumber":22,"reviewComment":"second"}]}',
                '{"reviews":[{"lineNumber":6,"reviewComment":"third"}]}',
            ]
        )

        result = await make_pipeline(mock_github_client, provider, max_concurrency=3).execute(
            pr_info, THREE_HUNKS
        )

        assert [c.body for c in result.comments] == ["first", "second", "third"]
        mock_github_client.create_review.assert_called_once()

    def test_rejects_zero_concurrency(self, mock_github_client: MagicMock) -> None:
        with pytest.raises(ValueError):
            make_pipeline(mock_github_client, ScriptedProvider([]), max_concurrency=0)
