"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# =============================================================================
# Environment Setup (must happen before settings are read)
# =============================================================================

os.environ.setdefault("GITHUB_TOKEN", "test-token-for-testing")
os.environ.setdefault("OPENAI_API_KEY", "test-key-for-testing")

from diffcritic.services.github.models import PullRequestInfo  # noqa: E402


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def pr_info() -> PullRequestInfo:
    return PullRequestInfo(
        owner="owner",
        repo="repo",
        number=42,
        title="Add startup checks",
        body="Validates configuration before boot.",
    )


@pytest.fixture
def mock_github_client() -> MagicMock:
    client = MagicMock()
    client.get_pull_request = AsyncMock()
    client.get_pull_request_diff = AsyncMock()
    client.compare_commits_diff = AsyncMock()
    client.create_review = AsyncMock(return_value={"id": 123})
    client.close = AsyncMock()
    return client
