"""GitHub API client with metrics instrumentation."""

import time
from typing import Any

import httpx
import structlog

from diffcritic.core.exceptions import (
    GitHubAuthenticationError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from diffcritic.core.metrics import record_github_api_call
from diffcritic.services.github.models import PullRequestInfo, Review

logger = structlog.get_logger()

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


class GitHubClient:
    """Client for interacting with GitHub API."""

    def __init__(self, token: str, base_url: str = "https://api.github.com") -> None:
        self.token = token
        self.base_url = base_url
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github.v3+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=30.0,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _extract_endpoint_name(self, endpoint: str) -> str:
        """
        Extract a normalized endpoint name for metrics.

        Converts:
            /repos/owner/repo/pulls/123 -> pulls
            /repos/owner/repo/pulls/123/reviews -> pulls_reviews
            /repos/owner/repo/compare/abc...def -> compare
        """
        parts = endpoint.strip("/").split("/")

        # Skip 'repos', owner, repo parts
        if len(parts) >= 3 and parts[0] == "repos":
            parts = parts[3:]

        # Filter out numeric IDs and commit ranges
        parts = [p for p in parts if not p.isdigit() and "..." not in p]

        return "_".join(parts) if parts else "unknown"

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> dict[str, Any] | list[Any] | str:
        """Make an authenticated request to GitHub API."""
        client = await self._get_client()
        endpoint_name = self._extract_endpoint_name(endpoint)

        logger.debug("GitHub API request", method=method, endpoint=endpoint)

        start_time = time.perf_counter()
        status_code = 0
        rate_limit_remaining = None
        rate_limit_reset = None

        try:
            response = await client.request(method, endpoint, **kwargs)
            status_code = response.status_code

            # Extract rate limit headers
            rate_limit_remaining = int(response.headers.get("X-RateLimit-Remaining", 0))
            rate_limit_reset = int(response.headers.get("X-RateLimit-Reset", 0))

            if response.status_code == 401:
                raise GitHubAuthenticationError("Invalid GitHub token")

            if response.status_code == 403:
                if "rate limit" in response.text.lower():
                    raise GitHubRateLimitError(reset_at=rate_limit_reset)
                raise GitHubAuthenticationError("Access forbidden")

            if response.status_code == 404:
                raise GitHubNotFoundError(f"Resource not found: {endpoint}")

            if response.status_code >= 400:
                raise GitHubError(
                    f"GitHub API error: {response.status_code}",
                    details={"response": response.text},
                )

            # Handle diff responses (plain text)
            headers = kwargs.get("headers", {})
            if isinstance(headers, dict) and DIFF_MEDIA_TYPE in headers.get("Accept", ""):
                return response.text

            result: dict[str, Any] | list[Any] = response.json()
            return result

        finally:
            # Always record metrics
            duration_seconds = time.perf_counter() - start_time
            record_github_api_call(
                endpoint=endpoint_name,
                method=method,
                status_code=status_code,
                duration_seconds=duration_seconds,
                rate_limit_remaining=rate_limit_remaining,
                rate_limit_reset=rate_limit_reset,
            )

    async def get_pull_request(self, owner: str, repo: str, pr_number: int) -> PullRequestInfo:
        """Fetch the pull request title and description."""
        data = await self._request("GET", f"/repos/{owner}/{repo}/pulls/{pr_number}")

        if not isinstance(data, dict):
            raise GitHubError("Unexpected response format")

        return PullRequestInfo(
            owner=owner,
            repo=repo,
            number=pr_number,
            title=data.get("title") or "",
            body=data.get("body") or "",
        )

    async def get_pull_request_diff(
        self,
        owner: str,
        repo: str,
        pr_number: int,
    ) -> str | None:
        """Fetch the raw diff for a PR. Returns None if GitHub sent no text."""
        diff = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/pulls/{pr_number}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        return diff if isinstance(diff, str) else None

    async def compare_commits_diff(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
    ) -> str | None:
        """Fetch the raw diff between two commits. Returns None if GitHub sent no text."""
        diff = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/compare/{base}...{head}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        return diff if isinstance(diff, str) else None

    async def create_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        review: Review,
    ) -> dict[str, Any]:
        """Submit a review on a pull request."""
        payload: dict[str, Any] = {"event": review.event}

        if review.body:
            payload["body"] = review.body

        if review.comments:
            payload["comments"] = [
                {
                    "path": c.path,
                    "line": c.line,
                    "body": c.body,
                    "side": c.side,
                }
                for c in review.comments
            ]

        data = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{pr_number}/reviews",
            json=payload,
        )

        if not isinstance(data, dict):
            raise GitHubError("Unexpected response format")

        logger.info(
            "Review submitted",
            owner=owner,
            repo=repo,
            pr_number=pr_number,
            comment_count=len(review.comments),
        )

        return data
