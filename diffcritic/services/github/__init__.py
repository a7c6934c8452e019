from diffcritic.services.github.client import GitHubClient
from diffcritic.services.github.models import (
    PullRequestEvent,
    PullRequestInfo,
    Review,
    ReviewComment,
)

__all__ = ["GitHubClient", "PullRequestEvent", "PullRequestInfo", "Review", "ReviewComment"]
