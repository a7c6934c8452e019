from typing import Any


class DiffCriticError(Exception):
    """Base exception for diffcritic."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class GitHubError(DiffCriticError):
    """Errors related to GitHub API interactions."""

    pass


class GitHubAuthenticationError(GitHubError):
    """GitHub authentication failed."""

    pass


class GitHubRateLimitError(GitHubError):
    """GitHub API rate limit exceeded."""

    def __init__(self, reset_at: int, message: str = "Rate limit exceeded") -> None:
        self.reset_at = reset_at
        super().__init__(message, {"reset_at": reset_at})


class GitHubNotFoundError(GitHubError):
    """Requested GitHub resource not found."""

    pass


class LLMError(DiffCriticError):
    """Errors related to completion service interactions."""

    pass


class LLMProviderUnavailableError(LLMError):
    """Completion provider is not available or configured."""

    pass


class LLMResponseParseError(LLMError):
    """Failed to parse a completion into the expected review shape."""

    pass


class ConfigurationError(DiffCriticError):
    """Invalid or missing configuration."""

    pass
