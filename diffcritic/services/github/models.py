from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class PullRequestInfo(BaseModel):
    """The pull request being reviewed, with the text used as prompt context."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    number: int
    title: str = ""
    body: str = ""


class ReviewComment(BaseModel):
    """A review comment to post on a PR."""

    path: str
    line: int
    body: str
    side: Literal["LEFT", "RIGHT"] = "RIGHT"


class Review(BaseModel):
    """A complete review to submit."""

    body: str | None = None
    event: Literal["APPROVE", "REQUEST_CHANGES", "COMMENT"] = "COMMENT"
    comments: list[ReviewComment] = Field(default_factory=list)


class PullRequestEvent(BaseModel):
    """The pull_request event payload GitHub Actions writes to GITHUB_EVENT_PATH."""

    model_config = ConfigDict(extra="ignore")

    action: str = ""
    number: int | None = None
    repository: dict[str, Any] = Field(default_factory=dict)
    before: str | None = None
    after: str | None = None

    @property
    def owner(self) -> str:
        owner = self.repository.get("owner", {})
        if isinstance(owner, dict):
            return str(owner.get("login", ""))
        return ""

    @property
    def repo(self) -> str:
        return str(self.repository.get("name", ""))
