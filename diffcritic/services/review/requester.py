"""Ask the completion service for findings on a single review unit."""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from diffcritic.core.exceptions import LLMResponseParseError
from diffcritic.services.llm.base import CompletionProvider

logger = structlog.get_logger()

FENCED_JSON_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ReviewFinding(BaseModel):
    """One entry of the model's ``reviews`` array, before line validation."""

    model_config = ConfigDict(extra="ignore")

    lineNumber: Any = None
    reviewComment: str


class ReviewPayload(BaseModel):
    """The JSON object the prompt asks the model to return."""

    model_config = ConfigDict(extra="ignore")

    reviews: list[ReviewFinding]


@dataclass
class FeedbackResult:
    """Outcome of one completion request.

    A failed request and a clean "no issues" verdict both carry no findings,
    but ``status`` keeps them apart.
    """

    status: Literal["ok", "failed"]
    findings: list[ReviewFinding] = field(default_factory=list)
    reason: str | None = None

    @classmethod
    def success(cls, findings: list[ReviewFinding]) -> "FeedbackResult":
        return cls(status="ok", findings=findings)

    @classmethod
    def failure(cls, reason: str) -> "FeedbackResult":
        return cls(status="failed", reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def parse_review_payload(response_text: str) -> list[ReviewFinding]:
    """
    Parse completion text into findings.

    Raises:
        LLMResponseParseError: If the text is not JSON or lacks the reviews shape.
    """
    text = response_text.strip()
    fenced = FENCED_JSON_PATTERN.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LLMResponseParseError(f"Invalid JSON in response: {e}") from e

    try:
        payload = ReviewPayload.model_validate(data)
    except ValidationError as e:
        raise LLMResponseParseError(
            "Response does not match the reviews shape",
            details={"errors": e.errors(include_url=False)},
        ) from e

    return payload.reviews


class FeedbackRequester:
    """Sends review prompts and turns replies into findings, never raising."""

    def __init__(self, provider: CompletionProvider) -> None:
        self.provider = provider

    async def request(self, prompt: str) -> FeedbackResult:
        try:
            response_text = await self.provider.complete(prompt)
        except Exception as e:
            logger.error(
                "Completion request failed",
                provider=self.provider.name,
                model=self.provider.model,
                error=str(e),
            )
            return FeedbackResult.failure(f"request failed: {e}")

        if not isinstance(response_text, str):
            logger.error("Completion returned no text", provider=self.provider.name)
            return FeedbackResult.failure("completion returned no text")

        try:
            findings = parse_review_payload(response_text)
        except LLMResponseParseError as e:
            logger.error(
                "Failed to parse completion",
                response=response_text[:500],
                error=e.message,
            )
            return FeedbackResult.failure(e.message)

        return FeedbackResult.success(findings)
