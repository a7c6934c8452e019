import time
from typing import Any

import structlog

from diffcritic.core.exceptions import LLMError, LLMProviderUnavailableError
from diffcritic.core.metrics import record_llm_request
from diffcritic.services.llm.base import CompletionProvider

logger = structlog.get_logger()

# Only this model variant is asked for strict JSON output
JSON_MODE_MODEL = "gpt-4-1106-preview"

TEMPERATURE = 0.2
TOP_P = 1
MAX_TOKENS = 700


class OpenAIProvider(CompletionProvider):
    """OpenAI chat-completions provider."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: float = 120.0,
        client: Any = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout_seconds
        self._client: Any = client

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        """Lazy initialization of the OpenAI client."""
        if self._client is None:
            if not self._api_key:
                raise LLMProviderUnavailableError("OpenAI API key not configured")

            from openai import AsyncOpenAI

            # A single attempt per unit; the SDK would otherwise retry on its own
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def build_request(self, prompt: str) -> dict[str, Any]:
        """Keyword arguments for ``chat.completions.create``."""
        kwargs: dict[str, Any] = {
            "model": self._model,
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
            "top_p": TOP_P,
            "frequency_penalty": 0,
            "presence_penalty": 0,
            "messages": [{"role": "system", "content": prompt}],
        }
        if self._model == JSON_MODE_MODEL:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    async def complete(self, prompt: str) -> str:
        client = self._get_client()

        logger.debug("Sending completion request", provider=self.name, model=self._model)

        start_time = time.perf_counter()
        try:
            completion = await client.chat.completions.create(**self.build_request(prompt))
        except Exception as e:
            record_llm_request(
                provider=self.name,
                model=self._model,
                status="error",
                duration_seconds=time.perf_counter() - start_time,
            )
            raise LLMError(f"OpenAI API error: {e}") from e

        usage = getattr(completion, "usage", None)
        record_llm_request(
            provider=self.name,
            model=self._model,
            status="success",
            duration_seconds=time.perf_counter() - start_time,
            tokens_input=getattr(usage, "prompt_tokens", 0) or 0,
            tokens_output=getattr(usage, "completion_tokens", 0) or 0,
        )

        if not completion.choices:
            return "{}"
        content = completion.choices[0].message.content
        return (content or "").strip() or "{}"

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
