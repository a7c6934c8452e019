from diffcritic.services.llm.base import CompletionProvider
from diffcritic.services.llm.openai import OpenAIProvider

__all__ = ["CompletionProvider", "OpenAIProvider"]
