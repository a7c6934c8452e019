from abc import ABC, abstractmethod


class CompletionProvider(ABC):
    """Abstract base class for completion services."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier."""
        pass

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send a prompt and return the raw completion text."""
        pass

    async def close(self) -> None:
        """Release network resources held by the provider."""
        return None
