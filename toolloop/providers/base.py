from abc import ABC, abstractmethod


class ProviderError(Exception):
    """Raised when a model backend fails: network, auth or a malformed response"""


class Provider(ABC):
    """A language-model backend offering single request/response chat"""

    name: str = "provider"

    @abstractmethod
    async def chat_with_system(
        self,
        system_prompt: str | None,
        message: str,
        model: str,
        temperature: float,
    ) -> str:
        """Send one user message (with optional system prompt) and return the reply text"""
