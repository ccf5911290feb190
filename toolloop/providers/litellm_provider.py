"""
Provider backed by LiteLLM, which handles request formatting, auth and retries
for every supported backend (OpenRouter, Anthropic, OpenAI, Bedrock, Ollama...)
"""

import logging

from litellm import acompletion

from toolloop.config import ReliabilityConfig
from toolloop.providers.base import Provider, ProviderError

logger = logging.getLogger(__name__)


class LiteLLMProvider(Provider):
    def __init__(
        self,
        name: str,
        api_key: str | None = None,
        reliability: ReliabilityConfig | None = None,
    ):
        self.name = name
        self.api_key = api_key
        self.reliability = reliability or ReliabilityConfig()

    def qualified_model(self, model: str) -> str:
        """Prefix the model with the provider name, as LiteLLM routes on it"""
        if model.startswith(f"{self.name}/"):
            return model
        return f"{self.name}/{model}"

    async def chat_with_system(
        self,
        system_prompt: str | None,
        message: str,
        model: str,
        temperature: float,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": message})

        kwargs = {
            "model": self.qualified_model(model),
            "messages": messages,
            "temperature": temperature,
            "num_retries": self.reliability.provider_retries,
            "timeout": self.reliability.timeout_seconds,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key

        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            raise ProviderError(f"{self.name} request failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise ProviderError(f"{self.name} returned a malformed response") from e

        if content is None:
            logger.debug("%s returned no text content", self.name)
            return ""
        return content
