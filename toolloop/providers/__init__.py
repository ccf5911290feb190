"""
Model providers
"""

from toolloop.providers.base import Provider, ProviderError
from toolloop.providers.litellm_provider import LiteLLMProvider
from toolloop.providers.router import (
    RouterProvider,
    create_provider,
    create_routed_provider,
)

__all__ = [
    "Provider",
    "ProviderError",
    "LiteLLMProvider",
    "RouterProvider",
    "create_provider",
    "create_routed_provider",
]
