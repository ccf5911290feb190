"""
Routing of `hint:<name>` model aliases to specific providers
"""

import logging

from toolloop.config import ModelRouteConfig, ReliabilityConfig
from toolloop.providers.base import Provider
from toolloop.providers.litellm_provider import LiteLLMProvider

logger = logging.getLogger(__name__)

HINT_PREFIX = "hint:"


class RouterProvider(Provider):
    """
    Dispatches each request to a provider chosen from the model name.

    `hint:<name>` models are looked up in the routes and replaced with the
    route's concrete model; every other model goes to the default provider.
    """

    name = "router"

    def __init__(
        self,
        default: Provider,
        routes: dict[str, tuple[Provider, str]],
    ):
        self.default = default
        self.routes = routes

    def resolve(self, model: str) -> tuple[Provider, str]:
        if model.startswith(HINT_PREFIX):
            hint = model[len(HINT_PREFIX) :]
            route = self.routes.get(hint)
            if route is not None:
                return route
            logger.warning("No route for model hint '%s', using default provider", hint)
        return self.default, model

    async def chat_with_system(
        self,
        system_prompt: str | None,
        message: str,
        model: str,
        temperature: float,
    ) -> str:
        provider, resolved_model = self.resolve(model)
        return await provider.chat_with_system(
            system_prompt, message, resolved_model, temperature
        )


def create_provider(
    name: str,
    api_key: str | None = None,
    reliability: ReliabilityConfig | None = None,
) -> Provider:
    return LiteLLMProvider(name, api_key=api_key, reliability=reliability)


def create_routed_provider(
    primary_name: str,
    api_key: str | None,
    reliability: ReliabilityConfig,
    model_routes: list[ModelRouteConfig],
) -> Provider:
    """Build the default provider, wrapped in a router when routes are configured"""
    primary = create_provider(primary_name, api_key, reliability)
    if not model_routes:
        return primary

    providers: dict[str, Provider] = {primary_name: primary}
    routes: dict[str, tuple[Provider, str]] = {}
    for route in model_routes:
        if route.provider not in providers:
            providers[route.provider] = create_provider(
                route.provider, api_key, reliability
            )
        routes[route.hint] = (providers[route.provider], route.model)

    return RouterProvider(primary, routes)
