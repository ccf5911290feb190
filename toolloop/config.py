import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or names an unknown backend"""


class MemoryConfig(BaseModel):
    """Configuration for the memory backend"""

    backend: Literal["in_memory", "json", "none"] = "in_memory"
    auto_save: bool = True
    path: str | None = None


class ObservabilityConfig(BaseModel):
    """Configuration for the observer"""

    backend: Literal["log", "none"] = "log"


class ReliabilityConfig(BaseModel):
    """Retry and timeout settings handed to the provider"""

    provider_retries: int = 2
    timeout_seconds: float = 120.0


class ModelRouteConfig(BaseModel):
    """Maps a `hint:<name>` model alias to a concrete provider and model"""

    hint: str
    provider: str
    model: str


class Config(BaseModel):
    """Configuration manager"""

    default_provider: str = "openrouter"
    default_model: str = "anthropic/claude-sonnet-4-20250514"
    api_key: str | None = None
    temperature: float = 0.7
    system_prompt_path: str | None = None
    memory: MemoryConfig = MemoryConfig()
    observability: ObservabilityConfig = ObservabilityConfig()
    reliability: ReliabilityConfig = ReliabilityConfig()
    model_routes: list[ModelRouteConfig] = []

    def resolved_api_key(self) -> str | None:
        """API key from the config file, falling back to the environment"""
        return (
            self.api_key
            or os.environ.get("TOOLLOOP_API_KEY")
            or os.environ.get("API_KEY")
        )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from file, or defaults when no file is given"""
    if config_path is None:
        return Config()

    try:
        with open(config_path, "r") as f:
            return Config.model_validate_json(f.read())
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e
