"""Configuration package."""

from .settings import (
    AppConfig,
    DebateConfig,
    ModelConfig,
    OllamaConfig,
    OpenRouterConfig,
    SystemConfig,
    get_default_config,
    get_template_config,
)

__all__ = [
    "AppConfig",
    "DebateConfig",
    "ModelConfig",
    "OllamaConfig",
    "OpenRouterConfig",
    "SystemConfig",
    "get_default_config",
    "get_template_config",
]
