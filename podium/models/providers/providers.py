from typing import TYPE_CHECKING

from .base_agent import PositionAgent
from .ollama_agent import OllamaAgent
from .open_router_agent import OpenRouterAgent
from .scripted_agent import ScriptedAgent

if TYPE_CHECKING:
    from podium.config.settings import ModelConfig, SystemConfig


class AgentFactory:
    """Factory for creating position agents."""

    _agents: dict[str, type[PositionAgent]] = {
        "ollama": OllamaAgent,
        "openrouter": OpenRouterAgent,
        "mock": ScriptedAgent,
    }

    @classmethod
    def create_agent(
        cls, model_config: "ModelConfig", system_config: "SystemConfig"
    ) -> PositionAgent:
        """Create an agent instance for the configured provider."""
        if model_config.provider not in cls._agents:
            raise ValueError(
                f"Unknown provider: {model_config.provider}. Available: {list(cls._agents.keys())}"
            )

        agent_class = cls._agents[model_config.provider]
        return agent_class.from_config(model_config, system_config)

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of available provider names."""
        return list(cls._agents.keys())
