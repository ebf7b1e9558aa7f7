"""Position agent implementations."""

from .providers import AgentFactory
from .base_agent import PositionAgent
from .ollama_agent import OllamaAgent
from .open_router_agent import OpenRouterAgent
from .scripted_agent import ScriptedAgent

__all__ = [
    "AgentFactory",
    "PositionAgent",
    "OllamaAgent",
    "OpenRouterAgent",
    "ScriptedAgent",
]
