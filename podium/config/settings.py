"""Configuration settings and data models."""

import json
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

VALID_PROVIDERS = {"ollama", "openrouter", "mock"}
REQUIRED_SIDES = {"pro", "con"}


class ModelConfig(BaseModel):
    """Configuration for the model behind one debate side."""

    name: str = Field(..., description="Model name (e.g., 'llama3.2:3b' for Ollama, 'openai/gpt-4' for OpenRouter)")
    provider: str = Field(default="ollama", description="Model provider (ollama, openrouter, mock)")
    max_tokens: int = Field(default=700, gt=0, description="Maximum tokens per response")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Model temperature")
    streaming: bool = Field(default=True, description="Stream responses when the provider supports it")
    responses: dict[str, str] = Field(
        default_factory=dict,
        description="Scripted responses keyed by phase, position or prompt (mock provider only)",
    )
    chunk_delay: float = Field(
        default=0.0, ge=0.0, description="Seconds between streamed words (mock provider only)"
    )

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in VALID_PROVIDERS:
            raise ValueError(f"Provider must be one of: {sorted(VALID_PROVIDERS)}")
        return v


class DebateConfig(BaseModel):
    """Timing and length rules for a debate."""

    topic: str | None = Field(default=None, description="Default debate topic")
    time_limit: float = Field(default=120, gt=0, description="Seconds allowed per generation call")
    preparation_time: float = Field(
        default=180, gt=0, description="Seconds shared by both sides for the preparation phase"
    )
    word_limit: int | None = Field(default=500, gt=0, description="Maximum words per statement")
    show_preparation: bool = Field(
        default=True, description="Include preparation material in transcripts and console output"
    )


class OllamaConfig(BaseModel):
    """Ollama-specific configuration."""

    keep_alive: str | None = Field(
        default="5m", description="How long to keep models loaded (e.g., '5m', '1h', '0' for immediate unload)"
    )
    repeat_penalty: float | None = Field(
        default=1.1, description="Penalty for repetition in responses"
    )
    timeout: float = Field(
        default=300, description="Transport timeout in seconds; debate budgets are enforced separately"
    )


class OpenRouterConfig(BaseModel):
    """OpenRouter-specific configuration."""

    api_key: str | None = Field(
        default=None, description="OpenRouter API key (can also be set via OPENROUTER_API_KEY env var)"
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1", description="OpenRouter API base URL"
    )
    site_url: str | None = Field(
        default=None, description="Your site URL for OpenRouter referrer tracking"
    )
    app_name: str | None = Field(
        default="Podium Debate Orchestrator", description="App name for OpenRouter tracking"
    )
    timeout: float = Field(
        default=300, description="Transport timeout in seconds; debate budgets are enforced separately"
    )

    def resolve_api_key(self) -> str | None:
        return self.api_key or os.getenv("OPENROUTER_API_KEY")


class SystemConfig(BaseModel):
    """System-wide configuration."""

    ollama_base_url: str = Field(
        default="http://localhost:11434", description="Ollama API URL"
    )
    ollama: OllamaConfig = Field(
        default_factory=OllamaConfig, description="Ollama-specific settings"
    )
    openrouter: OpenRouterConfig = Field(
        default_factory=OpenRouterConfig, description="OpenRouter-specific settings"
    )

    save_transcripts: bool = Field(
        default=True, description="Save debate transcripts to disk"
    )
    transcript_dir: str = Field(
        default="transcripts", description="Directory to save transcripts"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    debate: DebateConfig = Field(default_factory=DebateConfig)
    models: dict[str, ModelConfig]
    system: SystemConfig = Field(default_factory=SystemConfig)

    @field_validator("models")
    @classmethod
    def validate_sides(cls, v: dict[str, ModelConfig]) -> dict[str, ModelConfig]:
        if set(v) != REQUIRED_SIDES:
            raise ValueError(
                f"'models' must configure exactly the sides {sorted(REQUIRED_SIDES)}, got {sorted(v)}"
            )
        return v

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a JSON or YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.suffix.lower() in {".yaml", ".yml"}:
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        if not data.get("models"):
            raise ValueError(
                "Config must include a 'models' section with 'pro' and 'con' entries"
            )

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_template_config() -> AppConfig:
    """Get an offline configuration that debates with scripted agents."""
    return AppConfig(
        debate=DebateConfig(
            topic="Should artificial intelligence be regulated by government oversight?",
            time_limit=120,
            preparation_time=180,
            word_limit=500,
            show_preparation=True,
        ),
        models={
            "pro": ModelConfig(
                name="scripted-pro",
                provider="mock",
                chunk_delay=0.01,
                responses={
                    "pro": "Regulation protects the public while the technology matures.",
                },
            ),
            "con": ModelConfig(
                name="scripted-con",
                provider="mock",
                chunk_delay=0.01,
                responses={
                    "con": "Heavy regulation freezes innovation before its benefits arrive.",
                },
            ),
        },
        system=SystemConfig(
            save_transcripts=True,
            transcript_dir="transcripts",
            log_level="INFO",
        ),
    )


def get_default_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from ``config_path`` or ``debate_config.json``, falling back to the template."""
    path = config_path or Path("debate_config.json")
    if not path.exists():
        if config_path is not None:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return get_template_config()
    return AppConfig.load_from_file(path)
