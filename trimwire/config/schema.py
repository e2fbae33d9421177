"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROTECTED_TOOLS = [
    "task",
    "todowrite",
    "todoread",
    "prune",
    "squash",
    "batch",
    "write",
    "edit",
]


class PruneToolConfig(BaseModel):
    """Pruning strategy configuration."""
    protected_tools: list[str] = Field(default_factory=lambda: list(DEFAULT_PROTECTED_TOOLS))


class StrategiesConfig(BaseModel):
    """Context management strategies."""
    prune_tool: PruneToolConfig = Field(default_factory=PruneToolConfig)


class NudgeConfig(BaseModel):
    """Reminder injected after every N new tool results."""
    enabled: bool = True
    frequency: int = Field(default=10, ge=1)


class SquashToolConfig(BaseModel):
    """Squash tool configuration."""
    enabled: bool = True
    show_summary: bool = True  # Include the literal summary in the notification


class PruneToolOptions(BaseModel):
    """Prune tool configuration."""
    enabled: bool = True
    inject_list: bool = True  # Inject the <prunable-tools> list into outbound requests


class ToolsConfig(BaseModel):
    """Host-exposed tools configuration."""
    squash: SquashToolConfig = Field(default_factory=SquashToolConfig)
    prune: PruneToolOptions = Field(default_factory=PruneToolOptions)


class Config(BaseSettings):
    """Root configuration for trimwire."""
    model_config = SettingsConfigDict(env_prefix="TRIMWIRE_", env_nested_delimiter="__")

    enabled: bool = True
    debug: bool = False
    prune_notification: Literal["off", "minimal", "detailed"] = "detailed"
    notification_type: Literal["chat", "toast"] = "chat"
    state_dir: str = "~/.trimwire/sessions"
    strategies: StrategiesConfig = Field(default_factory=StrategiesConfig)
    nudge: NudgeConfig = Field(default_factory=NudgeConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

    @property
    def state_path(self) -> Path:
        """Get expanded session state directory."""
        return Path(self.state_dir).expanduser()

    @property
    def protected_tools(self) -> list[str]:
        return self.strategies.prune_tool.protected_tools
