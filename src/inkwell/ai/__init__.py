"""AI client, agent runtime and tool wiring."""

from .ai_types import AgentConfig, ModelInvoker
from .client import AIClient, ClientSettings

__all__ = ["AIClient", "AgentConfig", "ClientSettings", "ModelInvoker"]
