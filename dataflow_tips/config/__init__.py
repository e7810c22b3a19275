"""Configuration module for the Dataflow tips agent."""

from .prompts import SYSTEM_TEMPLATE, render_system_prompt
from .settings import (
    AgentSettings,
    KnowledgeSettings,
    McpClientSettings,
    McpConnection,
    ModelSettings,
    Settings,
    ToolServerSettings,
    load_agent_settings,
    load_settings,
    load_tool_server_settings,
)

__all__ = [
    "SYSTEM_TEMPLATE",
    "render_system_prompt",
    "AgentSettings",
    "KnowledgeSettings",
    "McpClientSettings",
    "McpConnection",
    "ModelSettings",
    "Settings",
    "ToolServerSettings",
    "load_agent_settings",
    "load_settings",
    "load_tool_server_settings",
]
