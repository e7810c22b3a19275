"""Tool-augmented generation: provider registry, prompt assembly, orchestration."""

from .orchestrator import GenerationOrchestrator, GenerationState
from .prompt import PromptAssembler
from .tool_registry import (
    ToolProviderHandle,
    ToolProviderRegistry,
    ToolProviderSet,
    default_transport_factory,
)
from .toolbox import Capability, Toolbox, exposed_tool_name

__all__ = [
    "GenerationOrchestrator",
    "GenerationState",
    "PromptAssembler",
    "ToolProviderHandle",
    "ToolProviderRegistry",
    "ToolProviderSet",
    "default_transport_factory",
    "Capability",
    "Toolbox",
    "exposed_tool_name",
]
