"""Dataflow tips: answers questions about Dataflow jobs with MCP tool providers and a streaming LLM."""

__version__ = "0.1.0"

from .errors import (
    AcquisitionError,
    AgentError,
    ConfigurationError,
    GenerationError,
    ReleaseError,
    ToolInvocationError,
)
from .main import DataflowTipsClient
from .models import ConversationMessage, ConversationRequest, TurnRole
from .orchestration import GenerationOrchestrator, PromptAssembler, ToolProviderRegistry

__all__ = [
    "AcquisitionError",
    "AgentError",
    "ConfigurationError",
    "GenerationError",
    "ReleaseError",
    "ToolInvocationError",
    "DataflowTipsClient",
    "ConversationMessage",
    "ConversationRequest",
    "TurnRole",
    "GenerationOrchestrator",
    "PromptAssembler",
    "ToolProviderRegistry",
]
