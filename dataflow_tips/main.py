"""Main entry point for the Dataflow tips agent."""

from contextlib import aclosing
from typing import AsyncGenerator, List, Optional, Sequence

from .config import AgentSettings, load_agent_settings
from .models.conversation_types import ConversationMessage
from .orchestration import GenerationOrchestrator, ToolProviderRegistry
from .orchestration.tool_registry import TransportFactory
from .providers import get_model_adapter


class DataflowTipsClient:
    """High-level client answering questions about Dataflow jobs.
    
    Settings are re-read for every question unless ``settings`` is given.
    """
    
    def __init__(
        self,
        settings: Optional[AgentSettings] = None,
        transport_factory: Optional[TransportFactory] = None,
        adapter_factory=None
    ):
        settings_provider = (lambda: settings) if settings is not None else load_agent_settings
        self.registry = ToolProviderRegistry(
            settings_provider=lambda: settings_provider().mcp,
            transport_factory=transport_factory
        )
        self.orchestrator = GenerationOrchestrator(
            self.registry,
            adapter_factory or get_model_adapter,
            settings_provider=settings_provider
        )
    
    def stream(
        self,
        question: str,
        history: Optional[Sequence[ConversationMessage]] = None,
        request_id: Optional[str] = None
    ) -> AsyncGenerator[str, None]:
        """Stream the answer chunk by chunk."""
        return self.orchestrator.generate(question, history, request_id)
    
    async def ask(
        self,
        question: str,
        history: Optional[Sequence[ConversationMessage]] = None,
        request_id: Optional[str] = None
    ) -> str:
        """Return the complete answer."""
        chunks: List[str] = []
        async with aclosing(self.stream(question, history, request_id)) as stream:
            async for chunk in stream:
                chunks.append(chunk)
        return "".join(chunks)
    
    async def list_tools(self) -> List[dict]:
        """Acquire the configured providers, describe their tools and release them."""
        async with self.registry.session() as provider_set:
            return [
                {
                    "name": capability.name,
                    "provider": capability.provider,
                    "tool": capability.tool_name,
                    "description": capability.description,
                }
                for capability in provider_set.toolbox().list()
            ]
