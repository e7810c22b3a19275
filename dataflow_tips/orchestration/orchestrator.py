"""Tool-augmented generation orchestrator.

One call to :meth:`GenerationOrchestrator.generate` walks the states

    IDLE -> ACQUIRING_TOOLS -> GENERATING -> RELEASING -> DONE

Acquisition strictly precedes generation, which strictly precedes release.
The acquired tool-provider set is released exactly once on every exit path
(completion, model failure, consumer cancellation) by the registry session,
and a failed acquisition ends the call before the model is ever invoked.
"""

from contextlib import aclosing
from enum import Enum
from typing import Any, AsyncGenerator, Callable, Optional, Sequence

from ..config import AgentSettings, load_agent_settings, render_system_prompt
from ..errors import AgentError, ConfigurationError, GenerationError
from ..models import ConversationMessage
from ..observability import ComponentLogger, new_request_id
from .prompt import PromptAssembler
from .tool_registry import ToolProviderRegistry

logger = ComponentLogger("orchestrator")


class GenerationState(str, Enum):
    IDLE = "idle"
    ACQUIRING_TOOLS = "acquiring_tools"
    GENERATING = "generating"
    RELEASING = "releasing"
    DONE = "done"


StateListener = Callable[[GenerationState, str], None]


class GenerationOrchestrator:
    """Streams answers produced by a model that can call the acquired tools.
    
    The orchestrator holds no per-request state; concurrent calls each own
    their tool-provider set.
    
    Args:
        registry: Acquires and releases tool-provider sets
        adapter_factory: Returns the model adapter for a provider name
            (``dataflow_tips.providers.get_model_adapter`` in production)
        assembler: Builds the prompt
        settings_provider: Returns the current agent settings, called once per request
        state_listener: Optional ``(state, request_id)`` callback for every transition
    """
    
    def __init__(
        self,
        registry: ToolProviderRegistry,
        adapter_factory: Callable[[str], Any],
        assembler: Optional[PromptAssembler] = None,
        settings_provider: Optional[Callable[[], AgentSettings]] = None,
        state_listener: Optional[StateListener] = None
    ):
        self._registry = registry
        self._adapter_factory = adapter_factory
        self._assembler = assembler or PromptAssembler()
        self._settings_provider = settings_provider or load_agent_settings
        self._state_listener = state_listener
    
    def _transition(self, state: GenerationState, request_id: str, **fields) -> None:
        logger.debug(f"State -> {state.value}", request_id=request_id, **fields)
        if self._state_listener is not None:
            self._state_listener(state, request_id)
    
    async def generate(
        self,
        message: str,
        history: Optional[Sequence[ConversationMessage]] = None,
        request_id: Optional[str] = None
    ) -> AsyncGenerator[str, None]:
        """Answer ``message`` given the chronological ``history``.
        
        Yields:
            Text chunks in the order the model emitted them
            
        Raises:
            AcquisitionError: A tool provider could not be acquired
            GenerationError: The model call failed
            ConfigurationError: Settings, system template or provider are invalid
        """
        request_id = request_id or new_request_id()
        self._transition(GenerationState.IDLE, request_id)
        outcome = "failure"
        try:
            settings = self._settings_provider()
            system_prompt = self._render_system_prompt(settings)
            adapter = self._adapter_factory(settings.model.provider)
            
            self._transition(GenerationState.ACQUIRING_TOOLS, request_id)
            async with self._registry.session(settings.mcp, request_id) as provider_set:
                try:
                    toolbox = provider_set.toolbox()
                    prompt = self._assembler.build(message, history, system_prompt)
                    
                    self._transition(
                        GenerationState.GENERATING,
                        request_id,
                        providers=len(provider_set),
                        tools=len(toolbox),
                        messages=len(prompt)
                    )
                    async with aclosing(adapter.stream(prompt, toolbox, settings.model)) as chunks:
                        async for chunk in chunks:
                            yield chunk
                except AgentError:
                    raise
                except Exception as e:
                    logger.error("Model generation failed", request_id=request_id, error=e)
                    raise GenerationError(f"Model generation failed: {e}", cause=e) from e
                finally:
                    self._transition(GenerationState.RELEASING, request_id)
            outcome = "success"
        finally:
            self._transition(GenerationState.DONE, request_id, outcome=outcome)
    
    @staticmethod
    def _render_system_prompt(settings: AgentSettings) -> str:
        try:
            return render_system_prompt(settings.system_template, settings.system_variables)
        except Exception as e:
            raise ConfigurationError(f"Cannot render the system template: {e}", cause=e) from e
