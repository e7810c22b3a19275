import os
from contextlib import aclosing
from typing import AsyncGenerator, List, Optional

from anthropic import AsyncAnthropic

from ...config import ModelSettings
from ...errors import ConfigurationError
from ...models import ConversationMessage
from ...observability import ComponentLogger
from ...orchestration.toolbox import Toolbox
from ..base import ModelAdapter, StreamRound
from .payloads import assistant_turn, build_messages_params, split_system, tool_results_turn
from .streaming import stream_messages

logger = ComponentLogger("anthropic")


class AnthropicAdapter(ModelAdapter):
    """Anthropic Messages API with tool use."""
    
    name = "anthropic"
    
    def __init__(self, client: Optional[AsyncAnthropic] = None):
        self._client = client
        self._api_key = os.getenv("ANTHROPIC_API_KEY")
    
    @property
    def client(self) -> AsyncAnthropic:
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError("Anthropic API key not found in environment variables")
            self._client = AsyncAnthropic(api_key=self._api_key)
        return self._client
    
    async def stream(
        self,
        messages: List[ConversationMessage],
        toolbox: Toolbox,
        params: ModelSettings
    ) -> AsyncGenerator[str, None]:
        system, conversation = split_system(messages)
        
        with logger.track_request("stream", model=params.model, tools=len(toolbox)):
            for round_number in range(params.max_tool_rounds + 1):
                state = StreamRound()
                request = build_messages_params(params, system, conversation, toolbox)
                async with aclosing(stream_messages(self.client, request, state)) as chunks:
                    async for chunk in chunks:
                        yield chunk
                
                if state.stop_reason != "tool_use" or not state.tool_calls:
                    return
                if round_number == params.max_tool_rounds:
                    logger.warning(
                        "Tool round limit reached, stopping generation",
                        model=params.model,
                        max_tool_rounds=params.max_tool_rounds
                    )
                    return
                
                results = []
                for call in state.tool_calls:
                    logger.debug("Invoking tool", model=params.model, tool=call.name, round=round_number)
                    content, is_error = await self.run_tool(toolbox, call)
                    results.append((call, content, is_error))
                
                conversation.append(assistant_turn(state.text, state.tool_calls))
                conversation.append(tool_results_turn(results))
