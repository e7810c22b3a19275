import os
from contextlib import aclosing
from typing import AsyncGenerator, List, Optional

from openai import AsyncOpenAI

from ...config import ModelSettings
from ...errors import ConfigurationError
from ...models import ConversationMessage
from ...observability import ComponentLogger
from ...orchestration.toolbox import Toolbox
from ..base import ModelAdapter, StreamRound
from .payloads import assistant_turn, build_chat_payload, tool_result_messages, transform_messages
from .streaming import stream_chat_completions

logger = ComponentLogger("openai")


class OpenAIAdapter(ModelAdapter):
    """OpenAI Chat Completions API with function tools."""
    
    name = "openai"
    
    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self._client = client
        self._api_key = os.getenv("OPENAI_API_KEY")
    
    @property
    def client(self) -> AsyncOpenAI:
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError("OpenAI API key not found in environment variables")
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client
    
    async def stream(
        self,
        messages: List[ConversationMessage],
        toolbox: Toolbox,
        params: ModelSettings
    ) -> AsyncGenerator[str, None]:
        conversation = transform_messages(messages)
        
        with logger.track_request("stream", model=params.model, tools=len(toolbox)):
            for round_number in range(params.max_tool_rounds + 1):
                state = StreamRound()
                payload = build_chat_payload(params, conversation, toolbox)
                async with aclosing(stream_chat_completions(self.client, payload, state)) as chunks:
                    async for chunk in chunks:
                        yield chunk
                
                if state.stop_reason != "tool_calls" or not state.tool_calls:
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
                conversation.extend(tool_result_messages(results))
