"""
Base Model Adapter Interface

This module defines the abstract base class for the model adapters that drive
one tool-augmented streaming generation. All adapters share the same loop:

1. Send the conversation and the toolbox definitions to the model
2. Yield text deltas as they arrive
3. When the model stops to use tools, invoke them through the toolbox and
   append the results (failed invocations as error results)
4. Resume streaming, for at most ``max_tool_rounds`` rounds
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Dict, List, Tuple

from ..config import ModelSettings
from ..errors import ToolInvocationError
from ..models import ConversationMessage
from ..orchestration.toolbox import Toolbox


@dataclass
class ToolCall:
    """A tool use requested by the model; ``arguments`` is the raw JSON text."""
    id: str
    name: str
    arguments: str = ""
    
    def parsed_arguments(self) -> Dict[str, Any]:
        """
        Raises:
            ToolInvocationError: If the model produced invalid JSON arguments
        """
        try:
            value = json.loads(self.arguments) if self.arguments.strip() else {}
        except json.JSONDecodeError as e:
            raise ToolInvocationError(
                f"Invalid JSON arguments for tool '{self.name}': {e}", cause=e
            ) from e
        if not isinstance(value, dict):
            raise ToolInvocationError(f"Arguments for tool '{self.name}' must be a JSON object")
        return value


@dataclass
class StreamRound:
    """What one streamed model turn produced besides its text deltas."""
    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    stop_reason: Any = None


class ModelAdapter(ABC):
    """Abstract base class for model adapters."""
    
    name: str = ""
    
    @abstractmethod
    def stream(
        self,
        messages: List[ConversationMessage],
        toolbox: Toolbox,
        params: ModelSettings
    ) -> AsyncGenerator[str, None]:
        """
        Stream one tool-augmented generation.
        
        Args:
            messages: Prompt in ``[user, *history, system]`` order
            toolbox: Capabilities the model may call
            params: Model name and generation parameters
            
        Yields:
            str: Text chunks in emission order
        """
        pass
    
    async def run_tool(self, toolbox: Toolbox, call: ToolCall) -> Tuple[str, bool]:
        """Invoke one requested tool; returns ``(content, is_error)``."""
        try:
            return await toolbox.invoke(call.name, call.parsed_arguments()), False
        except ToolInvocationError as e:
            return e.message, True
