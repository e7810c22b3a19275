from typing import Any, Dict, List, Optional, Tuple

from ...config import ModelSettings
from ...errors import ToolInvocationError
from ...models import ConversationMessage, TurnRole
from ...orchestration.toolbox import Toolbox
from ..base import ToolCall


def split_system(messages: List[ConversationMessage]) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """Lift system messages into the ``system`` parameter.
    
    The remaining messages keep their relative order.
    """
    system_parts = []
    conversation = []
    for message in messages:
        if message.role == TurnRole.SYSTEM:
            system_parts.append(message.content)
        else:
            conversation.append({"role": message.role, "content": message.content})
    return ("\n\n".join(system_parts) or None), conversation


def tool_definitions(toolbox: Toolbox) -> List[Dict[str, Any]]:
    return [
        {
            "name": capability.name,
            "description": capability.description,
            "input_schema": capability.input_schema,
        }
        for capability in toolbox.list()
    ]


def build_messages_params(
    params: ModelSettings,
    system: Optional[str],
    conversation: List[Dict[str, Any]],
    toolbox: Toolbox
) -> Dict[str, Any]:
    """Request parameters for ``messages.create``; drops empty system and tools."""
    request: Dict[str, Any] = {
        "model": params.model,
        "max_tokens": params.max_tokens,
        "temperature": params.temperature,
        "messages": list(conversation),
        "stream": True,
    }
    if system:
        request["system"] = system
    tools = tool_definitions(toolbox)
    if tools:
        request["tools"] = tools
    return request


def assistant_turn(text: str, tool_calls: List[ToolCall]) -> Dict[str, Any]:
    content: List[Dict[str, Any]] = []
    if text:
        content.append({"type": "text", "text": text})
    for call in tool_calls:
        try:
            arguments = call.parsed_arguments()
        except ToolInvocationError:
            arguments = {}
        content.append({"type": "tool_use", "id": call.id, "name": call.name, "input": arguments})
    return {"role": "assistant", "content": content}


def tool_results_turn(results: List[Tuple[ToolCall, str, bool]]) -> Dict[str, Any]:
    return {
        "role": "user",
        "content": [
            {
                "type": "tool_result",
                "tool_use_id": call.id,
                "content": content,
                "is_error": is_error,
            }
            for call, content, is_error in results
        ],
    }
