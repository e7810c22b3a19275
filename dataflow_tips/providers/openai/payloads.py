import json
from typing import Any, Dict, List, Tuple

from ...config import ModelSettings
from ...models import ConversationMessage
from ...orchestration.toolbox import Toolbox
from ..base import ToolCall


def transform_messages(messages: List[ConversationMessage]) -> List[Dict[str, Any]]:
    """Chat Completions messages; system messages stay where the prompt put them."""
    return [{"role": message.role, "content": message.content} for message in messages]


def tool_definitions(toolbox: Toolbox) -> List[Dict[str, Any]]:
    return [
        {
            "type": "function",
            "function": {
                "name": capability.name,
                "description": capability.description,
                "parameters": capability.input_schema,
            },
        }
        for capability in toolbox.list()
    ]


def build_chat_payload(
    params: ModelSettings,
    messages: List[Dict[str, Any]],
    toolbox: Toolbox
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": params.model,
        "messages": list(messages),
        "max_tokens": params.max_tokens,
        "temperature": params.temperature,
        "stream": True,
    }
    tools = tool_definitions(toolbox)
    if tools:
        payload["tools"] = tools
    return payload


def assistant_turn(text: str, tool_calls: List[ToolCall]) -> Dict[str, Any]:
    return {
        "role": "assistant",
        "content": text or None,
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": call.arguments or "{}"},
            }
            for call in tool_calls
        ],
    }


def tool_result_messages(results: List[Tuple[ToolCall, str, bool]]) -> List[Dict[str, Any]]:
    # Chat Completions has no error flag on tool messages
    return [
        {
            "role": "tool",
            "tool_call_id": call.id,
            "content": json.dumps({"error": content}) if is_error else content,
        }
        for call, content, is_error in results
    ]
