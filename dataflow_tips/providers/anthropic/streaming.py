from typing import Any, AsyncGenerator, Dict, Optional

from ..base import StreamRound, ToolCall


async def stream_messages(
    client: Any,
    params: Dict[str, Any],
    state: StreamRound,
) -> AsyncGenerator[str, None]:
    """Stream one ``messages.create`` turn, yielding text and recording tool uses in ``state``.

    The HTTP response is closed when the turn ends or the consumer stops early.
    """
    current: Optional[ToolCall] = None
    async with await client.messages.create(**params) as stream:
        async for event in stream:
            event_type = getattr(event, "type", None)

            if event_type == "content_block_start":
                block = event.content_block
                if getattr(block, "type", None) == "tool_use":
                    current = ToolCall(id=block.id, name=block.name)

            elif event_type == "content_block_delta":
                delta = event.delta
                delta_type = getattr(delta, "type", None)
                if delta_type == "text_delta" and delta.text:
                    state.text += delta.text
                    yield delta.text
                elif delta_type == "input_json_delta" and current is not None:
                    current.arguments += delta.partial_json or ""

            elif event_type == "content_block_stop":
                if current is not None:
                    state.tool_calls.append(current)
                    current = None

            elif event_type == "message_delta":
                stop_reason = getattr(event.delta, "stop_reason", None)
                if stop_reason:
                    state.stop_reason = stop_reason
