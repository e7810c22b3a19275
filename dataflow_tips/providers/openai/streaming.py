from typing import Any, AsyncGenerator, Dict

from ..base import StreamRound, ToolCall


async def stream_chat_completions(
    client: Any,
    payload: Dict[str, Any],
    state: StreamRound,
) -> AsyncGenerator[str, None]:
    """Stream one Chat Completions turn, accumulating tool-call fragments in ``state``.

    The HTTP response is closed when the turn ends or the consumer stops early.
    """
    calls: Dict[int, ToolCall] = {}
    async with await client.chat.completions.create(**payload) as stream:
        async for chunk in stream:
            if not chunk.choices:
                continue
            choice = chunk.choices[0]
            delta = choice.delta

            content = getattr(delta, "content", None)
            if content:
                state.text += content
                yield content

            for fragment in getattr(delta, "tool_calls", None) or []:
                call = calls.get(fragment.index)
                if call is None:
                    call = calls[fragment.index] = ToolCall(id="", name="")
                if fragment.id:
                    call.id = fragment.id
                function = fragment.function
                if function is not None:
                    if function.name:
                        call.name += function.name
                    if function.arguments:
                        call.arguments += function.arguments

            if choice.finish_reason:
                state.stop_reason = choice.finish_reason

    state.tool_calls = [calls[index] for index in sorted(calls)]
