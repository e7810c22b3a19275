"""Tests for the MCP SSE client transport."""

import asyncio

import pytest

from dataflow_tips.mcp import (
    McpConnectionError,
    McpProtocolError,
    McpTimeoutError,
    SseClientTransport,
)
from tests.helpers.sse_server import FakeSseServer

TOOLS = [
    {
        "name": "Job Details",
        "description": "Get Dataflow's job detailed information.",
        "inputSchema": {"type": "object", "properties": {"job_id": {"type": "string"}}},
    },
    {"name": "IO Categories", "description": "Known IO categories."},
    {"name": "Job metrics", "description": "Job metrics.", "inputSchema": {"type": "object"}},
]


def make_transport(server, timeout=1.0, **kwargs):
    return SseClientTransport(
        name="pipeline-tools",
        url="http://tools.test",
        timeout=timeout,
        client_info={"name": "agent - pipeline-tools", "version": "1.0.0"},
        transport=server.transport(),
        **kwargs
    )


class TestConnect:
    
    @pytest.mark.asyncio
    async def test_handshake(self):
        server = FakeSseServer(tools=TOOLS)
        transport = make_transport(server)
        
        info = await transport.connect()
        try:
            assert info.name == "fake-tools"
            assert info.version == "1.2.3"
            assert info.protocol_version == "2024-11-05"
            assert transport.is_connected
            
            initialize, initialized = server.received
            assert initialize["method"] == "initialize"
            assert initialize["params"]["clientInfo"] == {"name": "agent - pipeline-tools", "version": "1.0.0"}
            assert initialized == {"jsonrpc": "2.0", "method": "notifications/initialized"}
            assert server.sse_requests[0].headers["accept"] == "text/event-stream"
        finally:
            await transport.close()
        
        assert not transport.is_connected
    
    @pytest.mark.asyncio
    async def test_custom_sse_endpoint(self):
        server = FakeSseServer()
        transport = make_transport(server, sse_endpoint="/events")
        
        with pytest.raises(McpConnectionError, match="HTTP 404"):
            await transport.connect()
    
    @pytest.mark.asyncio
    async def test_rejected_stream(self):
        server = FakeSseServer(sse_status=503)
        transport = make_transport(server)
        
        with pytest.raises(McpConnectionError, match="rejected the event stream"):
            await transport.connect()
        
        assert not transport.is_connected
    
    @pytest.mark.asyncio
    async def test_initialize_error(self):
        server = FakeSseServer(errors={"initialize": {"code": -32600, "message": "unsupported version"}})
        transport = make_transport(server)
        
        with pytest.raises(McpProtocolError, match="unsupported version"):
            await transport.connect()
    
    @pytest.mark.asyncio
    async def test_initialize_timeout(self):
        server = FakeSseServer(silent_methods={"initialize"})
        transport = make_transport(server, timeout=0.1)
        
        with pytest.raises(McpTimeoutError, match="initialize"):
            await transport.connect()


class TestRequests:
    
    @pytest.mark.asyncio
    async def test_list_tools_follows_cursors(self):
        server = FakeSseServer(tools=TOOLS, page_size=2)
        transport = make_transport(server)
        await transport.connect()
        try:
            tools = await transport.list_tools()
        finally:
            await transport.close()
        
        assert [t.name for t in tools] == ["Job Details", "IO Categories", "Job metrics"]
        assert tools[0].input_schema["properties"]["job_id"] == {"type": "string"}
        assert tools[1].input_schema == {"type": "object", "properties": {}}
        list_requests = [m for m in server.received if m.get("method") == "tools/list"]
        assert [m["params"] for m in list_requests] == [{}, {"cursor": "2"}]
    
    @pytest.mark.asyncio
    async def test_call_tool(self):
        server = FakeSseServer(tools=TOOLS)
        transport = make_transport(server)
        await transport.connect()
        try:
            result = await transport.call_tool("Job Details", {"job_id": "j1"})
        finally:
            await transport.close()
        
        assert result.is_error is False
        assert result.text() == 'Job Details:{"job_id": "j1"}'
    
    @pytest.mark.asyncio
    async def test_concurrent_requests_are_correlated_by_id(self):
        server = FakeSseServer(tools=TOOLS)
        transport = make_transport(server)
        await transport.connect()
        try:
            results = await asyncio.gather(*(
                transport.call_tool("Job Details", {"job_id": f"j{i}"}) for i in range(5)
            ))
        finally:
            await transport.close()
        
        assert [r.text() for r in results] == [f'Job Details:{{"job_id": "j{i}"}}' for i in range(5)]
    
    @pytest.mark.asyncio
    async def test_call_timeout(self):
        server = FakeSseServer(tools=TOOLS, silent_methods={"tools/call"})
        transport = make_transport(server, timeout=0.1)
        await transport.connect()
        try:
            with pytest.raises(McpTimeoutError, match="tools/call"):
                await transport.call_tool("Job Details", {"job_id": "j1"})
        finally:
            await transport.close()
    
    @pytest.mark.asyncio
    async def test_stream_end_fails_pending_requests(self):
        server = FakeSseServer(tools=TOOLS, silent_methods={"tools/call"})
        transport = make_transport(server, timeout=5)
        await transport.connect()
        try:
            call = asyncio.create_task(transport.call_tool("Job Details", {"job_id": "j1"}))
            await asyncio.sleep(0.05)
            server.end_stream()
            with pytest.raises(McpConnectionError, match="ended"):
                await call
        finally:
            await transport.close()
    
    @pytest.mark.asyncio
    async def test_requests_after_close_fail(self):
        server = FakeSseServer(tools=TOOLS)
        transport = make_transport(server)
        await transport.connect()
        await transport.close()
        
        with pytest.raises(McpConnectionError, match="Not connected"):
            await transport.list_tools()
    
    @pytest.mark.asyncio
    async def test_non_object_messages_are_skipped(self):
        server = FakeSseServer(tools=TOOLS)
        transport = make_transport(server)
        await transport.connect()
        try:
            server.push([1, 2])
            server.push("hello")
            result = await transport.call_tool("Job Details", {"job_id": "j1"})
        finally:
            await transport.close()
        
        assert result.text() == 'Job Details:{"job_id": "j1"}'


class TestClose:
    
    @pytest.mark.asyncio
    async def test_close_propagates_caller_cancellation(self):
        transport = make_transport(FakeSseServer())
        reader_cancelled = asyncio.Event()
        finish_reader = asyncio.Event()
        
        async def slow_reader():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                reader_cancelled.set()
                await finish_reader.wait()
        
        reader = asyncio.create_task(slow_reader())
        await asyncio.sleep(0)
        transport._reader_task = reader
        
        closing = asyncio.create_task(transport.close())
        await reader_cancelled.wait()
        closing.cancel()
        
        with pytest.raises(asyncio.CancelledError):
            await closing
        assert closing.cancelled()
        
        finish_reader.set()
        await reader
    
    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        server = FakeSseServer(tools=TOOLS)
        transport = make_transport(server)
        await transport.connect()
        
        await transport.close()
        await transport.close()
        
        assert not transport.is_connected
