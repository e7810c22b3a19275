"""MCP tool server over the HTTP+SSE transport.

``McpToolServer`` answers the JSON-RPC side of the protocol for a set of
registered tools; ``create_tool_app`` exposes it as a FastAPI application:

    GET  /sse                      event stream, first event is ``endpoint``
    POST /messages?session_id=...  JSON-RPC message for that session (202)
"""

import asyncio
import inspect
import json
import uuid
from typing import Any, Callable, Dict, List, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, Response
from fastapi.responses import StreamingResponse
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaValidationError
from pydantic import BaseModel, Field

from ..config.constants import MCP_PROTOCOL_VERSION
from ..errors import AgentError
from ..observability import ComponentLogger
from .models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    McpContent,
    McpToolResult,
    jsonrpc_error,
    jsonrpc_result,
)

logger = ComponentLogger("mcp.server")


class ToolDefinition(BaseModel):
    """A tool served over MCP; ``handler`` receives the arguments as keywords."""
    
    name: str
    description: str
    parameters: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    handler: Callable
    
    def to_mcp(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters,
        }


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


class McpToolServer:
    """JSON-RPC dispatcher for a named set of tools."""
    
    def __init__(self, name: str, version: str):
        self.name = name
        self.version = version
        self._tools: Dict[str, ToolDefinition] = {}
    
    def register(self, tool: ToolDefinition) -> None:
        """Register a tool.
        
        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool '{tool.name}'", server=self.name)
    
    def list_tools(self) -> List[ToolDefinition]:
        return list(self._tools.values())
    
    async def handle_message(self, message: Any) -> Optional[Dict[str, Any]]:
        """Handle one JSON-RPC message; returns the response, None for notifications."""
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            request_id = message.get("id") if isinstance(message, dict) else None
            return jsonrpc_error(request_id, INVALID_REQUEST, "Invalid request")
        
        method = message["method"]
        if "id" not in message:
            logger.debug(f"Received notification {method}", server=self.name)
            return None
        
        request_id = message["id"]
        params = message.get("params") or {}
        
        if method == "initialize":
            return jsonrpc_result(request_id, {
                "protocolVersion": params.get("protocolVersion") or MCP_PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": False}},
                "serverInfo": {"name": self.name, "version": self.version},
            })
        if method == "ping":
            return jsonrpc_result(request_id, {})
        if method == "tools/list":
            return jsonrpc_result(request_id, {"tools": [t.to_mcp() for t in self._tools.values()]})
        if method == "tools/call":
            return await self._call_tool(request_id, params)
        
        return jsonrpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")
    
    async def _call_tool(self, request_id: Any, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        tool = self._tools.get(name)
        if tool is None:
            return jsonrpc_error(request_id, INVALID_PARAMS, f"Unknown tool: {name}")
        
        arguments = params.get("arguments") or {}
        try:
            Draft202012Validator(tool.parameters).validate(arguments)
        except SchemaValidationError as e:
            return jsonrpc_error(
                request_id, INVALID_PARAMS, f"Invalid arguments for tool '{name}': {e.message}"
            )
        
        try:
            if inspect.iscoroutinefunction(tool.handler):
                value = await tool.handler(**arguments)
            else:
                value = await asyncio.to_thread(tool.handler, **arguments)
        except AgentError as e:
            result = McpToolResult(content=[McpContent(text=e.message)], is_error=True)
            return jsonrpc_result(request_id, result.to_dict())
        except Exception as e:
            logger.error(f"Tool '{name}' failed unexpectedly", error=e, exc_info=True, server=self.name)
            return jsonrpc_error(request_id, INTERNAL_ERROR, f"Tool '{name}' failed: {e}")
        
        result = McpToolResult(content=[McpContent(text=_to_text(value))])
        return jsonrpc_result(request_id, result.to_dict())


def _sse_event(event: str, data: str) -> str:
    lines = "".join(f"data: {line}\n" for line in data.splitlines() or [""])
    return f"event: {event}\n{lines}\n"


def create_tool_app(server: McpToolServer) -> FastAPI:
    """Expose ``server`` over the MCP SSE transport."""
    app = FastAPI(title=server.name, version=server.version)
    app.state.mcp_server = server
    app.state.sessions = {}
    
    @app.get("/sse")
    async def sse(request: Request):
        session_id = uuid.uuid4().hex
        queue: asyncio.Queue = asyncio.Queue()
        app.state.sessions[session_id] = queue
        endpoint = f"{request.scope.get('root_path', '')}/messages?session_id={session_id}"
        logger.info("Opened session", session_id=session_id, server=server.name)
        
        async def event_stream():
            try:
                yield _sse_event("endpoint", endpoint)
                while True:
                    message = await queue.get()
                    yield _sse_event("message", json.dumps(message))
            finally:
                app.state.sessions.pop(session_id, None)
                logger.info("Closed session", session_id=session_id, server=server.name)
        
        return StreamingResponse(
            event_stream(),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"}
        )
    
    @app.post("/messages")
    async def messages(session_id: str, request: Request, background_tasks: BackgroundTasks):
        queue = app.state.sessions.get(session_id)
        if queue is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON")
        
        async def respond():
            response = await server.handle_message(payload)
            if response is not None:
                await queue.put(response)
        
        background_tasks.add_task(respond)
        return Response(status_code=202)
    
    return app
