"""MCP client transport over Server-Sent Events.

Implements the HTTP+SSE transport used by the pipeline tool providers:

    GET  {url}{sse_endpoint}   long-lived event stream; the first ``endpoint``
                               event carries the URL to post messages to
    POST {endpoint}            JSON-RPC requests and notifications; responses
                               come back as ``message`` events on the stream

Usage:
    transport = SseClientTransport("pipeline-tools", "http://tools:8080", timeout=20.0)
    await transport.connect()
    try:
        tools = await transport.list_tools()
        result = await transport.call_tool("Job Details", {"projectId": "p", ...})
    finally:
        await transport.close()
"""

import asyncio
import json
import logging
from contextlib import AsyncExitStack
from typing import Any, Dict, List, Optional

import httpx

from ..config.constants import (
    DEFAULT_CLIENT_NAME,
    DEFAULT_CLIENT_VERSION,
    DEFAULT_SSE_ENDPOINT,
    MCP_PROTOCOL_VERSION,
)
from .models import (
    McpServerInfo,
    McpToolDefinition,
    McpToolResult,
    jsonrpc_notification,
    jsonrpc_request,
)

logger = logging.getLogger(__name__)


class McpTransportError(Exception):
    """Base exception for MCP transport errors."""
    
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class McpConnectionError(McpTransportError):
    """Error establishing or maintaining the connection to an MCP server."""
    pass


class McpProtocolError(McpTransportError):
    """Error in MCP protocol communication (error responses, malformed events)."""
    pass


class McpTimeoutError(McpTransportError):
    """Timeout waiting for an MCP server response."""
    pass


class SseClientTransport:
    """MCP client session bound to one remote tool provider."""
    
    def __init__(
        self,
        name: str,
        url: str,
        sse_endpoint: str = DEFAULT_SSE_ENDPOINT,
        timeout: float = 20.0,
        client_info: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the transport; nothing is opened until :meth:`connect`.
        
        Args:
            name: Provider name, used in diagnostics
            url: Base endpoint of the provider
            sse_endpoint: Sub-path of the event stream
            timeout: Per-request timeout in seconds
            client_info: ``{"name", "version"}`` announced during initialize
            headers: Extra HTTP headers (e.g. authentication)
            transport: Custom httpx transport (tests)
        """
        self.name = name
        self._url = url.rstrip("/")
        self._sse_endpoint = sse_endpoint or DEFAULT_SSE_ENDPOINT
        self._timeout = timeout
        self._client_info = client_info or {
            "name": DEFAULT_CLIENT_NAME,
            "version": DEFAULT_CLIENT_VERSION,
        }
        self._headers = headers or {}
        self._transport = transport
        
        self._exit_stack: Optional[AsyncExitStack] = None
        self._client: Optional[httpx.AsyncClient] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._endpoint: Optional[asyncio.Future] = None
        self._pending: Dict[int, asyncio.Future] = {}
        self._request_id = 0
        self._server_info: Optional[McpServerInfo] = None
    
    @property
    def is_connected(self) -> bool:
        return self._server_info is not None and self._client is not None
    
    @property
    def server_info(self) -> Optional[McpServerInfo]:
        return self._server_info
    
    async def connect(self) -> McpServerInfo:
        """Open the event stream and perform the ``initialize`` handshake.
        
        Raises:
            McpConnectionError: If the stream cannot be opened
            McpProtocolError: If the handshake is rejected
            McpTimeoutError: If the server does not answer in time
        """
        if self._server_info is not None:
            return self._server_info
        
        logger.info(f"Connecting to MCP server '{self.name}' at {self._url}{self._sse_endpoint}")
        try:
            await self._open_stream()
            endpoint = await self._wait(self._endpoint, "endpoint event")
            logger.debug(f"MCP server '{self.name}' message endpoint: {endpoint}")
            
            result = await self._request(
                "initialize",
                {
                    "protocolVersion": MCP_PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": self._client_info,
                },
            )
            await self._notify("notifications/initialized")
        except BaseException:
            await self.close()
            raise
        
        self._server_info = McpServerInfo.from_initialize_result(result)
        logger.info(
            f"Connected to MCP server '{self.name}': "
            f"{self._server_info.name} {self._server_info.version}"
        )
        return self._server_info
    
    async def list_tools(self) -> List[McpToolDefinition]:
        """Discover the provider's capabilities, following pagination cursors."""
        tools: List[McpToolDefinition] = []
        cursor: Optional[str] = None
        while True:
            result = await self._request("tools/list", {"cursor": cursor} if cursor else {})
            tools.extend(McpToolDefinition.model_validate(t) for t in result.get("tools", []))
            cursor = result.get("nextCursor")
            if not cursor:
                return tools
    
    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> McpToolResult:
        """Invoke one capability on the provider."""
        result = await self._request("tools/call", {"name": name, "arguments": arguments})
        return McpToolResult.model_validate(result)
    
    async def close(self) -> None:
        """Stop the event reader and close the HTTP client.
        
        A cancellation of the caller is not absorbed while waiting for the reader.
        """
        reader, self._reader_task = self._reader_task, None
        exit_stack, self._exit_stack = self._exit_stack, None
        self._client = None
        self._server_info = None
        self._fail_pending(McpConnectionError(f"Connection to '{self.name}' closed"))
        
        try:
            if reader is not None and not reader.done():
                reader.cancel()
                await asyncio.wait([reader])
        finally:
            if exit_stack is not None:
                await exit_stack.aclose()
    
    async def _open_stream(self) -> None:
        self._exit_stack = AsyncExitStack()
        self._client = await self._exit_stack.enter_async_context(
            httpx.AsyncClient(
                base_url=self._url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        )
        try:
            response = await self._exit_stack.enter_async_context(
                self._client.stream(
                    "GET",
                    self._sse_endpoint,
                    headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
                    timeout=httpx.Timeout(self._timeout, read=None),
                )
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise McpConnectionError(
                f"MCP server '{self.name}' rejected the event stream: HTTP {e.response.status_code}", e
            ) from e
        except httpx.TimeoutException as e:
            raise McpTimeoutError(f"Timed out opening the event stream of '{self.name}'", e) from e
        except httpx.RequestError as e:
            raise McpConnectionError(f"Cannot reach MCP server '{self.name}': {e}", e) from e
        
        self._endpoint = asyncio.get_running_loop().create_future()
        self._reader_task = asyncio.create_task(self._read_events(response))
    
    async def _read_events(self, response: httpx.Response) -> None:
        """Parse the event stream and route events until it ends."""
        event_type = "message"
        data_lines: List[str] = []
        try:
            async for line in response.aiter_lines():
                if not line:
                    if data_lines:
                        self._dispatch(event_type, "\n".join(data_lines))
                    event_type, data_lines = "message", []
                    continue
                if line.startswith(":"):
                    continue
                field, _, value = line.partition(":")
                if value.startswith(" "):
                    value = value[1:]
                if field == "event":
                    event_type = value
                elif field == "data":
                    data_lines.append(value)
            error: McpTransportError = McpConnectionError(f"Event stream of '{self.name}' ended")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Event stream of '{self.name}' failed: {e!r}")
            error = McpConnectionError(f"Event stream of '{self.name}' failed: {e}", e)
        self._fail_pending(error)
    
    def _dispatch(self, event_type: str, data: str) -> None:
        if event_type == "endpoint":
            if self._endpoint is not None and not self._endpoint.done():
                self._endpoint.set_result(str(httpx.URL(self._url).join(data)))
            return
        if event_type != "message":
            logger.debug(f"Ignoring '{event_type}' event from '{self.name}'")
            return
        
        try:
            message = json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"Discarding malformed message from '{self.name}': {data[:200]}")
            return
        
        if not isinstance(message, dict):
            logger.warning(f"Discarding non-object message from '{self.name}': {data[:200]}")
            return
        
        request_id = message.get("id")
        if "method" not in message and request_id in self._pending:
            future = self._pending.pop(request_id)
            if not future.done():
                future.set_result(message)
        else:
            logger.debug(f"Unhandled message from '{self.name}': {message.get('method', '<response>')}")
    
    def _fail_pending(self, error: McpTransportError) -> None:
        if self._endpoint is not None and not self._endpoint.done():
            self._endpoint.set_exception(error)
            # Retrieved here so an unawaited endpoint future does not warn
            self._endpoint.exception()
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()
    
    async def _wait(self, future: Optional[asyncio.Future], what: str) -> Any:
        if future is None:
            raise McpConnectionError(f"Not connected to MCP server '{self.name}'")
        try:
            return await asyncio.wait_for(future, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise McpTimeoutError(
                f"Timed out after {self._timeout}s waiting for {what} from '{self.name}'", e
            ) from e
    
    async def _post(self, payload: Dict[str, Any]) -> None:
        if self._client is None or self._endpoint is None or not self._endpoint.done():
            raise McpConnectionError(f"Not connected to MCP server '{self.name}'")
        try:
            response = await self._client.post(self._endpoint.result(), json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise McpTimeoutError(f"Request to '{self.name}' timed out after {self._timeout}s", e) from e
        except httpx.HTTPStatusError as e:
            raise McpProtocolError(
                f"HTTP error {e.response.status_code} from '{self.name}': {e.response.text}", e
            ) from e
        except httpx.RequestError as e:
            raise McpConnectionError(f"Connection error with '{self.name}': {e}", e) from e
    
    async def _request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self._request_id += 1
        request_id = self._request_id
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        
        logger.debug(f"Sending MCP request to '{self.name}': {method}")
        try:
            await self._post(jsonrpc_request(request_id, method, params))
            message = await self._wait(future, method)
        finally:
            self._pending.pop(request_id, None)
        
        error = message.get("error")
        if error:
            if isinstance(error, dict):
                detail = f"{error.get('code', 'unknown')}: {error.get('message', 'Unknown error')}"
            else:
                detail = str(error)
            raise McpProtocolError(f"MCP error from '{self.name}' on {method}: {detail}")
        return message.get("result") or {}
    
    async def _notify(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        await self._post(jsonrpc_notification(method, params))
