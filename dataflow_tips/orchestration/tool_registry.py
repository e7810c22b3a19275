"""Tool-provider registry.

Turns the configured provider connections into live, initialized MCP
sessions for exactly one orchestration call and closes them again at the
end of that call. Nothing is cached between calls: the configuration is
re-read on every ``acquire`` and every handle belongs to a single request.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, Iterator, List, Optional

from ..config import McpClientSettings, McpConnection, load_settings
from ..errors import AcquisitionError, ReleaseError
from ..mcp import McpToolDefinition, McpToolResult, SseClientTransport
from ..observability import ComponentLogger
from .toolbox import Capability, Toolbox, exposed_tool_name

logger = ComponentLogger("registry")

TransportFactory = Callable[[str, McpConnection, McpClientSettings], SseClientTransport]
SettingsProvider = Callable[[], McpClientSettings]


async def _run_to_completion(coroutine: Awaitable[None]) -> None:
    """Await ``coroutine`` to the end even when the calling task is cancelled.
    
    The cleanup runs in its own task; cancellations delivered to the caller
    meanwhile are held back and the last one is re-raised once the cleanup
    finished.
    """
    task = asyncio.ensure_future(coroutine)
    cancelled: Optional[BaseException] = None
    while not task.done():
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError as e:
            cancelled = e
    if cancelled is not None:
        raise cancelled
    task.result()


def default_transport_factory(
    name: str,
    connection: McpConnection,
    settings: McpClientSettings
) -> SseClientTransport:
    """Build the SSE transport for one configured provider."""
    return SseClientTransport(
        name=name,
        url=connection.url,
        sse_endpoint=connection.resolved_sse_endpoint(),
        timeout=settings.timeout_for(connection),
        client_info={"name": f"{settings.name} - {name}", "version": settings.version},
    )


def _load_mcp_settings() -> McpClientSettings:
    return load_settings().mcp


class ToolProviderHandle:
    """A live session with one provider and the tools it advertised."""
    
    def __init__(self, name: str, transport: SseClientTransport, tools: List[McpToolDefinition]):
        self.name = name
        self.transport = transport
        self.tools = tools
    
    async def call_tool(self, tool_name: str, arguments: Dict) -> McpToolResult:
        return await self.transport.call_tool(tool_name, arguments)
    
    async def close(self) -> None:
        await self.transport.close()
    
    def capabilities(self) -> List[Capability]:
        def invoker_for(tool_name: str):
            return lambda arguments: self.call_tool(tool_name, arguments)
        
        return [
            Capability(
                name=exposed_tool_name(self.name, tool.name),
                provider=self.name,
                tool_name=tool.name,
                description=tool.description,
                input_schema=tool.input_schema,
                invoker=invoker_for(tool.name),
            )
            for tool in self.tools
        ]


class ToolProviderSet:
    """The handles acquired for one request, in configuration order."""
    
    def __init__(self, handles: Optional[List[ToolProviderHandle]] = None):
        self._handles: Dict[str, ToolProviderHandle] = {h.name: h for h in handles or []}
        self.released = False
    
    @property
    def names(self) -> List[str]:
        return list(self._handles)
    
    def __iter__(self) -> Iterator[ToolProviderHandle]:
        return iter(list(self._handles.values()))
    
    def __len__(self) -> int:
        return len(self._handles)
    
    def __getitem__(self, name: str) -> ToolProviderHandle:
        return self._handles[name]
    
    def toolbox(self) -> Toolbox:
        """Flatten the capabilities of every handle into one toolbox."""
        toolbox = Toolbox()
        for handle in self:
            for capability in handle.capabilities():
                toolbox.add(capability)
        return toolbox


class ToolProviderRegistry:
    """Acquires and releases per-request tool-provider sets.
    
    Args:
        settings_provider: Returns the current client settings; called on
            every acquire so configuration changes apply to the next request
        transport_factory: Builds the transport for one provider
    """
    
    def __init__(
        self,
        settings_provider: Optional[SettingsProvider] = None,
        transport_factory: Optional[TransportFactory] = None
    ):
        self._settings_provider = settings_provider or _load_mcp_settings
        self._transport_factory = transport_factory or default_transport_factory
    
    async def acquire(
        self,
        settings: Optional[McpClientSettings] = None,
        request_id: Optional[str] = None
    ) -> ToolProviderSet:
        """Connect to every configured provider and discover its tools.
        
        Providers are initialized concurrently; the call returns once every
        one of them has connected or failed.
        
        Args:
            settings: Client settings to use instead of the settings provider
            request_id: Correlation id for the log records
            
        Returns:
            The acquired set; empty when no provider is configured
            
        Raises:
            AcquisitionError: Under ``fail_fast`` when any provider fails, under
                ``partial`` when every configured provider fails
        """
        settings = settings or self._settings_provider()
        connections = settings.connections
        names = list(connections)
        
        with logger.track_request("acquire", request_id=request_id, providers=len(names)):
            results = await asyncio.gather(
                *(self._open(name, connections[name], settings, request_id) for name in names),
                return_exceptions=True
            )
            
            handles: List[ToolProviderHandle] = []
            failures: List[BaseException] = []
            for result in results:
                if isinstance(result, ToolProviderHandle):
                    handles.append(result)
                else:
                    failures.append(result)
            
            fatal = [f for f in failures if not isinstance(f, Exception)]
            if fatal or (failures and (settings.acquisition_policy == "fail_fast" or not handles)):
                await _run_to_completion(self._close_all(handles, request_id))
                raise (fatal or failures)[0]
            
            for failure in failures:
                logger.warning(
                    "Skipping tool provider",
                    request_id=request_id,
                    provider=getattr(failure, "provider_name", None),
                    error_msg=str(failure)
                )
            return ToolProviderSet(handles)
    
    async def release(self, provider_set: ToolProviderSet, request_id: Optional[str] = None) -> None:
        """Close every handle of ``provider_set``.
        
        Each close is attempted even when another fails. Failures are
        logged as ``ReleaseError`` and never raised.
        """
        if provider_set.released:
            logger.warning("Tool provider set already released", request_id=request_id)
            return
        provider_set.released = True
        await self._close_all(list(provider_set), request_id)
    
    @asynccontextmanager
    async def session(
        self,
        settings: Optional[McpClientSettings] = None,
        request_id: Optional[str] = None
    ) -> AsyncIterator[ToolProviderSet]:
        """Acquire a set and release it on every exit path.
        
        The release is not interrupted by cancellation of the consumer.
        """
        provider_set = await self.acquire(settings, request_id)
        try:
            yield provider_set
        finally:
            await _run_to_completion(self.release(provider_set, request_id))
    
    async def _open(
        self,
        name: str,
        connection: McpConnection,
        settings: McpClientSettings,
        request_id: Optional[str]
    ) -> ToolProviderHandle:
        timeout = settings.timeout_for(connection)
        transport = self._transport_factory(name, connection, settings)
        try:
            tools = await asyncio.wait_for(self._initialize(transport), timeout=timeout)
        except asyncio.TimeoutError as e:
            error = AcquisitionError(
                f"Timed out after {timeout}s connecting to tool provider '{name}' at {connection.url}",
                provider_name=name,
                cause=e
            )
        except Exception as e:
            error = AcquisitionError(
                f"Failed to initialize tool provider '{name}' at {connection.url}: {e}",
                provider_name=name,
                cause=e
            )
        except BaseException:
            await _run_to_completion(self._discard(transport, name, request_id))
            raise
        else:
            logger.info(
                "Acquired tool provider",
                request_id=request_id,
                provider=name,
                tools=len(tools)
            )
            return ToolProviderHandle(name, transport, tools)
        
        logger.error(error.message, request_id=request_id, provider=name, error=error.cause)
        await self._discard(transport, name, request_id)
        raise error from error.cause
    
    @staticmethod
    async def _initialize(transport: SseClientTransport) -> List[McpToolDefinition]:
        await transport.connect()
        return await transport.list_tools()
    
    async def _discard(self, transport: SseClientTransport, name: str, request_id: Optional[str]) -> None:
        try:
            await transport.close()
        except Exception as e:
            logger.warning(
                "Failed to close transport after failed initialization",
                request_id=request_id,
                provider=name,
                error_msg=str(e)
            )
    
    async def _close_all(self, handles: List[ToolProviderHandle], request_id: Optional[str]) -> None:
        results = await asyncio.gather(*(h.close() for h in handles), return_exceptions=True)
        for handle, result in zip(handles, results):
            if isinstance(result, Exception):
                error = ReleaseError(
                    f"Failed to close tool provider '{handle.name}': {result}",
                    provider_name=handle.name,
                    cause=result
                )
                logger.error(error.message, request_id=request_id, provider=handle.name, error=result)
            else:
                logger.debug("Released tool provider", request_id=request_id, provider=handle.name)
