"""Tests for per-request tool-provider acquisition and release."""

import logging

import pytest

from dataflow_tips.config import McpClientSettings, McpConnection
from dataflow_tips.errors import AcquisitionError
from dataflow_tips.mcp import McpConnectionError, SseClientTransport
from dataflow_tips.orchestration import ToolProviderRegistry, ToolProviderSet, default_transport_factory
from tests.helpers.fakes import FakeTransportFactory


def two_provider_settings(policy="fail_fast"):
    return McpClientSettings(
        request_timeout=0.2,
        acquisition_policy=policy,
        connections={
            "pipeline-tools": McpConnection(url="http://tools.test"),
            "knowledge": McpConnection(url="http://knowledge.test", request_timeout=0.1),
        },
    )


class TestDefaultTransportFactory:
    
    def test_defaults_sse_endpoint_and_timeout(self):
        settings = McpClientSettings(name="agent", version="2.0.0", request_timeout=7)
        
        transport = default_transport_factory("pipeline-tools", McpConnection(url="http://tools.test/"), settings)
        
        assert isinstance(transport, SseClientTransport)
        assert transport.name == "pipeline-tools"
        assert transport._url == "http://tools.test"
        assert transport._sse_endpoint == "/sse"
        assert transport._timeout == 7
        assert transport._client_info == {"name": "agent - pipeline-tools", "version": "2.0.0"}
    
    def test_connection_overrides(self):
        connection = McpConnection(url="http://tools.test", sse_endpoint="/events", request_timeout=3)
        
        transport = default_transport_factory("tools", connection, McpClientSettings())
        
        assert transport._sse_endpoint == "/events"
        assert transport._timeout == 3


class TestAcquire:
    
    @pytest.mark.asyncio
    async def test_acquires_every_configured_provider(self, job_tools):
        factory = FakeTransportFactory({
            "pipeline-tools": {"tools": job_tools},
            "knowledge": {"tools": job_tools[:1]},
        })
        registry = ToolProviderRegistry(transport_factory=factory)
        
        provider_set = await registry.acquire(two_provider_settings())
        
        assert provider_set.names == ["pipeline-tools", "knowledge"]
        assert len(provider_set) == 2
        assert provider_set["knowledge"].tools == job_tools[:1]
        assert [t.timeout for t in factory.created] == [0.2, 0.1]
        assert all(t.close_calls == 0 for t in factory.created)
    
    @pytest.mark.asyncio
    async def test_empty_configuration_yields_empty_set(self):
        registry = ToolProviderRegistry(transport_factory=FakeTransportFactory({}))
        
        provider_set = await registry.acquire(McpClientSettings())
        
        assert len(provider_set) == 0
        assert len(provider_set.toolbox()) == 0
    
    @pytest.mark.asyncio
    async def test_reads_settings_on_every_acquire(self, mcp_settings, transport_factory):
        calls = []
        
        def settings_provider():
            calls.append(1)
            return mcp_settings
        
        registry = ToolProviderRegistry(settings_provider=settings_provider, transport_factory=transport_factory)
        
        await registry.release(await registry.acquire())
        await registry.release(await registry.acquire())
        
        assert len(calls) == 2
    
    @pytest.mark.asyncio
    async def test_fail_fast_closes_acquired_handles(self, job_tools):
        factory = FakeTransportFactory({
            "pipeline-tools": {"tools": job_tools},
            "knowledge": {"connect_error": McpConnectionError("Cannot reach MCP server 'knowledge'")},
        })
        registry = ToolProviderRegistry(transport_factory=factory)
        
        with pytest.raises(AcquisitionError) as exc_info:
            await registry.acquire(two_provider_settings())
        
        assert exc_info.value.provider_name == "knowledge"
        assert "knowledge" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, McpConnectionError)
        assert factory.by_name("pipeline-tools")[0].close_calls == 1
        assert factory.by_name("knowledge")[0].close_calls == 1
    
    @pytest.mark.asyncio
    async def test_timeout_is_acquisition_failure(self, job_tools):
        factory = FakeTransportFactory({
            "pipeline-tools": {"tools": job_tools},
            "knowledge": {"connect_delay": 5},
        })
        registry = ToolProviderRegistry(transport_factory=factory)
        
        with pytest.raises(AcquisitionError) as exc_info:
            await registry.acquire(two_provider_settings())
        
        assert "Timed out" in exc_info.value.message
        assert "'knowledge'" in exc_info.value.message
    
    @pytest.mark.asyncio
    async def test_partial_policy_skips_failed_provider(self, job_tools, caplog):
        factory = FakeTransportFactory({
            "pipeline-tools": {"tools": job_tools},
            "knowledge": {"connect_error": McpConnectionError("down")},
        })
        registry = ToolProviderRegistry(transport_factory=factory)
        
        with caplog.at_level(logging.WARNING):
            provider_set = await registry.acquire(two_provider_settings("partial"))
        
        assert provider_set.names == ["pipeline-tools"]
        assert factory.by_name("knowledge")[0].close_calls == 1
        assert "Skipping tool provider" in caplog.text
    
    @pytest.mark.asyncio
    async def test_partial_policy_fails_when_nothing_connects(self):
        factory = FakeTransportFactory({
            "pipeline-tools": {"connect_error": McpConnectionError("down")},
            "knowledge": {"connect_error": McpConnectionError("down")},
        })
        registry = ToolProviderRegistry(transport_factory=factory)
        
        with pytest.raises(AcquisitionError):
            await registry.acquire(two_provider_settings("partial"))


class TestRelease:
    
    @pytest.mark.asyncio
    async def test_release_closes_every_handle_despite_failures(self, job_tools, caplog):
        factory = FakeTransportFactory({
            "pipeline-tools": {"tools": job_tools, "close_error": OSError("broken pipe")},
            "knowledge": {"tools": job_tools},
        })
        registry = ToolProviderRegistry(transport_factory=factory)
        provider_set = await registry.acquire(two_provider_settings())
        
        with caplog.at_level(logging.ERROR):
            await registry.release(provider_set)
        
        assert [t.close_calls for t in factory.created] == [1, 1]
        assert provider_set.released is True
        assert "Failed to close tool provider 'pipeline-tools'" in caplog.text
    
    @pytest.mark.asyncio
    async def test_second_release_is_ignored(self, mcp_settings, transport_factory):
        registry = ToolProviderRegistry(transport_factory=transport_factory)
        provider_set = await registry.acquire(mcp_settings)
        
        await registry.release(provider_set)
        await registry.release(provider_set)
        
        assert transport_factory.created[0].close_calls == 1
    
    @pytest.mark.asyncio
    async def test_session_releases_when_body_raises(self, mcp_settings, transport_factory):
        registry = ToolProviderRegistry(transport_factory=transport_factory)
        
        with pytest.raises(ValueError):
            async with registry.session(mcp_settings) as provider_set:
                assert len(provider_set) == 1
                raise ValueError("boom")
        
        assert transport_factory.created[0].close_calls == 1
    
    @pytest.mark.asyncio
    async def test_release_empty_set(self):
        registry = ToolProviderRegistry(transport_factory=FakeTransportFactory({}))
        provider_set = ToolProviderSet()
        
        await registry.release(provider_set)
        
        assert provider_set.released is True


class TestToolboxFromHandles:
    
    @pytest.mark.asyncio
    async def test_capabilities_are_prefixed_with_provider(self, mcp_settings, transport_factory):
        registry = ToolProviderRegistry(transport_factory=transport_factory)
        
        async with registry.session(mcp_settings) as provider_set:
            toolbox = provider_set.toolbox()
            names = [c.name for c in toolbox.list()]
            capability = toolbox.get("pipeline-tools_Job_Details")
            result = await toolbox.invoke(
                "pipeline-tools_Job_List_For_Project", {"project_id": "my-project"}
            )
        
        assert names == ["pipeline-tools_Job_Details", "pipeline-tools_Job_List_For_Project"]
        assert capability.provider == "pipeline-tools"
        assert capability.tool_name == "Job Details"
        assert result == "Job List For Project result"
