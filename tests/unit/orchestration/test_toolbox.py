"""Tests for the capability registry used during generation."""

import logging
from unittest.mock import AsyncMock

import pytest

from dataflow_tips.errors import ToolInvocationError
from dataflow_tips.mcp import McpContent, McpToolResult
from dataflow_tips.orchestration import Capability, Toolbox, exposed_tool_name


def capability(name="tools_Job_Details", invoker=None, schema=None):
    return Capability(
        name=name,
        provider="tools",
        tool_name="Job Details",
        description="Job details",
        input_schema=schema or {
            "type": "object",
            "properties": {"job_id": {"type": "string"}},
            "required": ["job_id"],
        },
        invoker=invoker or AsyncMock(return_value=McpToolResult(content=[McpContent(text="{}")])),
    )


class TestExposedToolName:
    
    def test_sanitises_spaces_and_punctuation(self):
        assert exposed_tool_name("pipeline-tools", "Job List For Project, Region and Name") == \
            "pipeline-tools_Job_List_For_Project_Region_and_Name"
        assert exposed_tool_name("knowledge", "Best Practices: Sources") == "knowledge_Best_Practices_Sources"
    
    def test_truncates_to_64_characters(self):
        name = exposed_tool_name("provider", "x" * 100)
        assert len(name) == 64
        assert name.startswith("provider_x")
    
    def test_never_empty(self):
        assert exposed_tool_name("", "!!!") == "tool"


class TestToolbox:
    
    def test_duplicate_names_are_rejected(self):
        toolbox = Toolbox([capability()])
        
        with pytest.raises(ValueError, match="already used"):
            toolbox.add(capability())
    
    def test_lookup(self):
        toolbox = Toolbox([capability()])
        
        assert "tools_Job_Details" in toolbox
        assert toolbox.get("missing") is None
        assert len(toolbox) == 1
    
    @pytest.mark.asyncio
    async def test_invoke_returns_result_text(self):
        invoker = AsyncMock(return_value=McpToolResult(content=[
            McpContent(text="line 1"), McpContent(type="image", data="abc"), McpContent(text="line 2")
        ]))
        toolbox = Toolbox([capability(invoker=invoker)])
        
        result = await toolbox.invoke("tools_Job_Details", {"job_id": "j1"})
        
        assert result == "line 1\nline 2"
        invoker.assert_awaited_once_with({"job_id": "j1"})
    
    @pytest.mark.asyncio
    async def test_invalid_arguments_never_reach_the_provider(self):
        invoker = AsyncMock()
        toolbox = Toolbox([capability(invoker=invoker)])
        
        with pytest.raises(ToolInvocationError, match="Invalid arguments"):
            await toolbox.invoke("tools_Job_Details", {"job_id": 42})
        
        invoker.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_remote_failure_is_wrapped_and_logged(self, caplog):
        error = ConnectionResetError("reset by peer")
        toolbox = Toolbox([capability(invoker=AsyncMock(side_effect=error))])
        
        with caplog.at_level(logging.ERROR):
            with pytest.raises(ToolInvocationError) as exc_info:
                await toolbox.invoke("tools_Job_Details", {"job_id": "j1"})
        
        assert exc_info.value.cause is error
        assert exc_info.value.__cause__ is error
        assert "Failed to invoke tool 'Job Details' on provider 'tools'" in exc_info.value.message
        assert "Failed to invoke tool 'Job Details'" in caplog.text
    
    @pytest.mark.asyncio
    async def test_error_result_raises(self):
        result = McpToolResult(content=[McpContent(text="job not found")], is_error=True)
        toolbox = Toolbox([capability(invoker=AsyncMock(return_value=result))])
        
        with pytest.raises(ToolInvocationError, match="job not found"):
            await toolbox.invoke("tools_Job_Details", {"job_id": "j1"})
    
    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        with pytest.raises(ToolInvocationError, match="Unknown tool 'nope'"):
            await Toolbox().invoke("nope", {})
