"""Shared pytest fixtures for Dataflow tips tests."""

import pytest
from unittest.mock import MagicMock

from dataflow_tips.config import AgentSettings, McpClientSettings, McpConnection, ModelSettings
from dataflow_tips.mcp import McpToolDefinition
from dataflow_tips.tools import CloudClients
from tests.helpers.fakes import FakeTransportFactory, ScriptedAdapter


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    env_vars = {
        "OPENAI_API_KEY": "test-openai-key",
        "ANTHROPIC_API_KEY": "test-anthropic-key",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def no_config_env(monkeypatch):
    """Make sure no configuration leaks in from the environment."""
    monkeypatch.delenv("DATAFLOW_TIPS_CONFIG", raising=False)
    monkeypatch.delenv("DATAFLOW_TIPS_CONFIG_JSON", raising=False)


@pytest.fixture
def job_tools():
    """Two capabilities advertised by the pipeline tools provider."""
    return [
        McpToolDefinition(
            name="Job Details",
            description="Get Dataflow's job detailed information.",
            input_schema={
                "type": "object",
                "properties": {
                    "project_id": {"type": "string"},
                    "region": {"type": "string"},
                    "job_id": {"type": "string"},
                },
                "required": ["project_id", "region", "job_id"],
            },
        ),
        McpToolDefinition(
            name="Job List For Project",
            description="Get Dataflow's jobs executed in a GCP project.",
            input_schema={
                "type": "object",
                "properties": {"project_id": {"type": "string"}},
                "required": ["project_id"],
            },
        ),
    ]


@pytest.fixture
def mcp_settings():
    """One configured provider with a short timeout."""
    return McpClientSettings(
        name="test-agent",
        version="9.9.9",
        request_timeout=0.2,
        connections={"pipeline-tools": McpConnection(url="http://tools.test")},
    )


@pytest.fixture
def agent_settings(mcp_settings):
    return AgentSettings(
        mcp=mcp_settings,
        model=ModelSettings(provider="anthropic", model="test-model"),
    )


@pytest.fixture
def transport_factory(job_tools):
    return FakeTransportFactory({"pipeline-tools": {"tools": job_tools}})


@pytest.fixture
def scripted_adapter():
    return ScriptedAdapter(chunks=["The watermark", " is stuck"])


@pytest.fixture
def cloud_clients():
    """Mock Google Cloud clients."""
    return CloudClients(
        jobs=MagicMock(),
        messages=MagicMock(),
        metrics=MagicMock(),
        monitoring=MagicMock(),
    )
