"""
Defaults and environment variable names.

Central location for the constants shared by the agent and the tool server.
"""

# Environment variables holding the configuration (see settings.load_settings)
CONFIG_FILE_ENV_VAR = "DATAFLOW_TIPS_CONFIG"
CONFIG_JSON_ENV_VAR = "DATAFLOW_TIPS_CONFIG_JSON"

# MCP client defaults
DEFAULT_SSE_ENDPOINT = "/sse"
DEFAULT_CLIENT_NAME = "dataflow-tips-agent"
DEFAULT_CLIENT_VERSION = "1.0.0"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 20.0
MCP_PROTOCOL_VERSION = "2024-11-05"

# Model defaults
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOOL_ROUNDS = 8

# Tool server defaults
DEFAULT_TOOL_SERVER_NAME = "dataflow-pipeline-tools"
DEFAULT_JOB_METRICS_WINDOW_SECONDS = 3600
DEFAULT_CPU_METRICS_WINDOW_SECONDS = 300
DEFAULT_LOG_PAGE_SIZE = 10
DEFAULT_MAX_LOG_WINDOW_SECONDS = 86400

# Exposed tool names must satisfy both Anthropic and OpenAI naming rules
TOOL_NAME_MAX_LENGTH = 64

# Example configuration file
CONFIG_EXAMPLE = """
{
  "mcp": {
    "name": "dataflow-tips-agent",
    "version": "1.0.0",
    "request_timeout": 20,
    "acquisition_policy": "fail_fast",
    "connections": {
      "pipeline-tools": {"url": "http://localhost:8081"},
      "knowledge": {"url": "http://localhost:8082", "sse_endpoint": "/sse", "request_timeout": 5}
    }
  },
  "model": {"provider": "anthropic", "model": "claude-sonnet-4-20250514", "max_tokens": 4096}
}
"""
