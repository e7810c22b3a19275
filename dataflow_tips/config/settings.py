"""Configuration models and loader.

Configuration is plain JSON validated with Pydantic. The loader is cheap and
is called once per orchestration call so that edits to the configuration file
are picked up without restarting the process.

Priority order:
1. DATAFLOW_TIPS_CONFIG_JSON environment variable (JSON string)
2. DATAFLOW_TIPS_CONFIG environment variable (path to JSON file)
3. Built-in defaults
"""

import json
import logging
import os
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigurationError
from .constants import (
    CONFIG_FILE_ENV_VAR,
    CONFIG_JSON_ENV_VAR,
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_CLIENT_NAME,
    DEFAULT_CLIENT_VERSION,
    DEFAULT_CPU_METRICS_WINDOW_SECONDS,
    DEFAULT_JOB_METRICS_WINDOW_SECONDS,
    DEFAULT_LOG_PAGE_SIZE,
    DEFAULT_MAX_LOG_WINDOW_SECONDS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MAX_TOOL_ROUNDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SSE_ENDPOINT,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOOL_SERVER_NAME,
)
from .prompts import SYSTEM_TEMPLATE

logger = logging.getLogger(__name__)


class McpConnection(BaseModel):
    """Connection parameters for one remote tool provider."""
    
    url: str = Field(..., description="Base endpoint of the provider")
    sse_endpoint: Optional[str] = Field(
        default=None,
        description=f"Sub-path of the SSE stream, defaults to {DEFAULT_SSE_ENDPOINT}"
    )
    request_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds, defaults to the client-level timeout"
    )
    
    def resolved_sse_endpoint(self) -> str:
        return self.sse_endpoint or DEFAULT_SSE_ENDPOINT


class McpClientSettings(BaseModel):
    """Client identity and the named tool-provider connections."""
    
    name: str = DEFAULT_CLIENT_NAME
    version: str = DEFAULT_CLIENT_VERSION
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT_SECONDS, gt=0)
    acquisition_policy: Literal["fail_fast", "partial"] = Field(
        default="fail_fast",
        description="fail_fast aborts the request when any provider fails; "
                    "partial proceeds with the providers that connected"
    )
    connections: Dict[str, McpConnection] = Field(default_factory=dict)
    
    def timeout_for(self, connection: McpConnection) -> float:
        return connection.request_timeout or self.request_timeout


class ModelSettings(BaseModel):
    """Model selection and generation parameters."""
    
    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = DEFAULT_ANTHROPIC_MODEL
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tool_rounds: int = Field(default=DEFAULT_MAX_TOOL_ROUNDS, ge=0)


class AgentSettings(BaseModel):
    """Everything the orchestrator needs for one call."""
    
    mcp: McpClientSettings = Field(default_factory=McpClientSettings)
    model: ModelSettings = Field(default_factory=ModelSettings)
    system_template: str = SYSTEM_TEMPLATE
    system_variables: Dict[str, str] = Field(default_factory=dict)


class KnowledgeCategories(BaseModel):
    sources: List[str] = Field(default_factory=lambda: ["PubSub", "GCS", "BigQuery"])
    sinks: List[str] = Field(default_factory=lambda: ["PubSub", "GCS", "BigQuery"])


class KnowledgeSettings(BaseModel):
    """Static best-practice knowledge served by the knowledge tools."""
    
    categories: KnowledgeCategories = Field(default_factory=KnowledgeCategories)
    entries: Dict[str, List[str]] = Field(
        default_factory=lambda: {
            "PubSub": [
                "A data lag of less than 60 seconds is considered normal in a PubSub reading pipeline."
            ]
        }
    )
    
    def best_practices(self, category: Optional[str]) -> List[str]:
        return list(self.entries.get(category or "", []))


class ToolServerSettings(BaseModel):
    """Settings of the pipeline tool server."""
    
    name: str = DEFAULT_TOOL_SERVER_NAME
    version: str = DEFAULT_CLIENT_VERSION
    job_metrics_window_seconds: int = Field(default=DEFAULT_JOB_METRICS_WINDOW_SECONDS, ge=1)
    cpu_metrics_window_seconds: int = Field(default=DEFAULT_CPU_METRICS_WINDOW_SECONDS, ge=1)
    log_page_size: int = Field(default=DEFAULT_LOG_PAGE_SIZE, ge=1)
    log_window_policy: Literal["reject", "clamp", "pass"] = "clamp"
    max_log_window_seconds: int = Field(default=DEFAULT_MAX_LOG_WINDOW_SECONDS, ge=1)
    knowledge: KnowledgeSettings = Field(default_factory=KnowledgeSettings)


class Settings(BaseModel):
    """Root of the configuration document."""
    
    mcp: McpClientSettings = Field(default_factory=McpClientSettings)
    model: ModelSettings = Field(default_factory=ModelSettings)
    system_template: str = SYSTEM_TEMPLATE
    system_variables: Dict[str, str] = Field(default_factory=dict)
    tools: ToolServerSettings = Field(default_factory=ToolServerSettings)
    
    def agent(self) -> AgentSettings:
        return AgentSettings(
            mcp=self.mcp,
            model=self.model,
            system_template=self.system_template,
            system_variables=self.system_variables
        )


def _parse(raw: str, origin: str) -> Settings:
    try:
        return Settings.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON configuration in {origin}: {e}", cause=e) from e
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {origin}: {e}", cause=e) from e


def load_settings() -> Settings:
    """Load the configuration document.
    
    Returns:
        Validated Settings; defaults when nothing is configured
        
    Raises:
        ConfigurationError: If the configured JSON is unreadable or invalid
    """
    json_str = os.getenv(CONFIG_JSON_ENV_VAR)
    if json_str:
        return _parse(json_str, CONFIG_JSON_ENV_VAR)
    
    file_path = os.getenv(CONFIG_FILE_ENV_VAR)
    if file_path:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                raw = f.read()
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read configuration from {file_path}: {e}", cause=e
            ) from e
        return _parse(raw, file_path)
    
    logger.debug("No configuration provided, using defaults")
    return Settings()


def load_agent_settings() -> AgentSettings:
    return load_settings().agent()


def load_tool_server_settings() -> ToolServerSettings:
    return load_settings().tools
