"""Dataflow pipeline tools served over MCP."""

from .catalog import build_tool_server
from .clients import CloudClients, create_cloud_clients
from .knowledge import KnowledgeService
from .logs import LogMessagesService, message_importance
from .metrics import PipelineMetricsService
from .topology import Pipeline, PipelineTopologyService

__all__ = [
    "build_tool_server",
    "CloudClients",
    "create_cloud_clients",
    "KnowledgeService",
    "LogMessagesService",
    "message_importance",
    "PipelineMetricsService",
    "Pipeline",
    "PipelineTopologyService",
]
