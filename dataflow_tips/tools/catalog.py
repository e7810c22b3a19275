"""Assembly of the pipeline tool server."""

from typing import Optional

from ..config import ToolServerSettings
from ..mcp import McpToolServer
from .clients import CloudClients, create_cloud_clients
from .knowledge import KnowledgeService
from .logs import LogMessagesService
from .metrics import Clock, PipelineMetricsService, utc_now
from .topology import PipelineTopologyService


def build_tool_server(
    settings: Optional[ToolServerSettings] = None,
    clients: Optional[CloudClients] = None,
    clock: Clock = utc_now
) -> McpToolServer:
    """Register every pipeline tool on a new ``McpToolServer``.
    
    Real Google Cloud clients are created when ``clients`` is omitted.
    """
    settings = settings or ToolServerSettings()
    clients = clients or create_cloud_clients()
    
    services = [
        PipelineTopologyService(clients.jobs),
        PipelineMetricsService(
            clients.metrics,
            clients.monitoring,
            job_metrics_window_seconds=settings.job_metrics_window_seconds,
            cpu_metrics_window_seconds=settings.cpu_metrics_window_seconds,
            clock=clock,
        ),
        LogMessagesService(
            clients.messages,
            page_size=settings.log_page_size,
            window_policy=settings.log_window_policy,
            max_window_seconds=settings.max_log_window_seconds,
            clock=clock,
        ),
        KnowledgeService(settings.knowledge),
    ]
    
    server = McpToolServer(settings.name, settings.version)
    for service in services:
        for tool in service.tool_definitions():
            server.register(tool)
    return server
