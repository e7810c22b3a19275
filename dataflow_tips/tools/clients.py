"""Google Cloud clients used by the pipeline tool services."""

from dataclasses import dataclass
from typing import Any

from google.cloud import dataflow_v1beta3, monitoring_v3


@dataclass
class CloudClients:
    """The remote APIs the tools wrap; replaced by fakes in tests."""
    jobs: Any
    messages: Any
    metrics: Any
    monitoring: Any


def create_cloud_clients() -> CloudClients:
    """Build the real clients using Application Default Credentials."""
    return CloudClients(
        jobs=dataflow_v1beta3.JobsV1Beta3Client(),
        messages=dataflow_v1beta3.MessagesV1Beta3Client(),
        metrics=dataflow_v1beta3.MetricsV1Beta3Client(),
        monitoring=monitoring_v3.MetricServiceClient(),
    )
