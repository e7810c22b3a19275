"""Job and worker metrics tools."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

from google.cloud import dataflow_v1beta3, monitoring_v3
from pydantic import BaseModel

from ..common import execute
from ..mcp import ToolDefinition
from .schemas import JOB_ID, PROJECT_ID, REGION, object_schema

CPU_UTILIZATION_FILTER = (
    'metric.type = "compute.googleapis.com/instance/cpu/utilization" AND '
    'metadata.user_labels.dataflow_job_id = "{job_id}"'
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WorkerCpuUtilization(BaseModel):
    name: Optional[str] = None
    utilization: float
    timestamp: Optional[datetime] = None


class PipelineMetricsService:
    """Dataflow job metrics and Cloud Monitoring worker CPU metrics.
    
    Args:
        metrics_client: Dataflow ``MetricsV1Beta3Client``
        monitoring_client: Cloud Monitoring ``MetricServiceClient``
        job_metrics_window_seconds: How far back job metrics are read
        cpu_metrics_window_seconds: Window and alignment period of the CPU series
        clock: Returns the current UTC time
    """
    
    def __init__(
        self,
        metrics_client: Any,
        monitoring_client: Any,
        job_metrics_window_seconds: int = 3600,
        cpu_metrics_window_seconds: int = 300,
        clock: Clock = utc_now
    ):
        self._metrics = metrics_client
        self._monitoring = monitoring_client
        self._job_metrics_window = job_metrics_window_seconds
        self._cpu_window = cpu_metrics_window_seconds
        self._clock = clock
    
    def job_metrics(self, project_id: str, region: str, job_id: str) -> str:
        request = dataflow_v1beta3.GetJobMetricsRequest(
            project_id=project_id,
            location=region,
            job_id=job_id,
            start_time=self._clock() - timedelta(seconds=self._job_metrics_window),
        )
        return execute(
            lambda: dataflow_v1beta3.JobMetrics.to_json(
                self._metrics.get_job_metrics(request=request),
                sort_keys=True,
                indent=None,
                use_integers_for_enums=False,
            ),
            "Error while retrieving metrics for job id %s, project %s, region %s.",
            job_id, project_id, region
        )
    
    def worker_cpu_utilization(self, project_id: str, job_id: str) -> List[dict]:
        """Mean CPU utilisation (percent) of every worker of the job."""
        now = self._clock()
        request = monitoring_v3.ListTimeSeriesRequest(
            name=f"projects/{project_id}",
            filter=CPU_UTILIZATION_FILTER.format(job_id=job_id),
            interval=monitoring_v3.TimeInterval(
                start_time=now - timedelta(seconds=self._cpu_window),
                end_time=now,
            ),
            aggregation=monitoring_v3.Aggregation(
                alignment_period=timedelta(seconds=self._cpu_window),
                per_series_aligner=monitoring_v3.Aggregation.Aligner.ALIGN_MEAN,
            ),
            view=monitoring_v3.ListTimeSeriesRequest.TimeSeriesView.FULL,
        )
        
        def collect() -> List[dict]:
            samples = []
            for series in self._monitoring.list_time_series(request=request):
                instance = series.metric.labels.get("instance_name")
                for point in series.points:
                    samples.append(
                        WorkerCpuUtilization(
                            name=instance,
                            utilization=point.value.double_value * 100,
                            timestamp=point.interval.start_time or None,
                        ).model_dump(mode="json")
                    )
            return samples
        
        return execute(
            collect,
            "Errors while trying to retrieve CPU metrics for jobid %s",
            job_id
        )
    
    def tool_definitions(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="Job metrics",
                description=(
                    "Get the metrics for the Dataflow's job. "
                    "If the job is not running it may come back with empty results."
                ),
                parameters=object_schema(project_id=PROJECT_ID, region=REGION, job_id=JOB_ID),
                handler=self.job_metrics,
            ),
            ToolDefinition(
                name="Job Workers CPU metrics",
                description="Retrieves the CPU utilization metrics for all the current workers for the job.",
                parameters=object_schema(project_id=PROJECT_ID, job_id=JOB_ID),
                handler=self.worker_cpu_utilization,
            ),
        ]
