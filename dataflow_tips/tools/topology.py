"""Job lookup tools backed by the Dataflow Jobs API."""

from datetime import datetime
from typing import Any, Iterable, List, Optional

from google.cloud import dataflow_v1beta3
from pydantic import BaseModel

from ..common import execute
from ..mcp import ToolDefinition
from .schemas import JOB_ID, PROJECT_ID, REGION, object_schema


class Pipeline(BaseModel):
    """Summary of one Dataflow job."""
    
    name: str
    id: str
    project_id: str
    region: str
    type: str
    state: str
    start_time: Optional[datetime] = None
    
    @classmethod
    def from_job(cls, job: Any) -> "Pipeline":
        return cls(
            name=job.name,
            id=job.id,
            project_id=job.project_id,
            region=job.location,
            type=job.type_.name,
            state=job.current_state.name,
            start_time=job.start_time or None,
        )


def _summaries(jobs: Iterable[Any]) -> List[dict]:
    return [Pipeline.from_job(job).model_dump(mode="json", exclude_none=True) for job in jobs]


class PipelineTopologyService:
    """Job details and job listings."""
    
    def __init__(self, jobs_client: Any):
        self._jobs = jobs_client
    
    def job_details(self, project_id: str, region: str, job_id: str) -> str:
        """Full job description (``JOB_VIEW_ALL``) as JSON."""
        request = dataflow_v1beta3.GetJobRequest(
            project_id=project_id.strip(),
            location=region.strip(),
            job_id=job_id.strip(),
            view=dataflow_v1beta3.JobView.JOB_VIEW_ALL,
        )
        return execute(
            lambda: dataflow_v1beta3.Job.to_json(
                self._jobs.get_job(request=request),
                sort_keys=True,
                indent=None,
                use_integers_for_enums=False,
            ),
            "Error while retrieving information for job id: %s, project: %s, region: %s",
            job_id, project_id, region
        )
    
    def jobs_for_project(self, project_id: str) -> List[dict]:
        request = dataflow_v1beta3.ListJobsRequest(project_id=project_id.strip())
        return execute(
            lambda: _summaries(self._jobs.aggregated_list_jobs(request=request)),
            "Error while retrieving pipelines for project: %s",
            project_id
        )
    
    def jobs_for_region(self, project_id: str, region: str) -> List[dict]:
        request = dataflow_v1beta3.ListJobsRequest(
            project_id=project_id.strip(),
            location=region.strip(),
        )
        return execute(
            lambda: _summaries(self._jobs.list_jobs(request=request)),
            "Error while retrieving pipelines for project: %s on region %s",
            project_id, region
        )
    
    def jobs_by_name(self, project_id: str, region: str, name: str) -> List[dict]:
        request = dataflow_v1beta3.ListJobsRequest(
            project_id=project_id.strip(),
            location=region.strip(),
            name=name.strip(),
        )
        return execute(
            lambda: _summaries(self._jobs.list_jobs(request=request)),
            "Error while retrieving pipelines for project: %s on region %s with name %s",
            project_id, region, name
        )
    
    def tool_definitions(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="Job Details",
                description="Get Dataflow's job detailed information, including all the composite states.",
                parameters=object_schema(project_id=PROJECT_ID, region=REGION, job_id=JOB_ID),
                handler=self.job_details,
            ),
            ToolDefinition(
                name="Job List For Project",
                description="Get Dataflow's jobs executed in a GCP project.",
                parameters=object_schema(
                    project_id={"type": "string", "description": "Pipelines GCP project identifier."}
                ),
                handler=self.jobs_for_project,
            ),
            ToolDefinition(
                name="Job List For Project and Region",
                description="Get Dataflow's jobs executed in a GCP project and region.",
                parameters=object_schema(project_id=PROJECT_ID, region=REGION),
                handler=self.jobs_for_region,
            ),
            ToolDefinition(
                name="Job List For Project, Region and Name",
                description="Get Dataflow's jobs executed in a GCP project, region and with the provided name.",
                parameters=object_schema(
                    project_id=PROJECT_ID,
                    region=REGION,
                    name={"type": "string", "description": "Job's exact name."},
                ),
                handler=self.jobs_by_name,
            ),
        ]
