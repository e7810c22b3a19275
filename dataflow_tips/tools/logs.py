"""Job log messages tool."""

import itertools
import logging
from datetime import timedelta
from typing import Any, List, Optional

from google.cloud import dataflow_v1beta3

from ..common import execute
from ..errors import ToolInvocationError
from ..mcp import ToolDefinition
from .metrics import Clock, utc_now
from .schemas import JOB_ID, PROJECT_ID, REGION, object_schema

logger = logging.getLogger(__name__)

LOG_LEVELS = ["BASIC", "DEBUG", "DETAILED", "ERROR", "WARNING", "UNKNOWN"]


def message_importance(log_level: Optional[str]) -> dataflow_v1beta3.JobMessageImportance:
    """Map a level name to the minimum importance filter.
    
    Missing or unrecognised levels select ``JOB_MESSAGE_IMPORTANCE_UNKNOWN``.
    """
    importance = dataflow_v1beta3.JobMessageImportance
    if not log_level:
        return importance.JOB_MESSAGE_IMPORTANCE_UNKNOWN
    try:
        return importance[f"JOB_MESSAGE_{log_level.strip().upper()}"]
    except KeyError:
        return importance.JOB_MESSAGE_IMPORTANCE_UNKNOWN


class LogMessagesService:
    """Recent job messages filtered by importance.
    
    ``window_policy`` decides what happens to a ``seconds_ago`` larger than
    ``max_window_seconds``: ``reject`` fails the call, ``clamp`` shortens the
    window and ``pass`` forwards it unchanged.
    """
    
    def __init__(
        self,
        messages_client: Any,
        page_size: int = 10,
        window_policy: str = "clamp",
        max_window_seconds: int = 86400,
        clock: Clock = utc_now
    ):
        self._messages = messages_client
        self._page_size = page_size
        self._window_policy = window_policy
        self._max_window = max_window_seconds
        self._clock = clock
    
    def window_seconds(self, seconds_ago: int) -> int:
        if seconds_ago <= self._max_window or self._window_policy == "pass":
            return seconds_ago
        if self._window_policy == "reject":
            raise ToolInvocationError(
                f"seconds_ago must be at most {self._max_window}, got {seconds_ago}"
            )
        logger.info(f"Clamping log window from {seconds_ago}s to {self._max_window}s")
        return self._max_window
    
    def log_messages(
        self,
        project_id: str,
        region: str,
        job_id: str,
        seconds_ago: int,
        log_level: Optional[str] = None
    ) -> List[dict]:
        request = dataflow_v1beta3.ListJobMessagesRequest(
            project_id=project_id,
            location=region,
            job_id=job_id,
            start_time=self._clock() - timedelta(seconds=self.window_seconds(seconds_ago)),
            minimum_importance=message_importance(log_level),
            page_size=self._page_size,
        )
        
        def first_page() -> List[dict]:
            pager = self._messages.list_job_messages(request=request)
            return [
                {
                    "id": message.id,
                    "time": message.time.isoformat() if message.time else None,
                    "importance": message.message_importance.name,
                    "text": message.message_text,
                }
                for message in itertools.islice(pager, self._page_size)
            ]
        
        return execute(
            first_page,
            "Errors while trying to retrieve the job %s logs at %s level (project %s, region %s).",
            job_id, log_level, project_id, region
        )
    
    def tool_definitions(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="Log Messages Per Level",
                description="Retrieve the available log messages in the desired level.",
                parameters={
                    "type": "object",
                    "properties": {
                        "project_id": PROJECT_ID,
                        "region": REGION,
                        "job_id": JOB_ID,
                        "log_level": {
                            "type": ["string", "null"],
                            "description": "Log level, expected values are: "
                                           f"{', '.join(LOG_LEVELS)} or null.",
                        },
                        "seconds_ago": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "The amount of seconds ago to retrieve messages from",
                        },
                    },
                    "required": ["project_id", "region", "job_id", "seconds_ago"],
                    "additionalProperties": False,
                },
                handler=self.log_messages,
            ),
        ]
