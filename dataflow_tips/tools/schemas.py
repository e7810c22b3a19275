"""JSON schema fragments shared by the tool definitions."""

from typing import Any, Dict

PROJECT_ID = {"type": "string", "description": "Job's GCP project identifier."}
REGION = {"type": "string", "description": "Job's GCP region identifier."}
JOB_ID = {"type": "string", "description": "Job's identifier."}


def object_schema(**properties: Dict[str, Any]) -> Dict[str, Any]:
    """Object schema where every property is required."""
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }
