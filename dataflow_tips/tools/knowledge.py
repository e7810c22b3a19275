"""Static best-practice knowledge tools."""

from typing import List, Optional

from ..common import execute
from ..config import KnowledgeSettings
from ..mcp import ToolDefinition
from .schemas import object_schema


class KnowledgeService:
    def __init__(self, knowledge: Optional[KnowledgeSettings] = None):
        self._knowledge = knowledge or KnowledgeSettings()
    
    def source_best_practices(self, source_category: str) -> List[str]:
        return execute(
            lambda: self._knowledge.best_practices(source_category),
            "Error retrieving source categories best practices %s",
            source_category
        )
    
    def sink_best_practices(self, sink_category: str) -> List[str]:
        return execute(
            lambda: self._knowledge.best_practices(sink_category),
            "Error retrieving sink categories best practices %s",
            sink_category
        )
    
    def io_categories(self) -> dict:
        return execute(
            lambda: self._knowledge.categories.model_dump(),
            "Error retrieving the IO categories"
        )
    
    def tool_definitions(self) -> List[ToolDefinition]:
        return [
            ToolDefinition(
                name="Best Practices: Sources",
                description=(
                    "Retrieve the known best practices for the provided Apache Beam source category. "
                    "Use the 'IO Categories' tool to retrieve what best practices are available."
                ),
                parameters=object_schema(
                    source_category={"type": "string", "description": "Source category."}
                ),
                handler=self.source_best_practices,
            ),
            ToolDefinition(
                name="Best Practices: Sinks",
                description=(
                    "Retrieve the known best practices for the provided Apache Beam sink category. "
                    "Use the 'IO Categories' tool to retrieve what best practices are available."
                ),
                parameters=object_schema(
                    sink_category={"type": "string", "description": "Sink category."}
                ),
                handler=self.sink_best_practices,
            ),
            ToolDefinition(
                name="IO Categories",
                description="Retrieves the known IO (sources and sinks) categories covered in this knowledge base.",
                parameters=object_schema(),
                handler=self.io_categories,
            ),
        ]
