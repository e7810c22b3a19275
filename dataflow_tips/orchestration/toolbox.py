"""Capability registry handed to the model during generation.

Tools discovered on every acquired provider are flattened into one
``Toolbox``. The model sees each tool under an exposed name of the form
``<provider>_<tool>``, sanitised so that it is accepted by every model API;
the toolbox maps it back to the provider and the original tool name.
"""

import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaValidationError

from ..common import execute_async
from ..config.constants import TOOL_NAME_MAX_LENGTH
from ..errors import ToolInvocationError
from ..mcp.models import McpToolResult

logger = logging.getLogger(__name__)

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")

ToolInvoker = Callable[[Dict[str, Any]], Awaitable[McpToolResult]]


def exposed_tool_name(provider: str, tool: str) -> str:
    """Model-facing name of ``tool`` discovered on ``provider``."""
    name = _INVALID_NAME_CHARS.sub("_", f"{provider}_{tool}").strip("_")
    return name[:TOOL_NAME_MAX_LENGTH] or "tool"


class Capability:
    """One remotely invocable tool.
    
    Attributes:
        name: Exposed (model-facing) name
        provider: Name of the provider the tool was discovered on
        tool_name: Name of the tool on its provider
        description: Description advertised by the provider
        input_schema: JSON schema of the arguments
    """
    
    def __init__(
        self,
        name: str,
        provider: str,
        tool_name: str,
        description: str,
        input_schema: Dict[str, Any],
        invoker: ToolInvoker,
    ):
        self.name = name
        self.provider = provider
        self.tool_name = tool_name
        self.description = description
        self.input_schema = input_schema or {"type": "object", "properties": {}}
        self._invoker = invoker
    
    def validate(self, arguments: Dict[str, Any]) -> None:
        """Validate ``arguments`` against the input schema.
        
        Raises:
            ToolInvocationError: If the arguments do not match the schema
        """
        try:
            Draft202012Validator(self.input_schema).validate(arguments)
        except SchemaValidationError as e:
            raise ToolInvocationError(
                f"Invalid arguments for tool '{self.tool_name}' on provider "
                f"'{self.provider}': {e.message}",
                cause=e
            ) from e
    
    async def invoke(self, arguments: Dict[str, Any]) -> str:
        """Call the tool and return the text of its result.
        
        Raises:
            ToolInvocationError: If validation or the remote call fails, or
                the provider reports the result as an error
        """
        self.validate(arguments)
        result = await execute_async(
            lambda: self._invoker(arguments),
            "Failed to invoke tool '%s' on provider '%s' with arguments %s",
            self.tool_name, self.provider, arguments
        )
        if result.is_error:
            message = f"Tool '{self.tool_name}' on provider '{self.provider}' failed: {result.text()}"
            logger.warning(message)
            raise ToolInvocationError(message)
        return result.text()


class Toolbox:
    """Capabilities available to one generation call, keyed by exposed name."""
    
    def __init__(self, capabilities: Optional[List[Capability]] = None):
        self._capabilities: Dict[str, Capability] = {}
        for capability in capabilities or []:
            self.add(capability)
    
    def add(self, capability: Capability) -> None:
        """Add a capability.
        
        Raises:
            ValueError: If the exposed name is already taken
        """
        if capability.name in self._capabilities:
            existing = self._capabilities[capability.name]
            raise ValueError(
                f"Tool name '{capability.name}' is already used by tool "
                f"'{existing.tool_name}' of provider '{existing.provider}'"
            )
        self._capabilities[capability.name] = capability
    
    def get(self, name: str) -> Optional[Capability]:
        return self._capabilities.get(name)
    
    def list(self) -> List[Capability]:
        return list(self._capabilities.values())
    
    def __contains__(self, name: str) -> bool:
        return name in self._capabilities
    
    def __len__(self) -> int:
        return len(self._capabilities)
    
    async def invoke(self, name: str, arguments: Dict[str, Any]) -> str:
        """Invoke the capability exposed as ``name``.
        
        Raises:
            ToolInvocationError: For unknown names and failed invocations
        """
        capability = self._capabilities.get(name)
        if capability is None:
            raise ToolInvocationError(f"Unknown tool '{name}'")
        return await capability.invoke(arguments)
