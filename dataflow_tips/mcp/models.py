"""MCP protocol message models.

Defines the data structures used for MCP JSON-RPC communication over the
SSE transport, shared by the client transport and the tool server.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class McpServerInfo(BaseModel):
    """Server identity returned by the ``initialize`` handshake."""
    
    name: str
    version: str = ""
    protocol_version: str = ""
    capabilities: Dict[str, Any] = Field(default_factory=dict)
    
    @classmethod
    def from_initialize_result(cls, result: Dict[str, Any]) -> "McpServerInfo":
        server_info = result.get("serverInfo") or {}
        return cls(
            name=server_info.get("name", "unknown"),
            version=server_info.get("version", ""),
            protocol_version=result.get("protocolVersion", ""),
            capabilities=result.get("capabilities") or {}
        )


class McpToolDefinition(BaseModel):
    """A capability advertised by ``tools/list``."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema"
    )
    
    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class McpContent(BaseModel):
    """One content item of a tool result."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    type: str = "text"
    text: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class McpToolResult(BaseModel):
    """Result of ``tools/call``; failures of the tool itself set ``is_error``."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    content: List[McpContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")
    
    def text(self) -> str:
        """Concatenated text content."""
        return "\n".join(c.text for c in self.content if c.type == "text" and c.text)
    
    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def jsonrpc_request(
    request_id: Union[int, str],
    method: str,
    params: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    request: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": request_id, "method": method}
    if params is not None:
        request["params"] = params
    return request


def jsonrpc_notification(method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    notification: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        notification["params"] = params
    return notification


def jsonrpc_result(request_id: Union[int, str, None], result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def jsonrpc_error(
    request_id: Union[int, str, None],
    code: int,
    message: str,
    data: Any = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}
