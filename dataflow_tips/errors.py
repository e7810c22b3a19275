"""Error taxonomy shared by the orchestrator, the registry and the tool services."""

from typing import Optional


class AgentError(Exception):
    """Base exception for every failure surfaced by the agent.
    
    Attributes:
        message: Human readable message, safe to return to callers
        cause: The underlying exception, if this error wraps one
    """
    
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(AgentError):
    """Raised when the configuration cannot be loaded or is inconsistent."""
    pass


class AcquisitionError(AgentError):
    """A tool-provider connection could not be established or failed discovery."""
    
    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message, cause)
        self.provider_name = provider_name


class GenerationError(AgentError):
    """The model-generation call failed before the stream completed."""
    pass


class ReleaseError(AgentError):
    """Closing a tool-provider connection failed. Logged, never propagated."""
    
    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message, cause)
        self.provider_name = provider_name


class ToolInvocationError(AgentError):
    """A remote tool call failed; carries the formatted diagnostic message."""
    pass
