"""
Structured logging utility for the agent components.

This module provides a consistent logging interface for the orchestrator,
the tool-provider registry and the tool services, ensuring structured
records with standard fields like component and request_id.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Any, Optional


class ComponentLogger:
    """Structured logger for a named component."""
    
    def __init__(self, component: str):
        """
        Initialize logger for a specific component.
        
        Args:
            component: Name of the component (e.g., "orchestrator", "registry")
        """
        self.component = component
        self.logger = logging.getLogger(f"dataflow_tips.{component}")
    
    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with structured fields."""
        fields = [f"component={self.component}"]
        
        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")
        
        return f"[{' '.join(fields)}] {message}"
    
    def is_debug_enabled(self) -> bool:
        return self.logger.isEnabledFor(logging.DEBUG)
    
    def debug(self, message: str, request_id: Optional[str] = None, **kwargs):
        """Log debug message with structured fields."""
        self.logger.debug(self._format_message(message, request_id=request_id, **kwargs))
    
    def info(self, message: str, request_id: Optional[str] = None, **kwargs):
        """Log info message with structured fields."""
        self.logger.info(self._format_message(message, request_id=request_id, **kwargs))
    
    def warning(self, message: str, request_id: Optional[str] = None, **kwargs):
        """Log warning message with structured fields."""
        self.logger.warning(self._format_message(message, request_id=request_id, **kwargs))
    
    def error(self, message: str, request_id: Optional[str] = None,
              error: Optional[BaseException] = None, exc_info: bool = False, **kwargs):
        """Log error message with structured fields.
        
        When ``exc_info`` is set the traceback of ``error`` is attached to the record.
        """
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)
        
        self.logger.error(
            self._format_message(message, request_id=request_id, **kwargs),
            exc_info=error if (exc_info and error) else None
        )
    
    @contextmanager
    def track_request(self, method: str, request_id: Optional[str] = None, **fields: Any):
        """
        Context manager to track request timing and log key events.
        
        Args:
            method: The operation being tracked (e.g., "generate", "acquire")
            request_id: Optional request ID (generated if not provided)
            **fields: Extra structured fields added to every record
            
        Yields:
            Dict with request metadata including request_id
        """
        if request_id is None:
            request_id = new_request_id()
        
        start_time = time.time()
        
        self.debug(f"Starting {method}", request_id=request_id, method=method, **fields)
        
        metadata = {
            'request_id': request_id,
            'method': method,
            'start_time': start_time
        }
        
        try:
            yield metadata
            
            duration = time.time() - start_time
            self.info(
                f"Completed {method}",
                request_id=request_id,
                method=method,
                duration_ms=int(duration * 1000),
                **fields
            )
            
        except Exception as e:
            duration = time.time() - start_time
            self.error(
                f"Failed {method}",
                request_id=request_id,
                method=method,
                duration_ms=int(duration * 1000),
                error=e,
                **fields
            )
            raise


def new_request_id() -> str:
    """Short random identifier used to correlate the records of one request."""
    return str(uuid.uuid4())[:8]


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI and the HTTP services."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )
