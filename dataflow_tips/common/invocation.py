"""Uniform call-log-wrap discipline for remote operations.

Every external-facing operation (a Dataflow API call inside a tool service,
a ``tools/call`` round trip from the agent) runs through :func:`execute` or
:func:`execute_async`: the operation is invoked exactly once, its result is
logged at debug level and returned untouched, and any failure is logged with
its cause and re-raised as :class:`ToolInvocationError`. Nothing is retried.
"""

import logging
from typing import Any, Awaitable, Callable, TypeVar

from ..errors import ToolInvocationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _format(template: str, args: tuple) -> str:
    if not args:
        return template
    try:
        return template % args
    except (TypeError, ValueError):
        # Template and arguments disagree; keep both rather than losing the context
        return f"{template} {list(args)}"


def _log_success(args: tuple, result: Any) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Completed execution with params %s, result: %s", list(args), str(result)
        )


def _wrap_failure(error: Exception, template: str, args: tuple) -> ToolInvocationError:
    message = _format(template, args)
    logger.error(message, exc_info=error)
    return ToolInvocationError(message, cause=error)


def execute(operation: Callable[[], T], error_template: str, *error_args: Any) -> T:
    """Run ``operation`` once and return its result.
    
    Args:
        operation: Zero-argument callable performing the remote call
        error_template: %-style template describing the call, used for diagnostics only
        *error_args: Positional arguments for ``error_template``
        
    Returns:
        Whatever ``operation`` returned, unmodified
        
    Raises:
        ToolInvocationError: Wrapping any exception raised by ``operation``
    """
    try:
        result = operation()
    except Exception as e:
        raise _wrap_failure(e, error_template, error_args) from e
    _log_success(error_args, result)
    return result


async def execute_async(
    operation: Callable[[], Awaitable[T]],
    error_template: str,
    *error_args: Any
) -> T:
    """Coroutine flavour of :func:`execute` for async remote calls.
    
    Cancellation is not an operation failure and propagates unwrapped.
    """
    try:
        result = await operation()
    except Exception as e:
        raise _wrap_failure(e, error_template, error_args) from e
    _log_success(error_args, result)
    return result
