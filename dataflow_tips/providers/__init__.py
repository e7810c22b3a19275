"""Model adapters for tool-augmented streaming generation."""

from typing import Dict

from ..errors import ConfigurationError
from .anthropic import AnthropicAdapter
from .base import ModelAdapter
from .openai import OpenAIAdapter

_ADAPTERS = {
    "anthropic": AnthropicAdapter,
    "openai": OpenAIAdapter,
}

# Adapters hold lazily created API clients and are reused across requests
_instances: Dict[str, ModelAdapter] = {}


def get_model_adapter(provider: str) -> ModelAdapter:
    """Return the shared adapter for ``provider``.
    
    Raises:
        ConfigurationError: If the provider is not supported
    """
    adapter = _instances.get(provider)
    if adapter is None:
        adapter_class = _ADAPTERS.get(provider)
        if adapter_class is None:
            raise ConfigurationError(
                f"Unsupported model provider '{provider}', expected one of {sorted(_ADAPTERS)}"
            )
        adapter = _instances[provider] = adapter_class()
    return adapter


__all__ = [
    "AnthropicAdapter",
    "ModelAdapter",
    "OpenAIAdapter",
    "get_model_adapter",
]
