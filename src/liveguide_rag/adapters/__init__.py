import logging
import os
from typing import Any, Type

from .base import BaseEmbedder, EmbeddingMode

logger = logging.getLogger(__name__)

AUTO_PROVIDER = "auto"

_EMBEDDER_REGISTRY: dict[str, Type[BaseEmbedder]] = {}


def register_embedder(provider: str, cls: Type[BaseEmbedder]) -> None:
    """Register an embedder provider.

    Args:
        provider: Provider name (e.g., "openai", "ollama")
        cls: Embedder class to register
    """
    _EMBEDDER_REGISTRY[provider] = cls


def resolve_provider(provider: str) -> str:
    """Turn the ``auto`` provider into a concrete one.

    ``auto`` picks ``openai`` when ``OPENAI_API_KEY`` is set and ``stub``
    otherwise. Other names are returned unchanged.
    """
    if provider != AUTO_PROVIDER:
        return provider
    if os.environ.get("OPENAI_API_KEY"):
        return "openai"
    logger.warning("OPENAI_API_KEY not set, falling back to stub embeddings")
    return "stub"


def create_embedder(provider: str, **kwargs: Any) -> BaseEmbedder:
    """Create an embedder instance based on provider.

    Args:
        provider: Provider name, or "auto"
        **kwargs: Additional provider-specific parameters

    Returns:
        BaseEmbedder instance

    Raises:
        ValueError: If provider is not registered
    """
    provider = resolve_provider(provider)
    if provider not in _EMBEDDER_REGISTRY:
        available = list(_EMBEDDER_REGISTRY.keys())
        raise ValueError(
            f"Unknown embedder provider: {provider}. Available: {available}"
        )
    return _EMBEDDER_REGISTRY[provider](**kwargs)


def list_embedder_providers() -> list[str]:
    """List all registered embedder providers."""
    return list(_EMBEDDER_REGISTRY.keys())


from .embedding import OllamaEmbedder, OpenAIEmbedder, StubEmbedder  # noqa: E402

register_embedder("openai", OpenAIEmbedder)
register_embedder("ollama", OllamaEmbedder)
register_embedder("stub", StubEmbedder)

__all__ = [
    "BaseEmbedder",
    "EmbeddingMode",
    "OllamaEmbedder",
    "OpenAIEmbedder",
    "StubEmbedder",
    "create_embedder",
    "list_embedder_providers",
    "register_embedder",
    "resolve_provider",
]
