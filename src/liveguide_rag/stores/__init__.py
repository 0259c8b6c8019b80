from pathlib import Path
from typing import Any, Optional

from .base import BaseChunkStore
from .json_store import JsonChunkStore


def create_chunk_store(
    provider: str,
    dimension: int,
    path: Optional[Path] = None,
    **kwargs: Any,
) -> BaseChunkStore:
    """Create a chunk store instance based on provider.

    Args:
        provider: Provider name ("json", or "memory" for a store without a file)
        dimension: Embedding dimension
        path: File the store persists to
        **kwargs: Additional provider-specific parameters

    Returns:
        BaseChunkStore instance
    """
    if provider == "json":
        return JsonChunkStore(dimension=dimension, path=path, **kwargs)
    if provider == "memory":
        return JsonChunkStore(dimension=dimension, **kwargs)
    raise ValueError(f"Unknown chunk store provider: {provider}")


__all__ = ["BaseChunkStore", "JsonChunkStore", "create_chunk_store"]
