from pathlib import Path
from typing import Any

from ..adapters import BaseEmbedder, create_embedder
from ..config import get_config_value, get_store_path
from ..splitters import DEFAULT_MAX_CHUNK_SIZE, DEFAULT_OVERLAP_SIZE
from ..stores import BaseChunkStore, create_chunk_store

DEFAULT_BATCH_SIZE = 100
DEFAULT_CHUNK_SIZE = DEFAULT_MAX_CHUNK_SIZE
DEFAULT_CHUNK_OVERLAP = DEFAULT_OVERLAP_SIZE
DEFAULT_KNOWLEDGE_BASE = "default"

EMBEDDING_DEFAULTS = {"provider": "auto", "model": "text-embedding-3-small"}


def create_embedder_from_config(config: dict[str, Any]) -> BaseEmbedder:
    """Create an embedder instance from the ``[embedding]`` section."""
    section_config = config.get("embedding", {})
    provider = section_config.get("provider", EMBEDDING_DEFAULTS["provider"])
    model = section_config.get("model", EMBEDDING_DEFAULTS["model"])

    extra_kwargs = {
        k: v for k, v in section_config.items() if k not in ("provider", "model")
    }

    return create_embedder(provider, model=model, **extra_kwargs)


def create_store_from_config(
    config: dict[str, Any], config_path: Path, embedder: BaseEmbedder
) -> BaseChunkStore:
    """Create the chunk store for an embedder from the ``[storage]`` section."""
    provider = get_config_value(config, "storage.provider", "json")
    # Stub vectors must never share a corpus with real ones.
    model_id = f"stub_{embedder.model}" if embedder.is_stub else embedder.model
    return create_chunk_store(
        provider,
        dimension=embedder.dimension,
        path=get_store_path(config, config_path, model_id),
    )
