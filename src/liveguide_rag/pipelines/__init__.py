from .base import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_KNOWLEDGE_BASE,
    create_embedder_from_config,
    create_store_from_config,
)
from .indexing import IndexingPipeline
from .retrieval import RetrievalPipeline, get_retrieval_pipeline

__all__ = [
    "IndexingPipeline",
    "RetrievalPipeline",
    "get_retrieval_pipeline",
    "create_embedder_from_config",
    "create_store_from_config",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CHUNK_OVERLAP",
    "DEFAULT_KNOWLEDGE_BASE",
]
