"""Chunking, embedding and similarity retrieval for LiveGuide coaching agents."""

from .adapters import BaseEmbedder, EmbeddingMode, create_embedder
from .errors import EmbeddingGenerationError, LiveGuideRAGError, ValidationError
from .models import EmbeddedChunk, SimilarityResult, TextChunk
from .pipelines import IndexingPipeline, RetrievalPipeline
from .retrieval import cosine_similarity, find_similar
from .splitters import chunk_text

__version__ = "0.1.0"

__all__ = [
    "BaseEmbedder",
    "EmbeddedChunk",
    "EmbeddingGenerationError",
    "EmbeddingMode",
    "IndexingPipeline",
    "LiveGuideRAGError",
    "RetrievalPipeline",
    "SimilarityResult",
    "TextChunk",
    "ValidationError",
    "chunk_text",
    "cosine_similarity",
    "create_embedder",
    "find_similar",
]
