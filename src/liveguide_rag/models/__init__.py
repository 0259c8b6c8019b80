from .chunk import (
    ChunkMetadata,
    DocumentStatus,
    EmbeddedChunk,
    IndexingResult,
    KnowledgeContext,
    SimilarityResult,
    TextChunk,
)

__all__ = [
    "ChunkMetadata",
    "DocumentStatus",
    "EmbeddedChunk",
    "IndexingResult",
    "KnowledgeContext",
    "SimilarityResult",
    "TextChunk",
]
