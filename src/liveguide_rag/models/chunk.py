"""Data models for LiveGuide knowledge retrieval."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TextChunk(BaseModel):
    """A trimmed segment of a source document.

    Attributes:
        text: The chunk text, without surrounding whitespace.
        start_offset: Offset of the first character in the source document.
        end_offset: Offset one past the last character in the source document.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    start_offset: int = Field(ge=0)
    end_offset: int

    @model_validator(mode="after")
    def _check_offsets(self) -> "TextChunk":
        if self.end_offset <= self.start_offset:
            raise ValueError("end_offset must be greater than start_offset")
        return self


class ChunkMetadata(BaseModel):
    """Position of a chunk within its source document."""

    document_id: str
    chunk_index: int
    total_chunks: int
    start_char: int
    end_char: int


class EmbeddedChunk(BaseModel):
    """A chunk paired with its embedding, as held by a chunk store.

    Attributes:
        id: Identifier assigned by the store.
        text: The chunk text, kept for result display.
        embedding: Dense vector produced by the embedder.
        metadata: Store-side metadata (document id, knowledge base, position).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    embedding: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class SimilarityResult(BaseModel):
    """A corpus entry matched against a query, with its cosine similarity."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    similarity: float = Field(ge=-1.0, le=1.0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class KnowledgeContext(BaseModel):
    """Ranked results for a query plus the context block handed to an agent."""

    query: str
    results: list[SimilarityResult] = Field(default_factory=list)
    formatted_context: str = ""


class DocumentStatus(str, Enum):
    PENDING = "pending"
    INDEXED = "indexed"
    FAILED = "failed"


class IndexingResult(BaseModel):
    """Outcome of indexing a single document."""

    document_id: str
    knowledge_base_id: str
    status: DocumentStatus
    chunks: int = 0
    skipped: bool = False
