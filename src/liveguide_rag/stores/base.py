from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models import DocumentStatus, EmbeddedChunk


class BaseChunkStore(ABC):
    """Abstract base class for chunk corpus stores."""

    def __init__(self, dimension: int, **kwargs: Any):
        self.dimension = dimension

    @abstractmethod
    def add(
        self,
        document_id: str,
        knowledge_base_id: str,
        texts: list[str],
        embeddings: list[list[float]],
        metadata_list: Optional[list[dict[str, Any]]] = None,
    ) -> list[EmbeddedChunk]:
        """Store a document's chunks, replacing any it already had."""
        pass

    @abstractmethod
    def get_corpus(self, knowledge_base_id: str) -> list[EmbeddedChunk]:
        """Return every chunk stored for a knowledge base."""
        pass

    @abstractmethod
    def remove_document(self, document_id: str) -> int:
        """Remove a document's chunks. Returns the number removed."""
        pass

    @abstractmethod
    def get_status(self, document_id: str) -> DocumentStatus:
        pass

    @abstractmethod
    def get_knowledge_base(self, document_id: str) -> Optional[str]:
        """Return the knowledge base a document's chunks are stored under."""
        pass

    @abstractmethod
    def set_status(self, document_id: str, status: DocumentStatus) -> None:
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Delete all chunks and document statuses."""
        pass

    @property
    @abstractmethod
    def count(self) -> int:
        """Return the number of chunks in the store."""
        pass
