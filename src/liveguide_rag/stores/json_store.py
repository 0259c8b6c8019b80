import fcntl
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Optional

from ..errors import ValidationError
from ..models import DocumentStatus, EmbeddedChunk
from .base import BaseChunkStore

logger = logging.getLogger(__name__)


class JsonChunkStore(BaseChunkStore):
    """Chunk store kept in memory and optionally persisted to a JSON file.

    Embeddings are stored alongside their text so the whole corpus for a
    knowledge base can be handed to the retriever as-is. Every write takes an
    exclusive file lock and re-reads the file first, so several processes
    can share one store without overwriting each other's documents.
    """

    def __init__(self, dimension: int, path: Optional[Path] = None):
        super().__init__(dimension)
        self._path = Path(path) if path else None

        self._chunks: list[dict[str, Any]] = []
        # document_id -> {"status": ..., "knowledge_base_id": ...}
        self._documents: dict[str, dict[str, str]] = {}
        self._reload()

    def _reload(self) -> None:
        data = self._load()
        self._chunks = data.get("chunks", [])
        self._documents = data.get("documents", {})

    def _load(self) -> dict[str, Any]:
        if self._path and self._path.exists():
            with open(self._path, "r") as f:
                data = json.load(f)
            stored_dimension = data.get("dimension")
            if stored_dimension is not None and stored_dimension != self.dimension:
                raise ValidationError(
                    f"Store at {self._path} holds {stored_dimension}-dim embeddings, "
                    f"expected {self.dimension}"
                )
            return data
        return {}

    def _acquire_lock(self) -> None:
        if self._path:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._lock_file = open(self._path.with_suffix(".lock"), "w")
            fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_EX)
            self._reload()

    def _release_lock(self) -> None:
        if hasattr(self, "_lock_file"):
            fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
            self._lock_file.close()
            del self._lock_file

    def save(self) -> None:
        if self._path:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(".tmp")
            with open(tmp_path, "w") as f:
                json.dump(
                    {
                        "dimension": self.dimension,
                        "documents": self._documents,
                        "chunks": self._chunks,
                    },
                    f,
                    indent=2,
                )
            os.replace(tmp_path, self._path)

    def _remove(self, document_id: str) -> int:
        before = len(self._chunks)
        self._chunks = [c for c in self._chunks if c["document_id"] != document_id]
        return before - len(self._chunks)

    def add(
        self,
        document_id: str,
        knowledge_base_id: str,
        texts: list[str],
        embeddings: list[list[float]],
        metadata_list: Optional[list[dict[str, Any]]] = None,
    ) -> list[EmbeddedChunk]:
        if len(texts) != len(embeddings):
            raise ValidationError(
                f"Got {len(texts)} texts but {len(embeddings)} embeddings"
            )
        for embedding in embeddings:
            if len(embedding) != self.dimension:
                raise ValidationError(
                    f"Embedding has dimension {len(embedding)}, "
                    f"store expects {self.dimension}"
                )
        if metadata_list is None:
            metadata_list = [{} for _ in texts]

        self._acquire_lock()
        try:
            removed = self._remove(document_id)
            if removed:
                logger.info(f"Replaced {removed} chunks for document {document_id}")

            added = []
            for text, embedding, meta in zip(texts, embeddings, metadata_list):
                record = {
                    "id": uuid.uuid4().hex,
                    "document_id": document_id,
                    "knowledge_base_id": knowledge_base_id,
                    "text": text,
                    "embedding": [float(v) for v in embedding],
                    "metadata": dict(meta),
                }
                self._chunks.append(record)
                added.append(self._to_chunk(record))

            self._documents.setdefault(document_id, {})[
                "knowledge_base_id"
            ] = knowledge_base_id
            self.save()
        finally:
            self._release_lock()

        return added

    @staticmethod
    def _to_chunk(record: dict[str, Any]) -> EmbeddedChunk:
        return EmbeddedChunk(
            id=record["id"],
            text=record["text"],
            embedding=record["embedding"],
            metadata={
                "document_id": record["document_id"],
                "knowledge_base_id": record["knowledge_base_id"],
                **record["metadata"],
            },
        )

    def get_corpus(self, knowledge_base_id: str) -> list[EmbeddedChunk]:
        return [
            self._to_chunk(record)
            for record in self._chunks
            if record["knowledge_base_id"] == knowledge_base_id
        ]

    def remove_document(self, document_id: str) -> int:
        self._acquire_lock()
        try:
            removed = self._remove(document_id)
            self._documents.pop(document_id, None)
            self.save()
        finally:
            self._release_lock()
        return removed

    def get_status(self, document_id: str) -> DocumentStatus:
        entry = self._documents.get(document_id, {})
        return DocumentStatus(entry.get("status", DocumentStatus.PENDING.value))

    def get_knowledge_base(self, document_id: str) -> Optional[str]:
        return self._documents.get(document_id, {}).get("knowledge_base_id")

    def set_status(self, document_id: str, status: DocumentStatus) -> None:
        self._acquire_lock()
        try:
            self._documents.setdefault(document_id, {})["status"] = DocumentStatus(
                status
            ).value
            self.save()
        finally:
            self._release_lock()

    def delete_all(self) -> None:
        self._acquire_lock()
        try:
            self._chunks = []
            self._documents = {}
            self.save()
        finally:
            self._release_lock()

    @property
    def count(self) -> int:
        return len(self._chunks)
