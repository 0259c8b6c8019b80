import logging
from pathlib import Path
from typing import Any, Optional

from ..adapters import BaseEmbedder
from ..config import get_config_value
from ..errors import LiveGuideRAGError
from ..models import ChunkMetadata, DocumentStatus, IndexingResult, TextChunk
from ..splitters import BaseTextSplitter, SentenceBoundarySplitter
from ..stores import BaseChunkStore
from .base import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_KNOWLEDGE_BASE,
    create_embedder_from_config,
    create_store_from_config,
)

logger = logging.getLogger(__name__)


class IndexingPipeline:
    """Pipeline for chunking documents, embedding the chunks and storing them.

    Supports dependency injection; ``from_config`` wires the defaults.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        splitter: BaseTextSplitter,
        store: BaseChunkStore,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.embedder = embedder
        self.splitter = splitter
        self.store = store
        self.batch_size = batch_size

    @classmethod
    def from_config(cls, config: dict[str, Any], config_path: Path) -> "IndexingPipeline":
        """Create pipeline from configuration dictionary."""
        embedder = create_embedder_from_config(config)

        chunk_size = get_config_value(config, "chunking.max_chunk_size", DEFAULT_CHUNK_SIZE)
        chunk_overlap = get_config_value(
            config, "chunking.overlap_size", DEFAULT_CHUNK_OVERLAP
        )
        splitter = SentenceBoundarySplitter(
            chunk_size=chunk_size, chunk_overlap=chunk_overlap
        )

        batch_size = get_config_value(config, "indexing.batch_size", DEFAULT_BATCH_SIZE)

        return cls(
            embedder=embedder,
            splitter=splitter,
            store=create_store_from_config(config, config_path, embedder),
            batch_size=batch_size,
        )

    def _embed_chunks(self, chunks: list[TextChunk]) -> list[list[float]]:
        """Embed chunk texts batch by batch. Any failure fails the document."""
        embeddings: list[list[float]] = []
        for i in range(0, len(chunks), self.batch_size):
            batch = chunks[i : i + self.batch_size]
            embeddings.extend(self.embedder.embed_batch([c.text for c in batch]))
            logger.debug(f"Embedded batch {i // self.batch_size + 1}: {len(batch)} chunks")
        return embeddings

    def index_document(
        self,
        document_id: str,
        text: str,
        knowledge_base_id: str = DEFAULT_KNOWLEDGE_BASE,
        metadata: Optional[dict[str, Any]] = None,
        force: bool = False,
    ) -> IndexingResult:
        """Chunk, embed and store one document, then mark it indexed.

        A document already indexed into the same knowledge base is skipped
        unless ``force`` is set. Indexing it into another knowledge base moves
        its chunks there. If embedding or storing fails the document is marked
        failed, its previous chunks are left untouched and the error is
        re-raised.

        Raises:
            EmbeddingGenerationError: If the embedder fails on any chunk.
            ValidationError: If the embeddings do not fit the store.
        """
        stored_knowledge_base = self.store.get_knowledge_base(document_id)
        if (
            not force
            and self.store.get_status(document_id) is DocumentStatus.INDEXED
            and stored_knowledge_base == knowledge_base_id
        ):
            logger.info(f"Document {document_id} already indexed, skipping")
            return IndexingResult(
                document_id=document_id,
                knowledge_base_id=knowledge_base_id,
                status=DocumentStatus.INDEXED,
                skipped=True,
            )
        if stored_knowledge_base not in (None, knowledge_base_id):
            logger.info(
                f"Moving document {document_id} from {stored_knowledge_base} "
                f"to {knowledge_base_id}"
            )

        chunks = self.splitter.split(text)
        logger.info(f"Split document {document_id} into {len(chunks)} chunks")

        base_metadata = dict(metadata or {})
        metadata_list = [
            {
                **base_metadata,
                **ChunkMetadata(
                    document_id=document_id,
                    chunk_index=i,
                    total_chunks=len(chunks),
                    start_char=chunk.start_offset,
                    end_char=chunk.end_offset,
                ).model_dump(),
                "embedding_mode": self.embedder.mode.value,
            }
            for i, chunk in enumerate(chunks)
        ]

        try:
            embeddings = self._embed_chunks(chunks)
            self.store.add(
                document_id,
                knowledge_base_id,
                [c.text for c in chunks],
                embeddings,
                metadata_list,
            )
        except (LiveGuideRAGError, OSError) as e:
            logger.error(f"Indexing failed for document {document_id}: {e}")
            self.store.set_status(document_id, DocumentStatus.FAILED)
            raise

        if self.embedder.is_stub:
            logger.warning(f"Document {document_id} indexed with stub embeddings")
        self.store.set_status(document_id, DocumentStatus.INDEXED)

        return IndexingResult(
            document_id=document_id,
            knowledge_base_id=knowledge_base_id,
            status=DocumentStatus.INDEXED,
            chunks=len(chunks),
        )

    def index_file(
        self,
        file_path: Path,
        document_id: Optional[str] = None,
        knowledge_base_id: str = DEFAULT_KNOWLEDGE_BASE,
        force: bool = False,
    ) -> IndexingResult:
        """Index a UTF-8 text file; the document id defaults to the file name."""
        file_path = Path(file_path)
        text = file_path.read_text(encoding="utf-8")
        return self.index_document(
            document_id or file_path.name,
            text,
            knowledge_base_id=knowledge_base_id,
            metadata={"title": file_path.stem, "source": str(file_path)},
            force=force,
        )
