import logging
from pathlib import Path
from typing import Any, Optional

from ..adapters import BaseEmbedder
from ..config import find_config_path, get_config_value, load_config
from ..models import KnowledgeContext, SimilarityResult
from ..retrieval import (
    DEFAULT_THRESHOLD,
    DEFAULT_TOP_K,
    extract_queries,
    find_similar,
    format_knowledge_context,
)
from ..stores import BaseChunkStore
from .base import DEFAULT_KNOWLEDGE_BASE, create_embedder_from_config, create_store_from_config

logger = logging.getLogger(__name__)

ENRICHMENT_TOP_K = 3


class RetrievalPipeline:
    """Pipeline for embedding a query and ranking stored chunks against it.

    Supports dependency injection for flexible composition.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        store: BaseChunkStore,
        top_k: int = DEFAULT_TOP_K,
        threshold: float = DEFAULT_THRESHOLD,
        max_context_tokens: Optional[int] = None,
    ):
        self.embedder = embedder
        self.store = store
        self.top_k = top_k
        self.threshold = threshold
        self.max_context_tokens = max_context_tokens

    @classmethod
    def from_config(cls, config: dict[str, Any], config_path: Path) -> "RetrievalPipeline":
        """Create pipeline from configuration dictionary."""
        embedder = create_embedder_from_config(config)

        return cls(
            embedder=embedder,
            store=create_store_from_config(config, config_path, embedder),
            top_k=get_config_value(config, "retrieval.top_k", DEFAULT_TOP_K),
            threshold=get_config_value(config, "retrieval.threshold", DEFAULT_THRESHOLD),
            max_context_tokens=get_config_value(config, "retrieval.max_context_tokens"),
        )

    def retrieve(
        self,
        query: str,
        knowledge_base_id: str = DEFAULT_KNOWLEDGE_BASE,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> list[SimilarityResult]:
        """Retrieve the chunks of a knowledge base most similar to a query.

        Embedding errors propagate; no unranked results are returned in
        their place.
        """
        k = top_k if top_k is not None else self.top_k
        min_similarity = threshold if threshold is not None else self.threshold
        logger.info(f"Embedding query: {query[:50]}...")

        query_embedding = self.embedder.embed(query)
        if self.embedder.is_stub:
            logger.warning("Query embedded with stub embeddings; ranking is not meaningful")

        corpus = self.store.get_corpus(knowledge_base_id)
        results = find_similar(query_embedding, corpus, top_k=k, threshold=min_similarity)

        logger.info(
            f"Found {len(results)} results in {len(corpus)} chunks of {knowledge_base_id}"
        )
        return results

    def search(
        self,
        query: str,
        knowledge_base_id: str = DEFAULT_KNOWLEDGE_BASE,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> KnowledgeContext:
        """Retrieve results and format them as agent context."""
        results = self.retrieve(query, knowledge_base_id, top_k=top_k, threshold=threshold)
        return KnowledgeContext(
            query=query,
            results=results,
            formatted_context=format_knowledge_context(
                results, max_context_tokens=self.max_context_tokens
            ),
        )

    def enrich_metadata(
        self,
        metadata: dict[str, Any],
        conversation: str,
        knowledge_base_id: str = DEFAULT_KNOWLEDGE_BASE,
    ) -> dict[str, Any]:
        """Add knowledge found for a conversation to an agent's metadata.

        Returns the metadata unchanged when the conversation yields no queries.
        """
        queries = extract_queries(conversation)
        if not queries:
            return metadata

        contexts = [
            self.search(query, knowledge_base_id, top_k=ENRICHMENT_TOP_K)
            for query in queries
        ]
        combined = "\n\n".join(
            context.formatted_context for context in contexts if context.formatted_context
        )

        return {
            **metadata,
            "knowledge_context": combined,
            "knowledge_queries": queries,
        }


def get_retrieval_pipeline(config_path: Optional[Path] = None) -> RetrievalPipeline:
    """Create a retrieval pipeline from a config file."""
    config_path = find_config_path(config_path)
    config = load_config(config_path)
    return RetrievalPipeline.from_config(config, config_path)
