from .context import (
    count_tokens,
    extract_queries,
    format_knowledge_context,
    get_excerpt,
)
from .similarity import (
    DEFAULT_THRESHOLD,
    DEFAULT_TOP_K,
    cosine_similarity,
    find_similar,
)

__all__ = [
    "DEFAULT_THRESHOLD",
    "DEFAULT_TOP_K",
    "cosine_similarity",
    "count_tokens",
    "extract_queries",
    "find_similar",
    "format_knowledge_context",
    "get_excerpt",
]
