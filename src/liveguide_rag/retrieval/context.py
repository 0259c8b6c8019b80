"""Turning ranked results into agent context, and conversations into queries."""

import logging
import re
from typing import Optional, Sequence

import tiktoken

from ..models import SimilarityResult

logger = logging.getLogger(__name__)

CONTEXT_PREAMBLE = "Based on the following knowledge from the coaching database:"
CONTEXT_CLOSING = (
    "Use this information to provide accurate and helpful coaching guidance."
)
DEFAULT_EXCERPT_LENGTH = 200
EXCERPT_LEAD = 50
MAX_EXTRACTED_QUERIES = 3

QUESTION_PATTERNS = [
    re.compile(r"how (?:do|can|should) (?:I|you|we) (.+?)[?.]?$", re.I | re.M),
    re.compile(r"what (?:is|are|should) (.+?)[?.]?$", re.I | re.M),
    re.compile(r"tell me about (.+?)[?.]?$", re.I | re.M),
    re.compile(r"I (?:want|need|would like) (?:to|help with) (.+?)[?.]?$", re.I | re.M),
]

TOPIC_KEYWORDS = [
    "career",
    "goals",
    "wellness",
    "health",
    "personal growth",
    "motivation",
    "productivity",
    "relationships",
    "stress",
    "work-life balance",
    "leadership",
    "communication",
]

ENCODING_CACHE: dict[str, tiktoken.Encoding] = {}


def get_tokenizer(model: str) -> tiktoken.Encoding:
    if model not in ENCODING_CACHE:
        try:
            ENCODING_CACHE[model] = tiktoken.encoding_for_model(model)
        except KeyError:
            ENCODING_CACHE[model] = tiktoken.get_encoding("cl100k_base")
    return ENCODING_CACHE[model]


def count_tokens(text: str, model: str = "gpt-4") -> int:
    return len(get_tokenizer(model).encode(text))


def get_excerpt(
    content: str, query: str, max_length: int = DEFAULT_EXCERPT_LENGTH
) -> str:
    """Cut an excerpt of ``content`` around the earliest query term.

    Falls back to the start of the content when no term occurs. Elided ends
    are marked with ``...``.
    """
    content_lower = content.lower()
    positions = [
        content_lower.find(term) for term in query.lower().split() if term in content_lower
    ]

    if not positions:
        suffix = "..." if len(content) > max_length else ""
        return content[:max_length] + suffix

    first = min(positions)
    start = max(0, first - EXCERPT_LEAD)
    end = min(len(content), first + max_length - EXCERPT_LEAD)

    excerpt = content[start:end]
    if start > 0:
        excerpt = "..." + excerpt
    if end < len(content):
        excerpt = excerpt + "..."
    return excerpt


def _result_title(result: SimilarityResult) -> str:
    metadata = result.metadata
    return str(metadata.get("title") or metadata.get("document_id") or result.id)


def format_knowledge_context(
    results: Sequence[SimilarityResult],
    max_context_tokens: Optional[int] = None,
    model: str = "gpt-4",
) -> str:
    """Render ranked results as a numbered knowledge block for an agent prompt.

    With ``max_context_tokens`` set, results are added best first until the
    next one would exceed the budget.
    """
    if not results:
        return ""

    parts: list[str] = []
    used_tokens = 0
    for index, result in enumerate(results, start=1):
        part = f"[Knowledge {index}] {_result_title(result)}\n{result.text}\n---"
        if max_context_tokens is not None:
            part_tokens = count_tokens(part, model)
            if used_tokens + part_tokens > max_context_tokens:
                logger.warning(
                    f"Context truncated to {len(parts)}/{len(results)} results "
                    f"({used_tokens} tokens, limit: {max_context_tokens})"
                )
                break
            used_tokens += part_tokens
        parts.append(part)

    if not parts:
        return ""

    body = "\n\n".join(parts)
    return f"{CONTEXT_PREAMBLE}\n\n{body}\n\n{CONTEXT_CLOSING}"


def extract_queries(conversation: str, limit: int = MAX_EXTRACTED_QUERIES) -> list[str]:
    """Pull candidate search queries out of conversation text.

    Question phrasings ("how can I ...", "tell me about ...") come first,
    then any coaching topic keywords mentioned. Duplicates are dropped.
    """
    queries: list[str] = []

    for pattern in QUESTION_PATTERNS:
        for match in pattern.finditer(conversation):
            query = match.group(1).strip()
            if query:
                queries.append(query)

    lowered = conversation.lower()
    queries.extend(keyword for keyword in TOPIC_KEYWORDS if keyword in lowered)

    return list(dict.fromkeys(queries))[:limit]
