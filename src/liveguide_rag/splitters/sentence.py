from ..errors import ValidationError
from ..models import TextChunk
from .base import BaseTextSplitter

DEFAULT_MAX_CHUNK_SIZE = 1500
DEFAULT_OVERLAP_SIZE = 200

# Checked in order; the first acceptable marker wins even if a later one is closer.
SENTENCE_BOUNDARIES = (". ", "! ", "? ", "\n\n")
MIN_BOUNDARY_RATIO = 0.5


def _find_boundary(document: str, start: int, end: int, max_chunk_size: int) -> int:
    """Return the chunk end after the preferred boundary, or ``end`` if none fits."""
    earliest = start + max_chunk_size * MIN_BOUNDARY_RATIO
    for marker in SENTENCE_BOUNDARIES:
        # The marker may begin at ``end`` and run past it.
        index = document.rfind(marker, start, end + len(marker))
        if index != -1 and index >= earliest:
            return index + len(marker)
    return end


def chunk_text(
    document: str,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    overlap_size: int = DEFAULT_OVERLAP_SIZE,
) -> list[TextChunk]:
    """Split a document into overlapping chunks that prefer sentence boundaries.

    Each chunk targets ``max_chunk_size`` characters. When the chunk would end
    before the document does, it is cut after the last ``". "``, ``"! "``,
    ``"? "`` or ``"\\n\\n"`` (in that priority) that leaves at least half the
    target size; otherwise it is cut at the target size, mid-word if need be.
    Consecutive chunks share ``overlap_size`` characters of source text.

    Args:
        document: Text to split. An empty document yields no chunks.
        max_chunk_size: Target chunk length in characters.
        overlap_size: Characters re-read at the start of the next chunk.

    Returns:
        Chunks in document order, trimmed of surrounding whitespace.

    Raises:
        ValidationError: If the sizes are out of range.
    """
    if not isinstance(max_chunk_size, int) or max_chunk_size <= 0:
        raise ValidationError(
            f"max_chunk_size must be a positive integer, got {max_chunk_size!r}"
        )
    if not isinstance(overlap_size, int) or overlap_size < 0:
        raise ValidationError(
            f"overlap_size must be a non-negative integer, got {overlap_size!r}"
        )
    if overlap_size >= max_chunk_size:
        raise ValidationError(
            f"overlap_size ({overlap_size}) must be smaller than "
            f"max_chunk_size ({max_chunk_size})"
        )

    chunks: list[TextChunk] = []
    length = len(document)
    start = 0

    while start < length:
        end = start + max_chunk_size
        if end < length:
            end = _find_boundary(document, start, end, max_chunk_size)
        else:
            end = length

        raw = document[start:end]
        text = raw.strip()
        if text:
            chunk_start = start + len(raw) - len(raw.lstrip())
            chunks.append(
                TextChunk(
                    text=text,
                    start_offset=chunk_start,
                    end_offset=chunk_start + len(text),
                )
            )

        if end >= length:
            break

        next_start = end - overlap_size
        start = next_start if next_start > start else end

    return chunks


class SentenceBoundarySplitter(BaseTextSplitter):
    """Splitter that cuts on sentence and paragraph boundaries with overlap."""

    def __init__(
        self,
        chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_OVERLAP_SIZE,
    ):
        if not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ValidationError(
                f"chunk_size must be a positive integer, got {chunk_size!r}"
            )
        if not isinstance(chunk_overlap, int) or not 0 <= chunk_overlap < chunk_size:
            raise ValidationError(
                f"chunk_overlap must be in [0, {chunk_size}), got {chunk_overlap!r}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split(self, text: str) -> list[TextChunk]:
        return chunk_text(text, self.chunk_size, self.chunk_overlap)
