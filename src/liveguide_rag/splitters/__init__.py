from .base import BaseTextSplitter
from .sentence import (
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_OVERLAP_SIZE,
    SentenceBoundarySplitter,
    chunk_text,
)

__all__ = [
    "BaseTextSplitter",
    "SentenceBoundarySplitter",
    "chunk_text",
    "DEFAULT_MAX_CHUNK_SIZE",
    "DEFAULT_OVERLAP_SIZE",
]
