import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Any, Optional

from ..errors import EmbeddingGenerationError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class EmbeddingMode(str, Enum):
    """Whether vectors come from a real model or a development stand-in."""

    LIVE = "live"
    STUB = "stub"


def validate_text(text: str) -> None:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Cannot embed empty text")


class BaseEmbedder(ABC):
    """Abstract base class for embedding providers."""

    mode: EmbeddingMode = EmbeddingMode.LIVE

    def __init__(self, model: str, max_workers: int = DEFAULT_MAX_WORKERS, **kwargs: Any):
        self.model = model
        self.max_workers = max_workers
        self.kwargs = kwargs

    @property
    @abstractmethod
    def dimension(self) -> int:
        pass

    @property
    def is_stub(self) -> bool:
        return self.mode is EmbeddingMode.STUB

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        pass

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed each text independently, in parallel, preserving input order.

        The first failure cancels the remaining work and fails the batch.

        Raises:
            ValidationError: If any text is empty.
            EmbeddingGenerationError: If any embedding call fails.
        """
        if not texts:
            return []
        for text in texts:
            validate_text(text)

        results: list[Optional[list[float]]] = [None] * len(texts)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.embed, text): i for i, text in enumerate(texts)
            }
            for future in as_completed(futures):
                idx = futures[future]
                try:
                    results[idx] = future.result()
                except Exception as e:
                    for pending in futures:
                        pending.cancel()
                    logger.error(
                        f"Embedding failed at index {idx} of {len(texts)} texts: {e}"
                    )
                    if isinstance(e, EmbeddingGenerationError):
                        raise
                    raise EmbeddingGenerationError(
                        f"Embedding failed at index {idx} of {len(texts)} texts: {e}"
                    ) from e

        return results  # type: ignore
