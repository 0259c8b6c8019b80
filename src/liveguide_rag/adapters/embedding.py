import logging
import os
from typing import Any, Optional

import numpy as np
import openai
import requests
from openai import OpenAI

from ..errors import EmbeddingGenerationError
from .base import BaseEmbedder, EmbeddingMode, validate_text
from .utils import create_session_with_pooling, parse_embedding

logger = logging.getLogger(__name__)

EMBEDDING_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

DEFAULT_OPENAI_MODEL = "text-embedding-3-small"
DEFAULT_BATCH_SIZE = 100
DEFAULT_OLLAMA_DIMENSION = 768
DEFAULT_STUB_DIMENSION = 1536


class OpenAIEmbedder(BaseEmbedder):
    """OpenAI embedding provider."""

    def __init__(
        self,
        model: str = DEFAULT_OPENAI_MODEL,
        batch_size: int = DEFAULT_BATCH_SIZE,
        **kwargs: Any,
    ):
        api_key = kwargs.pop("api_key", None) or os.environ.get("OPENAI_API_KEY")
        base_url = kwargs.pop("base_url", None)
        # ``dimension`` is the config key; ``dimensions`` is the API parameter.
        dimension = kwargs.pop("dimension", None)
        dimensions = kwargs.pop("dimensions", None)
        if dimension is not None and dimensions is not None and dimension != dimensions:
            raise ValueError(
                f"Conflicting embedding dimension settings: {dimension} and {dimensions}"
            )
        self._dimension: Optional[int] = dimensions if dimensions is not None else dimension
        super().__init__(model, **kwargs)
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable required for openai provider"
            )

        self.client = OpenAI(api_key=api_key, base_url=base_url)
        self._batch_size = batch_size

    @property
    def dimension(self) -> int:
        return self._dimension or EMBEDDING_DIMENSIONS.get(self.model, 1536)

    def _create_embedding_params(self, input_data: str | list[str]) -> dict[str, Any]:
        """Build parameters for embedding API call."""
        params: dict[str, Any] = {"model": self.model, "input": input_data}
        if self._dimension is not None:
            params["dimensions"] = self._dimension
        return params

    def _request(self, input_data: str | list[str], expected: int) -> list[list[float]]:
        try:
            response = self.client.embeddings.create(
                **self._create_embedding_params(input_data)
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI embedding error: {e}")
            raise EmbeddingGenerationError(f"Failed to generate embedding: {e}") from e

        try:
            vectors = [list(item.embedding) for item in response.data]
        except (AttributeError, TypeError) as e:
            raise EmbeddingGenerationError(
                f"Malformed embedding response from {self.model}: {e}"
            ) from e
        if len(vectors) != expected or not all(vectors):
            raise EmbeddingGenerationError(
                f"Expected {expected} embeddings from {self.model}, "
                f"got {len(vectors)}"
            )
        return vectors

    def embed(self, text: str) -> list[float]:
        validate_text(text)
        return self._request(text, expected=1)[0]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts with one request per ``batch_size`` texts.

        Any failing request fails the whole batch.
        """
        if not texts:
            return []
        for text in texts:
            validate_text(text)

        results: list[list[float]] = []
        for i in range(0, len(texts), self._batch_size):
            batch = texts[i : i + self._batch_size]
            results.extend(self._request(batch, expected=len(batch)))
        return results


class OllamaEmbedder(BaseEmbedder):
    """Ollama local embedding provider with connection pooling."""

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        timeout: float = 30,
        **kwargs: Any,
    ):
        self._dimension = kwargs.pop("dimension", DEFAULT_OLLAMA_DIMENSION)
        super().__init__(model, **kwargs)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = create_session_with_pooling()

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        validate_text(text)
        try:
            response = self.session.post(
                f"{self.base_url}/api/embeddings",
                json={"model": self.model, "prompt": text},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return parse_embedding(response.json())
        except requests.exceptions.RequestException as e:
            logger.error(f"Ollama embedding request failed: {e}")
            raise EmbeddingGenerationError(f"Failed to generate embedding: {e}") from e
        except ValueError as e:
            raise EmbeddingGenerationError(
                f"Malformed embedding response from {self.model}: {e}"
            ) from e


class StubEmbedder(BaseEmbedder):
    """Development stand-in that returns pseudo-random vectors.

    Vectors carry no meaning, so similarity scores computed against them say
    nothing about retrieval quality. Every use is logged as a warning.
    """

    mode = EmbeddingMode.STUB

    def __init__(
        self,
        model: str = "stub",
        dimension: int = DEFAULT_STUB_DIMENSION,
        seed: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(model, **kwargs)
        self._dimension = dimension
        self._rng = np.random.default_rng(seed)
        logger.warning(
            f"Using stub embeddings ({dimension} dims); results are not meaningful"
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    def _random_vector(self) -> list[float]:
        return self._rng.uniform(-1.0, 1.0, self._dimension).tolist()

    def embed(self, text: str) -> list[float]:
        validate_text(text)
        logger.warning("Returning stub embedding for a single text")
        return self._random_vector()

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        for text in texts:
            validate_text(text)
        logger.warning(f"Returning stub embeddings for {len(texts)} texts")
        return [self._random_vector() for _ in texts]
