from pathlib import Path
from typing import Any

import pytest

from liveguide_rag.adapters.base import BaseEmbedder
from liveguide_rag.errors import EmbeddingGenerationError
from liveguide_rag.splitters import SentenceBoundarySplitter
from liveguide_rag.stores import JsonChunkStore

KEYWORDS = ["sleep", "career", "stress"]


class MockEmbedder(BaseEmbedder):
    """Mock embedder for testing."""

    def __init__(self, dimension: int = 1536, **kwargs: Any):
        super().__init__("mock-embedder", **kwargs)
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        return [0.1] * self._dimension

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [[0.1] * self._dimension for _ in texts]


class KeywordEmbedder(BaseEmbedder):
    """Counts keyword occurrences, so related texts point the same way.

    Uses the base class batch implementation.
    """

    def __init__(self, **kwargs: Any):
        super().__init__("keyword-embedder", **kwargs)
        self.calls: list[str] = []

    @property
    def dimension(self) -> int:
        return len(KEYWORDS)

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        lowered = text.lower()
        return [float(lowered.count(keyword)) for keyword in KEYWORDS]


class FailingEmbedder(BaseEmbedder):
    """Raises for any text containing ``fail_on``."""

    def __init__(self, fail_on: str = "", error: Exception | None = None, **kwargs: Any):
        super().__init__("failing-embedder", **kwargs)
        self.fail_on = fail_on
        self.error = error or EmbeddingGenerationError("provider unavailable")

    @property
    def dimension(self) -> int:
        return 3

    def embed(self, text: str) -> list[float]:
        if self.fail_on in text:
            raise self.error
        return [1.0, 0.0, 0.0]


@pytest.fixture
def mock_embedder() -> MockEmbedder:
    return MockEmbedder(dimension=128)


@pytest.fixture
def keyword_embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def splitter() -> SentenceBoundarySplitter:
    return SentenceBoundarySplitter(chunk_size=80, chunk_overlap=10)


@pytest.fixture
def memory_store() -> JsonChunkStore:
    return JsonChunkStore(dimension=len(KEYWORDS))


@pytest.fixture
def temp_storage_dir(tmp_path: Path) -> Path:
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return storage_dir


@pytest.fixture
def temp_store(temp_storage_dir: Path, mock_embedder: MockEmbedder) -> JsonChunkStore:
    return JsonChunkStore(
        dimension=mock_embedder.dimension,
        path=temp_storage_dir / "chunks.json",
    )


@pytest.fixture
def temp_config(tmp_path: Path) -> Path:
    config_content = """
[embedding]
provider = "stub"
model = "stub-model"
dimension = 16
seed = 7

[chunking]
max_chunk_size = 200
overlap_size = 20

[indexing]
batch_size = 4

[retrieval]
top_k = 3
threshold = -1.0

[storage]
directory = "storage"

[logging]
level = "WARNING"
"""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_content)
    return config_path
