from unittest.mock import MagicMock, patch

import openai
import pytest
import requests

from liveguide_rag.adapters import (
    EmbeddingMode,
    OllamaEmbedder,
    OpenAIEmbedder,
    StubEmbedder,
    create_embedder,
    list_embedder_providers,
)
from liveguide_rag.errors import EmbeddingGenerationError, ValidationError


def _openai_response(*vectors: list[float]) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=vector) for vector in vectors]
    return response


class TestOpenAIEmbedder:
    def test_embed_returns_embedding(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _openai_response([0.1, 0.2, 0.3])

        embedder = OpenAIEmbedder(model="text-embedding-3-small", api_key="test-key")
        embedder.client = mock_client

        result = embedder.embed("test text")

        assert result == [0.1, 0.2, 0.3]
        mock_client.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small", input="test text"
        )

    def test_embed_batch_returns_embeddings_in_order(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _openai_response(
            [0.1, 0.2, 0.3], [0.4, 0.5, 0.6]
        )

        embedder = OpenAIEmbedder(model="text-embedding-3-small", api_key="test-key")
        embedder.client = mock_client

        result = embedder.embed_batch(["text 1", "text 2"])

        assert result == [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]
        mock_client.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small", input=["text 1", "text 2"]
        )

    def test_embed_batch_splits_requests_by_batch_size(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.side_effect = [
            _openai_response([1.0], [2.0]),
            _openai_response([3.0]),
        ]

        embedder = OpenAIEmbedder(api_key="test-key", batch_size=2)
        embedder.client = mock_client

        assert embedder.embed_batch(["a", "b", "c"]) == [[1.0], [2.0], [3.0]]
        assert mock_client.embeddings.create.call_count == 2

    def test_dimensions_passed_when_configured(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _openai_response([0.5] * 4)

        embedder = OpenAIEmbedder(api_key="test-key", dimensions=4)
        embedder.client = mock_client
        embedder.embed("text")

        assert embedder.dimension == 4
        assert mock_client.embeddings.create.call_args.kwargs["dimensions"] == 4

    def test_dimension_key_from_config_is_honoured(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _openai_response([0.5] * 256)

        embedder = OpenAIEmbedder(
            model="text-embedding-3-large", api_key="test-key", dimension=256
        )
        embedder.client = mock_client
        embedder.embed("text")

        assert embedder.dimension == 256
        assert "dimension" not in embedder.kwargs
        assert mock_client.embeddings.create.call_args.kwargs["dimensions"] == 256

    def test_conflicting_dimension_keys_rejected(self) -> None:
        with pytest.raises(ValueError, match="dimension"):
            OpenAIEmbedder(api_key="test-key", dimension=256, dimensions=512)

    def test_api_error_raises_embedding_error(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.side_effect = openai.OpenAIError("quota exceeded")

        embedder = OpenAIEmbedder(api_key="test-key")
        embedder.client = mock_client

        with pytest.raises(EmbeddingGenerationError) as exc_info:
            embedder.embed("test text")
        assert isinstance(exc_info.value.__cause__, openai.OpenAIError)

    def test_failing_request_fails_whole_batch(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.side_effect = [
            _openai_response([1.0]),
            openai.OpenAIError("network down"),
        ]

        embedder = OpenAIEmbedder(api_key="test-key", batch_size=1)
        embedder.client = mock_client

        with pytest.raises(EmbeddingGenerationError):
            embedder.embed_batch(["a", "b"])

    def test_missing_embeddings_raise(self) -> None:
        mock_client = MagicMock()
        mock_client.embeddings.create.return_value = _openai_response()

        embedder = OpenAIEmbedder(api_key="test-key")
        embedder.client = mock_client

        with pytest.raises(EmbeddingGenerationError, match="Expected 1 embeddings"):
            embedder.embed("test text")

    def test_empty_text_raises_validation_error(self) -> None:
        mock_client = MagicMock()
        embedder = OpenAIEmbedder(api_key="test-key")
        embedder.client = mock_client

        with pytest.raises(ValidationError):
            embedder.embed("   ")
        mock_client.embeddings.create.assert_not_called()

    def test_missing_api_key_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            OpenAIEmbedder()

    def test_dimension_returns_correct_value(self) -> None:
        embedder = OpenAIEmbedder(model="text-embedding-3-small", api_key="test-key")
        assert embedder.dimension == 1536
        assert embedder.mode is EmbeddingMode.LIVE

        embedder_large = OpenAIEmbedder(
            model="text-embedding-3-large", api_key="test-key"
        )
        assert embedder_large.dimension == 3072


class TestOllamaEmbedder:
    def test_embed_returns_embedding(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_response = MagicMock()
            mock_response.json.return_value = {"embedding": [0.1, 0.2, 0.3]}
            mock_response.raise_for_status = MagicMock()
            mock_post.return_value = mock_response

            embedder = OllamaEmbedder(model="nomic-embed-text")
            result = embedder.embed("test text")

            assert result == [0.1, 0.2, 0.3]
            call_args = mock_post.call_args
            assert call_args[1]["json"]["model"] == "nomic-embed-text"
            assert call_args[1]["json"]["prompt"] == "test text"

    def test_embed_batch_runs_each_text(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_response = MagicMock()
            mock_response.json.return_value = {"embedding": [0.1] * 768}
            mock_post.return_value = mock_response

            embedder = OllamaEmbedder(model="nomic-embed-text")
            result = embedder.embed_batch(["text 1", "text 2", "text 3"])

            assert len(result) == 3
            assert all(len(emb) == 768 for emb in result)
            assert mock_post.call_count == 3

    def test_connection_error_raises_embedding_error(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_post.side_effect = requests.exceptions.ConnectionError("refused")

            embedder = OllamaEmbedder(model="nomic-embed-text")

            with pytest.raises(EmbeddingGenerationError):
                embedder.embed("test text")

    def test_http_error_raises_embedding_error(self) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_response = MagicMock()
            mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(
                "500 Server Error"
            )
            mock_post.return_value = mock_response

            embedder = OllamaEmbedder(model="nomic-embed-text")

            with pytest.raises(EmbeddingGenerationError):
                embedder.embed("test text")

    @pytest.mark.parametrize(
        "body",
        [
            {"error": "model not found"},
            {"embedding": []},
            {"embedding": [0.1, None, 0.3]},
            {"embedding": [[0.1, 0.2]]},
        ],
    )
    def test_malformed_body_raises_embedding_error(self, body: dict) -> None:
        with patch("requests.Session.post") as mock_post:
            mock_response = MagicMock()
            mock_response.json.return_value = body
            mock_post.return_value = mock_response

            embedder = OllamaEmbedder(model="nomic-embed-text")

            with pytest.raises(EmbeddingGenerationError, match="embedding"):
                embedder.embed("test text")

    def test_batch_fails_when_one_text_fails(self) -> None:
        def side_effect(*args, **kwargs):
            if kwargs["json"]["prompt"] == "text 2":
                raise requests.exceptions.ConnectionError("dropped")
            mock_response = MagicMock()
            mock_response.json.return_value = {"embedding": [0.1] * 768}
            return mock_response

        with patch("requests.Session.post", side_effect=side_effect):
            embedder = OllamaEmbedder(model="nomic-embed-text", max_workers=1)

            with pytest.raises(EmbeddingGenerationError):
                embedder.embed_batch(["text 1", "text 2", "text 3"])

    def test_dimension_returns_configured_value(self) -> None:
        embedder = OllamaEmbedder(model="nomic-embed-text", dimension=1024)
        assert embedder.dimension == 1024


class TestStubEmbedder:
    def test_vectors_have_configured_dimension(self) -> None:
        embedder = StubEmbedder(dimension=32, seed=1)

        vector = embedder.embed("hello")
        batch = embedder.embed_batch(["a", "b"])

        assert len(vector) == 32
        assert all(isinstance(v, float) for v in vector)
        assert all(-1.0 <= v < 1.0 for v in vector)
        assert [len(v) for v in batch] == [32, 32]

    def test_default_dimension_matches_openai_small(self) -> None:
        assert StubEmbedder().dimension == 1536

    def test_mode_is_stub(self) -> None:
        embedder = StubEmbedder(dimension=4)
        assert embedder.mode is EmbeddingMode.STUB
        assert embedder.is_stub

    def test_use_is_logged_as_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        embedder = StubEmbedder(dimension=4)
        with caplog.at_level("WARNING"):
            embedder.embed("hello")
        assert any("stub" in record.message for record in caplog.records)

    def test_empty_text_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            StubEmbedder(dimension=4).embed("")


class TestRegistry:
    def test_providers_registered(self) -> None:
        assert set(list_embedder_providers()) >= {"openai", "ollama", "stub"}

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown embedder provider"):
            create_embedder("nonexistent")

    def test_auto_without_key_uses_stub(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        embedder = create_embedder("auto", dimension=8)
        assert isinstance(embedder, StubEmbedder)

    def test_auto_with_key_uses_openai(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "test-key")
        embedder = create_embedder("auto")
        assert isinstance(embedder, OpenAIEmbedder)

    def test_explicit_openai_never_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError):
            create_embedder("openai")
