"""Exception types raised by the retrieval pipeline."""


class LiveGuideRAGError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(LiveGuideRAGError, ValueError):
    """Invalid input to a pure function.

    Raised for empty text passed to an embedder, an overlap that is not
    smaller than the chunk size, or vectors of different dimensionality
    compared during ranking. Never retried.
    """


class EmbeddingGenerationError(LiveGuideRAGError, RuntimeError):
    """A configured embedding provider failed to produce a vector."""
