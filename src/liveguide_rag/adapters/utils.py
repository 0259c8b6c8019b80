"""Shared utilities for adapter implementations."""

import requests
from urllib3.util.retry import Retry

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def create_session_with_pooling(
    pool_connections: int = 10,
    pool_maxsize: int = 20,
    max_retries: int = 3,
    backoff_factor: float = 0.5,
) -> requests.Session:
    """Create a requests Session with connection pooling and retries.

    Rate-limit and server errors are retried with exponential backoff before
    the response reaches the embedder.

    Args:
        pool_connections: Number of connection pools to cache.
        pool_maxsize: Maximum number of connections to save per pool.
        max_retries: Maximum number of retries per request.
        backoff_factor: Base delay in seconds between retries.

    Returns:
        Configured requests Session.
    """
    retry = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset({"POST"}),
        raise_on_status=False,
    )
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=retry,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def parse_embedding(payload: object, key: str = "embedding") -> list[float]:
    """Pull a non-empty float vector out of a decoded response body.

    Raises:
        ValueError: If the body has no usable vector under ``key``.
    """
    if not isinstance(payload, dict) or key not in payload:
        raise ValueError(f"Response body has no '{key}' field")
    vector = payload[key]
    if not isinstance(vector, list) or not vector:
        raise ValueError(f"Response field '{key}' is not a non-empty list")
    try:
        return [float(value) for value in vector]
    except TypeError as e:
        raise ValueError(f"Response field '{key}' holds a non-numeric value: {e}") from e
