"""TOML configuration for the indexing and retrieval pipelines."""

import logging
import os
import re
from pathlib import Path
from typing import Any

import toml

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONFIG_FILENAME = "config.toml"
CONFIG_ENV_VAR = "LIVEGUIDE_RAG_CONFIG"

KNOWN_SECTIONS = frozenset(
    {"embedding", "chunking", "indexing", "retrieval", "storage", "logging"}
)

# ${NAME} or ${NAME:-fallback}
ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<fallback>[^}]*))?\}")


def resolve_path(path: str | Path, config_path: Path) -> Path:
    """Anchor a relative path at the directory holding the config file."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return (config_path.parent / candidate).resolve()


def find_config_path(explicit_path: Path | None = None) -> Path:
    """Pick the configuration file to load.

    Lookup order: ``explicit_path``, the ``LIVEGUIDE_RAG_CONFIG`` environment
    variable, ``./config.toml``, then the ``config.toml`` at the project root.
    A path that is named explicitly (argument or environment) must exist.

    Raises:
        FileNotFoundError: If the named file is missing or nothing is found.
    """
    named = explicit_path or os.environ.get(CONFIG_ENV_VAR)
    if named:
        named_path = Path(named)
        if not named_path.exists():
            raise FileNotFoundError(f"Config file not found: {named_path}")
        return named_path

    project_root = Path(__file__).resolve().parents[2]
    for candidate in (Path(CONFIG_FILENAME), project_root / CONFIG_FILENAME):
        if candidate.exists():
            return candidate
    raise FileNotFoundError(f"{CONFIG_FILENAME} not found")


def expand_env_vars(value: Any) -> Any:
    """Replace ``${NAME}`` / ``${NAME:-fallback}`` in every string of a config tree.

    Unset variables without a fallback become empty strings.
    """
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    if isinstance(value, str):
        return ENV_REFERENCE.sub(
            lambda match: os.environ.get(match["name"], match["fallback"] or ""),
            value,
        )
    return value


def load_config(config_path: Path = Path(CONFIG_FILENAME)) -> dict[str, Any]:
    """Parse a TOML config file and expand environment references in it."""
    config = expand_env_vars(toml.load(config_path))
    unknown = sorted(set(config) - KNOWN_SECTIONS)
    if unknown:
        logger.warning(f"Ignoring unknown config sections in {config_path}: {unknown}")
    return config


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """Look up ``"section.key"`` style paths, returning ``default`` when absent."""
    node: Any = config
    for part in key_path.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def get_storage_dir(config: dict, config_path: Path) -> Path:
    return resolve_path(get_config_value(config, "storage.directory", "storage"), config_path)


def get_store_path(config: dict, config_path: Path, embedder_model: str) -> Path:
    """Chunk store file for an embedding model.

    Vectors from different models are not comparable, so each model gets
    its own file.
    """
    embedding_id = re.sub(r"[^\w]", "_", embedder_model)
    return get_storage_dir(config, config_path) / f"chunks_{embedding_id}.json"


def setup_logging(config: dict | None = None) -> None:
    level = get_config_value(config or {}, "logging.level", "INFO")
    logging.basicConfig(level=str(level).upper(), format=LOG_FORMAT)
