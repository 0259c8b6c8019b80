import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import find_config_path, load_config, setup_logging
from .errors import LiveGuideRAGError
from .pipelines import DEFAULT_KNOWLEDGE_BASE, IndexingPipeline, RetrievalPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liveguide-rag",
        description="Index coaching knowledge and search it by similarity",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    index_parser = subparsers.add_parser("index", help="Index a text file")
    index_parser.add_argument("path", type=Path, help="UTF-8 text file to index")
    index_parser.add_argument(
        "--document-id", default=None, help="Document id (default: file name)"
    )
    index_parser.add_argument(
        "--knowledge-base", default=DEFAULT_KNOWLEDGE_BASE, help="Knowledge base id"
    )
    index_parser.add_argument(
        "--force", action="store_true", help="Re-index even if already indexed"
    )

    search_parser = subparsers.add_parser("search", help="Search a knowledge base")
    search_parser.add_argument("query", help="Query text")
    search_parser.add_argument(
        "--knowledge-base", default=DEFAULT_KNOWLEDGE_BASE, help="Knowledge base id"
    )
    search_parser.add_argument("--top-k", type=int, default=None)
    search_parser.add_argument("--threshold", type=float, default=None)

    return parser


def _run_index(args: argparse.Namespace, config: dict, config_path: Path) -> int:
    pipeline = IndexingPipeline.from_config(config, config_path)
    result = pipeline.index_file(
        args.path,
        document_id=args.document_id,
        knowledge_base_id=args.knowledge_base,
        force=args.force,
    )
    print("\n=== Indexing Complete ===")
    print(f"Document: {result.document_id}")
    print(f"Knowledge base: {result.knowledge_base_id}")
    print(f"Status: {result.status.value}{' (skipped)' if result.skipped else ''}")
    print(f"Chunks stored: {result.chunks}")
    return 0


def _run_search(args: argparse.Namespace, config: dict, config_path: Path) -> int:
    pipeline = RetrievalPipeline.from_config(config, config_path)
    context = pipeline.search(
        args.query,
        knowledge_base_id=args.knowledge_base,
        top_k=args.top_k,
        threshold=args.threshold,
    )
    if not context.results:
        print("No results above threshold")
        return 0

    for rank, result in enumerate(context.results, start=1):
        print(f"{rank}. [{result.similarity:.4f}] {result.id}")
        print(f"   {result.text[:120]}")
    print()
    print(context.formatted_context)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config_path = find_config_path(args.config)
        config = load_config(config_path)
        setup_logging(config)

        if args.command == "index":
            return _run_index(args, config, config_path)
        return _run_search(args, config, config_path)
    except (LiveGuideRAGError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
