"""Command-line front end for epubrag.

Usage::

    python -m epubrag.cli ingest --epub book.epub --store data/book.json
    python -m epubrag.cli search "who is the narrator?" --store data/book.json --top-k 3
    python -m epubrag.cli ask "who is the narrator?" --store data/book.json
    python -m epubrag.cli inspect --epub book.epub --toc
    python -m epubrag.cli stats --store data/book.json

Every command accepts ``--config PATH`` to layer a YAML settings file
under the environment.  Results go to stdout and logs to stderr.

Exit codes: 0 on success, 1 on any epubrag or file-system error, 2 when
``ask`` could retrieve passages but the model call failed (the passages
are printed instead of an answer).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections import Counter

from epubrag.config.loader import load_settings
from epubrag.config.settings import Settings
from epubrag.models.rag import SearchHit
from epubrag.providers.factory import build_embedding_provider, build_llm_provider
from epubrag.services.ingestion.chunker import ParagraphChunker
from epubrag.services.ingestion.epub_processor import EPUBProcessor
from epubrag.services.ingestion.ingestion_service import IngestionService
from epubrag.services.qa_service import QAService
from epubrag.services.retrieval_service import RetrievalService
from epubrag.store.vector_store import VectorStore
from epubrag.utils.errors import EpubRagError, GenerationError, ProviderUnavailableError
from epubrag.utils.logging import configure_logging

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_DEGRADED = 2


def _print_hits(hits: list[SearchHit]) -> None:
    for hit in hits:
        print(f"{hit.score:.4f}\t{hit.content}")


def _build_retrieval(app_settings: Settings) -> RetrievalService:
    return RetrievalService(
        embedding_provider=build_embedding_provider(app_settings),
        strict_dimensions=app_settings.strict_query_dimensions,
    )


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_ingest(args: argparse.Namespace, app_settings: Settings) -> int:
    """Ingest an EPUB into a new (or overwritten) store file."""
    store_path = args.store or app_settings.store_path
    embedding_provider = build_embedding_provider(app_settings)
    if not embedding_provider.is_available():
        raise ProviderUnavailableError(
            message="Embedding provider is not reachable; is the service running?",
            provider_name=embedding_provider.get_provider_name(),
        )

    service = IngestionService(
        embedding_provider=embedding_provider,
        concurrency=app_settings.embed_concurrency,
        embedding_dim=app_settings.embedding_dim or None,
        producer=EPUBProcessor(ParagraphChunker(min_chars=app_settings.min_chunk_chars)),
    )

    print(f"Ingesting EPUB: {args.epub}")
    print(f"  Store:     {store_path}")
    print(f"  Embedding: {embedding_provider.get_provider_name()}")

    report = await service.ingest_epub(file_path=args.epub, store_path=store_path)

    print("\nIngestion complete:")
    print(f"  Chunks stored:  {report.chunks_stored}")
    print(f"  Chunks skipped: {report.chunks_skipped}")
    print(f"  Chunks failed:  {report.chunks_failed}")
    print(f"  Dimension:      {report.embedding_dim}")
    print(f"  Time:           {report.ingestion_time:.2f}s")
    for failure in report.failures:
        print(f"    chunk {failure.chunk_index}: {failure.reason}")
    return EXIT_OK


async def _handle_search(args: argparse.Namespace, app_settings: Settings) -> int:
    """Print ranked ``score<TAB>content`` lines for a query."""
    store = VectorStore.load(args.store or app_settings.store_path)
    retrieval = _build_retrieval(app_settings)
    hits = await retrieval.query(store, args.query, args.top_k or app_settings.rag_top_k)
    _print_hits(hits)
    return EXIT_OK


async def _handle_ask(args: argparse.Namespace, app_settings: Settings) -> int:
    """Answer a question from the store; fall back to passages if generation fails."""
    store = VectorStore.load(args.store or app_settings.store_path)
    qa = QAService(
        llm=build_llm_provider(app_settings),
        retrieval=_build_retrieval(app_settings),
        empty_context_policy=app_settings.empty_context_policy,
        show_scores=app_settings.show_scores_in_context,
        temperature=app_settings.generation_temperature,
        max_tokens=app_settings.generation_max_tokens,
    )

    try:
        result = await qa.answer(store, args.query, args.top_k or app_settings.rag_top_k)
    except GenerationError as exc:
        print(f"Answer generation failed: {exc}", file=sys.stderr)
        print("Most relevant passages:", file=sys.stderr)
        _print_hits(exc.hits)
        return EXIT_DEGRADED

    print(result.answer)
    return EXIT_OK


async def _handle_inspect(args: argparse.Namespace, app_settings: Settings) -> int:
    """Print an EPUB's metadata and its chapters as Markdown."""
    processor = EPUBProcessor(ParagraphChunker(min_chars=app_settings.min_chunk_chars))
    metadata = processor.read_metadata(args.epub)
    if metadata.title:
        print(f"Title: {metadata.title}")
    if metadata.creator:
        print(f"Creator: {metadata.creator}")
    if metadata.language:
        print(f"Language: {metadata.language}")

    for chapter in processor.read_chapters(args.epub):
        print(f"\n--- Chapter {chapter.index + 1} ---\n")
        print(chapter.markdown)

    if args.toc:
        toc = processor.read_toc(args.epub)
        if toc is None:
            print("\n--- No NCX (Table of Contents) found ---")
        else:
            print("\n--- NCX (Table of Contents) ---")
            print(toc)
    return EXIT_OK


async def _handle_stats(args: argparse.Namespace, app_settings: Settings) -> int:
    """Display store statistics."""
    store_path = args.store or app_settings.store_path
    store = VectorStore.load(store_path)
    per_source = Counter(chunk.metadata.get("source") for chunk in store)
    sources = store.sources()

    print("Store Statistics")
    print("=" * 40)
    print(f"  Path:             {store_path}")
    print(f"  Total chunks:     {len(store)}")
    print(f"  Embedding dim:    {store.embedding_dim}")
    print(f"  Sources:          {len(sources)}")
    for source in sources:
        print(f"    {source:<40} {per_source[source]}")
    return EXIT_OK


_HANDLERS = {
    "ingest": _handle_ingest,
    "search": _handle_search,
    "ask": _handle_ask,
    "inspect": _handle_inspect,
    "stats": _handle_stats,
}


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the epubrag CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m epubrag.cli",
        description="Semantic search and question answering over EPUB books.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="YAML settings file")

    # -- ingest --
    ingest_parser = subparsers.add_parser(
        "ingest", parents=[common], help="Embed an EPUB into a new store file"
    )
    ingest_parser.add_argument("--epub", required=True, help="Path to the EPUB file")
    ingest_parser.add_argument("--store", default=None, help="Store file to write")

    # -- search / ask --
    for name, help_text in (
        ("search", "Rank stored passages against a query"),
        ("ask", "Answer a question from the most relevant passages"),
    ):
        query_parser = subparsers.add_parser(name, parents=[common], help=help_text)
        query_parser.add_argument("query", help="Free-text query")
        query_parser.add_argument("--store", default=None, help="Store file to read")
        query_parser.add_argument(
            "--top-k",
            dest="top_k",
            type=_positive_int,
            default=None,
            help="Number of passages to retrieve (default: RAG_TOP_K)",
        )

    # -- inspect --
    inspect_parser = subparsers.add_parser(
        "inspect", parents=[common], help="Print an EPUB's metadata and chapters as Markdown"
    )
    inspect_parser.add_argument("--epub", required=True, help="Path to the EPUB file")
    inspect_parser.add_argument(
        "--toc", action="store_true", help="Also print the raw NCX table of contents"
    )

    # -- stats --
    stats_parser = subparsers.add_parser("stats", parents=[common], help="Show store statistics")
    stats_parser.add_argument("--store", default=None, help="Store file to read")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, load settings, dispatch, exit."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    try:
        app_settings = load_settings(args.config)
        configure_logging(
            log_level=app_settings.log_level,
            json_output=app_settings.app_env == "production",
        )
        exit_code = asyncio.run(_HANDLERS[args.command](args, app_settings))
    except (EpubRagError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = EXIT_ERROR

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
