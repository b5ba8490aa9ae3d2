#!/usr/bin/env python
"""Interactive semantic search over demo sentences or text files.

Usage:
    semsearch                          # index the three demo sentences
    semsearch notes.txt todo.txt       # index each file as one document
    semsearch --matrix --top-k 2

Needs GITHUB_TOKEN (or EMBEDDING_API_KEY) in the environment or a .env file.
"""

import argparse
import asyncio
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from semsearch.config import StoreBackend, get_settings
from semsearch.embeddings.service import HTTPEmbeddingService
from semsearch.exceptions import (
    AuthError,
    MissingCredentialError,
    RateLimitedError,
    SemanticSearchError,
)
from semsearch.logging_config import get_logger, setup_logging
from semsearch.observability.metrics import start_metrics_server
from semsearch.retrieval.indexer import DocumentIndexer
from semsearch.retrieval.models import IndexReport, RetrievalResult
from semsearch.retrieval.retriever import Retriever, SemanticRetriever
from semsearch.similarity import similarity_matrix
from semsearch.vectorstore.models import Record
from semsearch.vectorstore.service import VectorStore, create_vector_store

logger = get_logger(__name__)

DEMO_SENTENCES = [
    "The canine barked loudly.",
    "The dog made a noise.",
    "The electron spins rapidly.",
]

PROMPT = "Enter a search query (or 'quit' to exit): "
QUIT_COMMANDS = {"quit", "exit"}
PREVIEW_CHARS = 80


def print_credential_help(error: MissingCredentialError) -> None:
    """Explain how to supply the token."""
    print(f"Error: {error.message}.", file=sys.stderr)
    print("Please create a .env file with your GitHub token:", file=sys.stderr)
    print("GITHUB_TOKEN=your-github-token-here", file=sys.stderr)
    print("\nGet your token from: https://github.com/settings/tokens", file=sys.stderr)
    print("Or use GitHub Models: https://github.com/marketplace/models", file=sys.stderr)


def format_result(rank: int, result: RetrievalResult) -> str:
    """One result line; file documents are shown by name and a preview."""
    file_name = result.metadata.get("file_name")
    if file_name:
        preview = " ".join(result.content.split())
        if len(preview) > PREVIEW_CHARS:
            preview = preview[: PREVIEW_CHARS - 3] + "..."
        return f'#{rank} | Score: {result.score:.4f} | File: {file_name} | "{preview}"'
    return f'#{rank} | Score: {result.score:.4f} | Sentence: "{result.content}"'


def print_index_report(report: IndexReport, records: Sequence[Record]) -> None:
    """Summarise what was stored and what was skipped."""
    print(f"\nStored {report.indexed_count} documents in the vector store.")
    for i, record in enumerate(records, start=1):
        label = record.metadata.get("file_name") or f'"{record.text}"'
        print(f"Document {i}: {label}")

    for failure in report.failures:
        hint = ""
        if failure.retry_after is not None:
            hint = f" (retry after {failure.retry_after:.0f}s)"
        print(f"Skipped {failure.source}: {failure.message}{hint}")


def print_similarity_matrix(records: Sequence[Record]) -> None:
    """Print pairwise cosine similarities of the stored vectors."""
    matrix = similarity_matrix([record.vector for record in records])
    labels = [f"D{i}" for i in range(1, len(records) + 1)]

    print("\n=== Cosine Similarity ===")
    print("      " + "".join(f"{label:>9}" for label in labels))
    for label, row in zip(labels, matrix):
        print(f"{label:<6}" + "".join(f"{score:>9.4f}" for score in row))


async def search_loop(
    retriever: Retriever,
    top_k: int,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> int:
    """Prompt for queries until quit, exit or end of input.

    Blank lines re-prompt. A failed query (rate limit, network) is reported
    and the loop keeps going.

    Args:
        retriever: Retriever to query.
        top_k: Results shown per query.
        read_line: Prompting line reader.
        write: Output sink.

    Returns:
        Number of queries answered.
    """
    answered = 0

    while True:
        try:
            user_input = (await asyncio.to_thread(read_line, PROMPT)).strip()
        except EOFError:
            write("")
            break

        if user_input.lower() in QUIT_COMMANDS:
            break
        if not user_input:
            continue

        try:
            results = await retriever.retrieve(user_input, top_k=top_k)
        except RateLimitedError as e:
            hint = f" Retry after {e.retry_after:.0f}s." if e.retry_after is not None else ""
            write(f"Rate limited by the embedding API.{hint}")
            continue
        except SemanticSearchError as e:
            write(f"Search failed: {e.message}")
            continue

        answered += 1
        write(f'\nTop {top_k} results for query: "{user_input}"')
        for rank, result in enumerate(results, start=1):
            write(format_result(rank, result))
        write("")

    return answered


async def run(
    files: Sequence[Path],
    top_k: int,
    backend: str,
    show_matrix: bool = False,
) -> int:
    """Index the inputs and run the search loop.

    Args:
        files: Text files to index; the demo sentences when empty.
        top_k: Results shown per query.
        backend: Vector store backend name.
        show_matrix: Print pairwise similarities after indexing.

    Returns:
        Process exit code.
    """
    settings = get_settings()

    try:
        embedding_service = HTTPEmbeddingService(settings=settings.embedding)
    except MissingCredentialError as e:
        print_credential_help(e)
        return 1

    print(f"Embedding model: {embedding_service.model_name}")
    vector_store: VectorStore | None = None

    try:
        vector_store = create_vector_store(backend)
        indexer = DocumentIndexer(embedding_service, vector_store)
        if files:
            print(f"Generating embeddings for {len(files)} files...")
            report = await indexer.index_files(files)
        else:
            print(f"Generating embeddings for {len(DEMO_SENTENCES)} sentences...")
            report = await indexer.index_texts(DEMO_SENTENCES)

        records = await vector_store.records()
        print_index_report(report, records)
        if not records:
            print("Nothing was indexed; exiting.", file=sys.stderr)
            return 1

        if show_matrix:
            print_similarity_matrix(records)

        print("\n=== Semantic Search ===")
        retriever = SemanticRetriever(embedding_service, vector_store)
        await search_loop(retriever, top_k)

    except AuthError as e:
        logger.error(f"Authentication failed: {e.message}")
        print(f"Error: {e.message}. Check GITHUB_TOKEN.", file=sys.stderr)
        return 1
    except SemanticSearchError as e:
        logger.error(f"Run failed: {e.message}", extra={"code": e.code.value})
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await embedding_service.close()
        if vector_store is not None:
            await vector_store.close()

    print("Goodbye! Thanks for using semantic search.")
    return 0


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Interactive semantic search over embedded text",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Plain-text files to index, one document each",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=settings.search.top_k,
        help="Results shown per query",
    )
    parser.add_argument(
        "--backend",
        choices=[b.value for b in StoreBackend],
        default=settings.search.backend.value,
        help="Vector store backend",
    )
    parser.add_argument(
        "--matrix",
        action="store_true",
        help="Print pairwise cosine similarities after indexing",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL",
    )

    args = parser.parse_args()
    if args.top_k <= 0:
        parser.error("--top-k must be a positive integer")

    setup_logging(level=args.log_level)
    if settings.metrics_port is not None:
        start_metrics_server(settings.metrics_port)

    try:
        exit_code = asyncio.run(
            run(
                files=args.files,
                top_k=args.top_k,
                backend=args.backend,
                show_matrix=args.matrix,
            )
        )
    except KeyboardInterrupt:
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
