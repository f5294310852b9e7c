"""
CLI commands - entry points for search and the vector file jobs.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment and configure logging
3. Run the library call
4. Print results
5. Return exit code (0 ok, 1 error or failed accuracy gate, 130 interrupted)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace

from dotenv import load_dotenv

from audit_rag.core import RagError


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _configure_logging(verbose: bool = False) -> None:
    from audit_rag.config import get_config

    level = logging.DEBUG if verbose else getattr(logging, get_config().log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_report(title: str, report) -> int:
    print("=" * 60)
    print(title)
    print("=" * 60)
    print(f"Scheme:          {report.scheme}")
    print(f"Vectors:         {report.vector_count}")
    print(f"Sample accuracy: {report.mean_accuracy:.4f} ({len(report.sample_accuracies)} vectors)")
    if report.size_reduction is not None:
        print(
            f"File size:       {report.input_bytes:,} -> {report.output_bytes:,} bytes "
            f"({report.size_reduction:.1%} smaller)"
        )

    if report.passed:
        print("\n>>> ACCURACY GATE: PASSED <<<")
        return 0
    print("\n>>> ACCURACY GATE: FAILED <<<")
    return 1


def run_search_cli(argv: list[str] | None = None) -> int:
    """CLI entry point for search_all."""
    from audit_rag.config import get_config
    from audit_rag.observability import init_tracing, shutdown_tracing
    from audit_rag.service import RagService

    parser = argparse.ArgumentParser(prog="audit-rag search", description="Search the audit study collections")
    parser.add_argument("query", help="Question or passage to search for")
    parser.add_argument("-k", "--keyword", action="append", default=[], help="Extra keyword (repeatable)")
    parser.add_argument("--base-url", help="Override RAG_BASE_URL")
    parser.add_argument("--data-dir", help="Override RAG_DATA_DIR")
    parser.add_argument("--expand-synonyms", action="store_true", help="Expand keywords with accounting synonyms")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    config = get_config()
    overrides = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.expand_synonyms:
        overrides["expand_synonyms"] = True
    if overrides:
        config = replace(config, **overrides)

    init_tracing()
    service = RagService(config=config)
    try:
        result = asyncio.run(service.search_all(args.query, args.keyword))
    except RagError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        service.close()
        shutdown_tracing()

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 0

    print(f"Keywords: {', '.join(result.keywords) or '(none)'}")
    print()
    print(result.context if result.has_results else "No matching documents.")
    return 0


def run_quantize_cli(argv: list[str] | None = None) -> int:
    """CLI entry point for quantizing a vector file."""
    from audit_rag.quantization import DEFAULT_SCHEME, quantize_vector_file
    from audit_rag.quantization.vector_file import DEFAULT_SAMPLE_SIZE

    parser = argparse.ArgumentParser(prog="audit-rag quantize", description="Quantize a float vector file to int8")
    parser.add_argument("input", help="Float vector file (JSON)")
    parser.add_argument("output", help="Where to write the quantized file")
    parser.add_argument(
        "--scheme",
        choices=["adaptive_minmax", "fixed_range"],
        default=DEFAULT_SCHEME,
        help="Quantization scheme (default: %(default)s)",
    )
    parser.add_argument("--sample-size", type=int, default=DEFAULT_SAMPLE_SIZE, help="Vectors used for the accuracy check")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    try:
        report = quantize_vector_file(args.input, args.output, args.scheme, args.sample_size)
    except (RagError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return _print_report("VECTOR QUANTIZATION", report)


def run_verify_cli(argv: list[str] | None = None) -> int:
    """CLI entry point for verifying a quantized file."""
    from audit_rag.quantization import verify_vector_file
    from audit_rag.quantization.vector_file import DEFAULT_SAMPLE_SIZE

    parser = argparse.ArgumentParser(prog="audit-rag verify", description="Check a quantized file against its original")
    parser.add_argument("original", help="Float vector file")
    parser.add_argument("quantized", help="Quantized vector file")
    parser.add_argument("--sample-size", type=int, default=DEFAULT_SAMPLE_SIZE, help="Vectors compared")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    try:
        report = verify_vector_file(args.original, args.quantized, args.sample_size)
    except RagError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return _print_report("QUANTIZATION VERIFY", report)


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        audit-rag search "질문"           # Print the RAG context for a query
        audit-rag quantize in.json out.json
        audit-rag verify in.json out.json
    """
    _load_env()

    parser = argparse.ArgumentParser(
        prog="audit-rag",
        description="Audit exam retrieval tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  search      Search procedures, standards and past exams
  quantize    Quantize a float vector file to int8
  verify      Compare a quantized file against its original

Examples:
  audit-rag search "KSA 200 관련 질문입니다" -k 감사
  audit-rag quantize vectors.json vectors.int8.json --scheme fixed_range
        """,
    )

    parser.add_argument(
        "command",
        choices=["search", "quantize", "verify"],
        help="Command to run",
    )
    parser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)

    args = parser.parse_args(argv)

    commands = {
        "search": run_search_cli,
        "quantize": run_quantize_cli,
        "verify": run_verify_cli,
    }

    try:
        return commands[args.command](args.args)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
