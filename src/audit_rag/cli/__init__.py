"""
CLI module - the `audit-rag` command.

Provides entry points for:
- Searching the collections and printing the prompt context
- Quantizing a float vector file
- Verifying a quantized file against its original
"""

from audit_rag.cli.commands import (
    main,
    run_quantize_cli,
    run_search_cli,
    run_verify_cli,
)

__all__ = [
    "main",
    "run_quantize_cli",
    "run_search_cli",
    "run_verify_cli",
]
