"""fibbench: iterative Fibonacci micro-benchmark."""

from __future__ import annotations

from fibbench.fibonacci import U64_MASK, InvalidArgument, fib
from fibbench.harness import run


def main() -> None:
    """Entry point for the fibbench command."""
    run()


__all__ = ["U64_MASK", "InvalidArgument", "fib", "main"]
