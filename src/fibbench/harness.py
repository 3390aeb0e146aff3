"""Timing harness: one fib(50) call, two lines of output."""

from __future__ import annotations

import time

from fibbench.fibonacci import fib

BENCHMARK_N = 50


def run() -> None:
    start = time.perf_counter()
    answer = fib(BENCHMARK_N)
    elapsed = int(time.perf_counter() - start)

    print(f"Found answer {answer}")
    print(f"Elapsed: {elapsed}")
