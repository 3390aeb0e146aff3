"""Repeated-run benchmark suite for fibbench.

This package provides:
- Adaptive run counts targeting a CV threshold
- YAML suite definitions of Fibonacci cases
- SQLite-based result storage and comparison
"""

from __future__ import annotations

from fibbench.benchmark.database import BenchmarkDatabase, CaseResult, Session
from fibbench.benchmark.runner import (
    BenchmarkCase,
    BenchmarkRunner,
    BenchmarkSuite,
    load_suite_config,
)
from fibbench.benchmark.stats import TimingStats, run_until_stable

__all__ = [
    "BenchmarkCase",
    "BenchmarkDatabase",
    "BenchmarkRunner",
    "BenchmarkSuite",
    "CaseResult",
    "Session",
    "TimingStats",
    "load_suite_config",
    "run_until_stable",
]
