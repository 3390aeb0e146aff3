"""Suite loading and execution.

Coordinates:
- Loading case definitions from a YAML suite file
- Timing fib() for each case until the measurements are stable
- Collecting results into a Session and rendering them as a table
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import yaml

from fibbench.benchmark.database import CaseResult, Session
from fibbench.benchmark.stats import run_until_stable
from fibbench.fibonacci import fib

DEFAULT_SUITE_PATH = Path(__file__).parent / "suite.yaml"


@dataclass(frozen=True)
class BenchmarkCase:
    """A single suite entry.

    Attributes:
        name: Case identifier.
        n: Fibonacci index to compute.
        iterations: fib(n) calls per timed run.
        enabled: Disabled cases are skipped.
    """

    name: str
    n: int
    iterations: int = 1
    enabled: bool = True


@dataclass
class BenchmarkSuite:
    name: str
    cases: list[BenchmarkCase]
    base_path: Path


@dataclass
class BenchmarkProgress:
    """Progress callback information.

    Attributes:
        case: Current case name.
        phase: "timing" while runs are in progress, "done" afterwards.
        cases_completed: Cases finished so far.
        total_cases: Cases scheduled in this run.
    """

    case: str
    phase: str
    cases_completed: int
    total_cases: int


ProgressCallback = Callable[[BenchmarkProgress], None]


def _positive_int(case_name: str, key: str, value: object) -> int:
    # bool is an int subclass; "n: true" is a typo, not an index.
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = (
            f"benchmark {case_name!r}: {key} must be a positive integer, "
            f"got {value!r}"
        )
        raise ValueError(msg)
    return value


def _flag(case_name: str, key: str, value: object) -> bool:
    if not isinstance(value, bool):
        msg = f"benchmark {case_name!r}: {key} must be true or false, got {value!r}"
        raise ValueError(msg)
    return value


def _case_name(entry: dict) -> str:
    name = entry.get("name")
    if name is None or name == "":
        msg = f"benchmark entry without a name: {entry!r}"
        raise ValueError(msg)
    # YAML 1.1 reads bare off/yes/no as booleans and 10 as an int.
    if not isinstance(name, str):
        msg = f"benchmark name must be a string, got {name!r} (quote it in YAML)"
        raise ValueError(msg)
    return name


def load_suite_config(config_path: Path | str) -> BenchmarkSuite:
    """Load a suite from YAML.

    Args:
        config_path: Path to the suite file.

    Returns:
        BenchmarkSuite with one case per ``benchmarks`` entry.

    Raises:
        ValueError: If the document is not a mapping, ``benchmarks`` is not
            a list of mappings, or an entry has a missing or non-string
            name, a non-positive ``n`` or ``iterations``, or a non-boolean
            ``enabled``.
    """
    config_path = Path(config_path)
    with config_path.open() as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        msg = f"suite must be a mapping, got {type(data).__name__}"
        raise ValueError(msg)

    entries = data.get("benchmarks") or []
    if not isinstance(entries, list):
        msg = f"benchmarks must be a list, got {type(entries).__name__}"
        raise ValueError(msg)

    cases = []
    for entry in entries:
        if not isinstance(entry, dict):
            msg = f"benchmark entry must be a mapping, got {entry!r}"
            raise ValueError(msg)
        name = _case_name(entry)
        iterations = entry.get("iterations", 1)
        cases.append(
            BenchmarkCase(
                name=name,
                n=_positive_int(name, "n", entry.get("n")),
                iterations=_positive_int(name, "iterations", iterations),
                enabled=_flag(name, "enabled", entry.get("enabled", True)),
            )
        )

    return BenchmarkSuite(
        name=str(data.get("name", "fibonacci")),
        cases=cases,
        base_path=config_path.parent,
    )


def time_case(case: BenchmarkCase) -> float:
    """Seconds taken by ``case.iterations`` calls of fib(case.n)."""
    n = case.n
    start = time.perf_counter()
    for _ in range(case.iterations):
        fib(n)
    return time.perf_counter() - start


@dataclass
class BenchmarkRunner:
    """Runs the cases of a suite.

    Attributes:
        suite: Suite to run.
        target_cv: Target coefficient of variation.
        min_runs: Minimum number of timed runs per case.
        max_runs: Maximum number of timed runs per case.
        warmup: Untimed runs per case.
        progress_callback: Optional callback for progress updates.
    """

    suite: BenchmarkSuite
    target_cv: float = 0.01
    min_runs: int = 5
    max_runs: int = 50
    warmup: int = 3
    progress_callback: ProgressCallback | None = None

    def _report(self, case: BenchmarkCase, phase: str, done: int, total: int) -> None:
        if self.progress_callback:
            self.progress_callback(
                BenchmarkProgress(
                    case=case.name, phase=phase, cases_completed=done, total_cases=total
                )
            )

    def run_case(self, case: BenchmarkCase) -> CaseResult:
        stats = run_until_stable(
            lambda: time_case(case),
            min_runs=self.min_runs,
            max_runs=self.max_runs,
            target_cv=self.target_cv,
            warmup=self.warmup,
        )
        return CaseResult(name=case.name, n=case.n, answer=fib(case.n), stats=stats)

    def selected_cases(
        self, benchmark_filter: str | None = None
    ) -> list[BenchmarkCase]:
        return [
            case
            for case in self.suite.cases
            if case.enabled and (not benchmark_filter or case.name == benchmark_filter)
        ]

    def run_all(self, benchmark_filter: str | None = None) -> Session:
        """Run every enabled case, or only the one named ``benchmark_filter``."""
        timestamp = datetime.now()
        cases = self.selected_cases(benchmark_filter)

        results = []
        for done, case in enumerate(cases):
            self._report(case, "timing", done, len(cases))
            results.append(self.run_case(case))
            self._report(case, "done", done + 1, len(cases))

        return Session(timestamp=timestamp, description=None, results=results)


def format_results_table(session: Session) -> str:
    """Render session results as a fixed-width text table."""
    lines = [
        "=" * 78,
        "BENCHMARK RESULTS",
        "=" * 78,
        f"{'Benchmark':<15} {'n':>5} {'Answer':>22} "
        f"{'Mean (ms)':>12} {'CV':>8} {'Runs':>6}",
        "-" * 78,
    ]

    for result in session.results:
        stats = result.stats
        lines.append(
            f"{result.name:<15} {result.n:>5} {result.answer:>22} "
            f"{stats.mean * 1000:>12.3f} {stats.cv * 100:>7.2f}% {len(stats.times):>6}"
        )

    if not session.results:
        lines.append("(no benchmarks run)")

    return "\n".join(lines)
