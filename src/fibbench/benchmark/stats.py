"""Timing statistics for repeated Fibonacci runs.

A single fib() call is far below timer resolution, so cases are timed many
times and summarised here:
- Coefficient of variation (CV) as the stability criterion
- IQR outlier rejection
- 95% confidence interval for the mean
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Callable
from dataclasses import dataclass, field

# Two-tailed 95% critical values of Student's t, keyed by sample size.
_T_CRITICAL_95 = {
    2: 12.706,
    3: 4.303,
    4: 3.182,
    5: 2.776,
    6: 2.571,
    7: 2.447,
    8: 2.365,
    9: 2.306,
    10: 2.262,
    15: 2.145,
    20: 2.093,
    30: 2.045,
    50: 2.009,
    100: 1.984,
}
_Z_95 = 1.96


@dataclass(frozen=True)
class TimingStats:
    """Summary of timed runs, in seconds.

    Attributes:
        times: Every measurement, outliers included.
        mean: Mean of the retained measurements.
        median: Median of the retained measurements.
        stddev: Sample standard deviation.
        cv: stddev / mean.
        min: Fastest retained run.
        max: Slowest retained run.
        iqr: Interquartile range.
        outliers: Measurements rejected by the IQR rule.
        confidence_95: (lower, upper) bounds for the mean.
        runs_to_stable: Runs taken before the CV target was met.
    """

    times: tuple[float, ...]
    mean: float
    median: float
    stddev: float
    cv: float
    min: float
    max: float
    iqr: float
    outliers: tuple[float, ...] = field(default_factory=tuple)
    confidence_95: tuple[float, float] = field(default_factory=lambda: (0.0, 0.0))
    runs_to_stable: int = 0


EMPTY_STATS = TimingStats(
    times=(), mean=0.0, median=0.0, stddev=0.0, cv=0.0, min=0.0, max=0.0, iqr=0.0
)


def compute_quartiles(data: list[float]) -> tuple[float, float, float]:
    """Return (Q1, median, Q3) using the median-of-halves method.

    With fewer than 4 values every quartile is the median.
    """
    if len(data) < 4:
        med = statistics.median(data)
        return med, med, med

    ordered = sorted(data)
    half = len(ordered) // 2
    lower = ordered[:half]
    # The middle element of an odd-length sample belongs to neither half.
    upper = ordered[half + len(ordered) % 2 :]

    return (
        statistics.median(lower),
        statistics.median(ordered),
        statistics.median(upper),
    )


def detect_outliers(data: list[float], factor: float = 1.5) -> list[float]:
    """Values outside [Q1 - factor*IQR, Q3 + factor*IQR]."""
    if len(data) < 4:
        return []

    q1, _, q3 = compute_quartiles(data)
    spread = factor * (q3 - q1)
    return [x for x in data if not q1 - spread <= x <= q3 + spread]


def _t_critical(sample_size: int) -> float:
    if sample_size >= 100:
        return _Z_95
    for size in sorted(_T_CRITICAL_95):
        if sample_size <= size:
            return _T_CRITICAL_95[size]
    return _Z_95


def compute_confidence_interval(data: list[float]) -> tuple[float, float]:
    """95% confidence interval for the mean of ``data``.

    Args:
        data: Sample measurements.

    Returns:
        (lower, upper). Degenerates to (x, x) for one value, (0.0, 0.0)
        for none.
    """
    if not data:
        return 0.0, 0.0
    if len(data) == 1:
        return data[0], data[0]

    mean = statistics.mean(data)
    margin = _t_critical(len(data)) * statistics.stdev(data) / math.sqrt(len(data))
    return mean - margin, mean + margin


def compute_stats(
    times: list[float], remove_outliers: bool = True, runs_to_stable: int = 0
) -> TimingStats:
    """Summarise timing measurements.

    Args:
        times: Measurements in seconds.
        remove_outliers: Exclude IQR outliers from the summary figures.
        runs_to_stable: Recorded as-is on the result.

    Returns:
        TimingStats; raw ``times`` are always kept in full.
    """
    if not times:
        return EMPTY_STATS

    outliers = detect_outliers(times)

    kept = times
    if remove_outliers and outliers:
        rejected = set(outliers)
        kept = [t for t in times if t not in rejected]
        if len(kept) < 2:
            kept = times

    mean = statistics.mean(kept)
    stddev = statistics.stdev(kept) if len(kept) > 1 else 0.0
    q1, median, q3 = compute_quartiles(kept)

    return TimingStats(
        times=tuple(times),
        mean=mean,
        median=median,
        stddev=stddev,
        cv=stddev / mean if mean > 0 else 0.0,
        min=min(kept),
        max=max(kept),
        iqr=q3 - q1,
        outliers=tuple(outliers),
        confidence_95=compute_confidence_interval(kept),
        runs_to_stable=runs_to_stable,
    )


def _cv(times: list[float]) -> float | None:
    mean = statistics.mean(times)
    if mean <= 0:
        return None
    stddev = statistics.stdev(times) if len(times) > 1 else 0.0
    return stddev / mean


def run_until_stable(
    measure: Callable[[], float],
    min_runs: int = 5,
    max_runs: int = 50,
    target_cv: float = 0.01,
    warmup: int = 3,
    batch_size: int = 5,
) -> TimingStats:
    """Repeat ``measure`` until the CV drops to ``target_cv``.

    Warmup results are discarded. After ``min_runs`` timed runs, batches of
    ``batch_size`` more are added until the CV target is met or
    ``max_runs`` is reached.

    Args:
        measure: Returns the duration of one run in seconds.
        min_runs: Timed runs before the first stability check.
        max_runs: Hard cap on timed runs.
        target_cv: Stop once stddev / mean is at or below this.
        warmup: Untimed runs performed first.
        batch_size: Runs added per round.

    Returns:
        TimingStats over all timed runs.
    """
    for _ in range(warmup):
        measure()

    times = [measure() for _ in range(min_runs)]
    runs_to_stable = len(times)

    while len(times) < max_runs:
        cv = _cv(times) if times else None
        if cv is not None and cv <= target_cv:
            break
        for _ in range(min(batch_size, max_runs - len(times))):
            times.append(measure())
        runs_to_stable = len(times)

    return compute_stats(times, remove_outliers=True, runs_to_stable=runs_to_stable)


def format_stats(stats: TimingStats, unit: str = "ms") -> str:
    """Render as e.g. ``"485.2ms +/- 2.1ms (CV=0.43%, 12 runs)"``.

    ``unit`` is "ms" or "s".
    """
    scale = 1000.0 if unit == "ms" else 1.0
    return (
        f"{stats.mean * scale:.1f}{unit} +/- {stats.stddev * scale:.1f}{unit} "
        f"(CV={stats.cv * 100:.2f}%, {len(stats.times)} runs)"
    )
