"""Command-line interface for the benchmark suite.

Provides the `fibbench-suite` command with subcommands for:
- Running the suite
- Listing saved sessions
- Comparing sessions
"""

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path

from fibbench.benchmark.database import BenchmarkDatabase, Session
from fibbench.benchmark.runner import (
    DEFAULT_SUITE_PATH,
    BenchmarkProgress,
    BenchmarkRunner,
    format_results_table,
    load_suite_config,
)

DEFAULT_DB_PATH = Path("fibbench_results.db")


def cmd_run(args: argparse.Namespace) -> int:
    """Run benchmarks."""
    suite_path = Path(args.suite) if args.suite else DEFAULT_SUITE_PATH

    if not suite_path.exists():
        print(f"Error: Suite configuration not found: {suite_path}")
        return 1

    try:
        suite = load_suite_config(suite_path)
    except Exception as e:
        print(f"Error loading suite configuration: {e}")
        return 1

    def progress(p: BenchmarkProgress) -> None:
        print(
            f"  [{p.cases_completed}/{p.total_cases}] {p.case} {p.phase}...",
            end="\r",
            flush=True,
        )

    runner = BenchmarkRunner(
        suite=suite,
        target_cv=args.cv_target,
        min_runs=args.min_runs,
        max_runs=args.max_runs,
        warmup=args.warmup,
        progress_callback=progress if not args.quiet else None,
    )

    if args.benchmark and not runner.selected_cases(args.benchmark):
        print(f"Error: No enabled benchmark named {args.benchmark!r} in {suite_path}")
        return 1

    print(f"fibbench suite: {suite.name}")
    print(f"Running benchmarks (target CV: {args.cv_target * 100:.1f}%)...")
    print()

    session = runner.run_all(benchmark_filter=args.benchmark)

    # Clear progress line
    print(" " * 60, end="\r")
    print(format_results_table(session))

    if args.save:
        db_path = Path(args.db) if args.db else DEFAULT_DB_PATH
        session.description = args.description
        try:
            with BenchmarkDatabase(db_path) as db:
                session_id = db.save_session(session)
        except sqlite3.Error as e:
            print(f"\nError: Could not save results to {db_path}: {e}")
            return 1
        print(f"\nResults saved to session #{session_id}")

    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List saved sessions."""
    db_path = Path(args.db) if args.db else DEFAULT_DB_PATH

    if not db_path.exists():
        print("No benchmark database found.")
        return 0

    with BenchmarkDatabase(db_path) as db:
        sessions = db.list_sessions()

    if not sessions:
        print("No benchmark sessions recorded yet.")
        return 0

    print("Saved Benchmark Sessions")
    print("=" * 60)
    print(f"{'ID':>5} {'Date':>20} Description")
    print("-" * 60)
    for session_id, timestamp, description in sessions:
        date_str = timestamp.strftime("%Y-%m-%d %H:%M")
        print(f"{session_id:>5} {date_str:>20} {description or ''}")
    print("-" * 60)
    print(f"Total: {len(sessions)} session(s)")

    return 0


def _print_session_header(session_id: int, session: Session) -> None:
    print(f"Session #{session_id}: {session.timestamp.strftime('%Y-%m-%d %H:%M')}")
    if session.description:
        print(f"  Description: {session.description}")


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare two sessions."""
    db_path = Path(args.db) if args.db else DEFAULT_DB_PATH

    if not db_path.exists():
        print("No benchmark database found.")
        return 1

    with BenchmarkDatabase(db_path) as db:
        id1 = args.id1
        id2 = args.id2

        if id2 is None:
            id2 = db.get_latest_session_id()
            if id2 is None:
                print("No sessions to compare with.")
                return 1
            if id1 == id2:
                print("Only one session exists.")
                return 1

        session1 = db.load_session(id1)
        session2 = db.load_session(id2)
        if not session1:
            print(f"Error: Session #{id1} not found.")
            return 1
        if not session2:
            print(f"Error: Session #{id2} not found.")
            return 1

        comparison = db.compare_sessions(id1, id2)

    print("Benchmark Comparison")
    print("=" * 70)
    _print_session_header(id1, session1)
    _print_session_header(id2, session2)
    print("=" * 70)

    print(
        f"\n{'Benchmark':<15} {'#' + str(id1):>12} {'#' + str(id2):>12} "
        f"{'Ratio':>10} {'Change':>14}"
    )
    print("-" * 70)

    for name, (mean1, mean2, ratio) in sorted(comparison.items()):
        mean2_str = f"{mean2:.3f}ms" if mean2 > 0 else "-"
        ratio_str = f"{ratio:.2f}x" if ratio > 0 else "-"

        if ratio <= 0:
            change = "-"
        else:
            pct = (ratio - 1) * 100
            if pct < -5:
                change = f"{pct:.1f}% BETTER"
            elif pct > 5:
                change = f"+{pct:.1f}% WORSE"
            else:
                change = "~same"

        print(
            f"{name:<15} {f'{mean1:.3f}ms':>12} {mean2_str:>12} "
            f"{ratio_str:>10} {change:>14}"
        )

    print("-" * 70)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fibbench-suite",
        description="Repeated-run Fibonacci benchmark suite",
    )
    parser.add_argument(
        "--db",
        help="Path to benchmark database (default: ./fibbench_results.db)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run benchmarks")
    run_parser.add_argument(
        "--benchmark",
        help="Run only the specified benchmark",
    )
    run_parser.add_argument(
        "--cv-target",
        type=float,
        default=0.01,
        help="Target coefficient of variation (default: 0.01 = 1%%)",
    )
    run_parser.add_argument(
        "--min-runs",
        type=int,
        default=5,
        help="Minimum number of timed runs (default: 5)",
    )
    run_parser.add_argument(
        "--max-runs",
        type=int,
        default=50,
        help="Maximum number of timed runs (default: 50)",
    )
    run_parser.add_argument(
        "--warmup",
        type=int,
        default=3,
        help="Number of warmup runs (default: 3)",
    )
    run_parser.add_argument(
        "--suite",
        help="Path to suite.yaml configuration (default: bundled suite)",
    )
    run_parser.add_argument(
        "--save",
        action="store_true",
        help="Save results to database",
    )
    run_parser.add_argument(
        "-d",
        "--description",
        help="Description for this benchmark run",
    )
    run_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    run_parser.set_defaults(func=cmd_run)

    list_parser = subparsers.add_parser("list", help="List saved sessions")
    list_parser.set_defaults(func=cmd_list)

    compare_parser = subparsers.add_parser("compare", help="Compare two sessions")
    compare_parser.add_argument(
        "id1",
        type=int,
        help="First session ID",
    )
    compare_parser.add_argument(
        "id2",
        type=int,
        nargs="?",
        help="Second session ID (default: latest)",
    )
    compare_parser.set_defaults(func=cmd_compare)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
