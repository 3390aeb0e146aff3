"""Integration tests for the fibbench-suite command line."""

from __future__ import annotations

from pathlib import Path

import pytest

from fibbench.benchmark.cli import main

SUITE = """
name: cli-test
benchmarks:
  - name: small
    n: 10
    iterations: 10
  - name: wrap
    n: 94
    iterations: 10
"""

FAST = ["--quiet", "--min-runs", "2", "--max-runs", "2", "--warmup", "0"]


@pytest.fixture
def suite_path(tmp_path: Path) -> Path:
    path = tmp_path / "suite.yaml"
    path.write_text(SUITE)
    return path


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "results.db"


def run_cli(db_path: Path, *args: str) -> int:
    return main(["--db", str(db_path), *args])


def save_run(db_path: Path, suite_path: Path, description: str) -> int:
    return run_cli(
        db_path, "run", "--suite", str(suite_path), *FAST, "--save", "-d", description
    )


class TestRunCommand:
    """Tests for the run subcommand."""

    def test_run_prints_table(self, suite_path: Path, db_path: Path, capsys) -> None:
        """Test a run without saving."""
        status = run_cli(db_path, "run", "--suite", str(suite_path), *FAST)

        out = capsys.readouterr().out
        assert status == 0
        assert "fibbench suite: cli-test" in out
        assert "1293530146158671551" in out
        assert not db_path.exists()

    def test_run_and_save(self, suite_path: Path, db_path: Path, capsys) -> None:
        """Test saving a session with a description."""
        status = run_cli(
            db_path, "run", "--suite", str(suite_path), *FAST, "--save", "-d", "first"
        )

        assert status == 0
        assert "Results saved to session #1" in capsys.readouterr().out
        assert db_path.exists()

    def test_run_single_benchmark(
        self, suite_path: Path, db_path: Path, capsys
    ) -> None:
        """Test the --benchmark filter."""
        status = run_cli(
            db_path, "run", "--suite", str(suite_path), *FAST, "--benchmark", "small"
        )

        out = capsys.readouterr().out
        assert status == 0
        assert "small" in out
        assert "wrap" not in out

    def test_unknown_benchmark(self, suite_path: Path, db_path: Path, capsys) -> None:
        """Test filtering on a name that is not in the suite."""
        status = run_cli(
            db_path, "run", "--suite", str(suite_path), *FAST, "--benchmark", "nope"
        )

        assert status == 1
        assert "No enabled benchmark named 'nope'" in capsys.readouterr().out

    def test_save_to_unopenable_database(
        self, suite_path: Path, tmp_path: Path, capsys
    ) -> None:
        """Test that a database in a missing directory fails cleanly."""
        db_path = tmp_path / "missing" / "results.db"

        status = run_cli(db_path, "run", "--suite", str(suite_path), *FAST, "--save")

        out = capsys.readouterr().out
        assert status == 1
        assert "BENCHMARK RESULTS" in out
        assert "Error: Could not save results" in out
        assert "Results saved" not in out

    def test_missing_suite(self, tmp_path: Path, db_path: Path, capsys) -> None:
        """Test a suite path that does not exist."""
        status = run_cli(db_path, "run", "--suite", str(tmp_path / "none.yaml"), *FAST)

        assert status == 1
        assert "Suite configuration not found" in capsys.readouterr().out

    def test_invalid_suite(self, tmp_path: Path, db_path: Path, capsys) -> None:
        """Test that a zero index is reported as a configuration error."""
        path = tmp_path / "bad.yaml"
        path.write_text("benchmarks:\n  - name: zero\n    n: 0\n")

        status = run_cli(db_path, "run", "--suite", str(path), *FAST)

        out = capsys.readouterr().out
        assert status == 1
        assert "Error loading suite configuration" in out
        assert "n must be a positive integer" in out


class TestListCommand:
    """Tests for the list subcommand."""

    def test_no_database(self, db_path: Path, capsys) -> None:
        """Test listing before anything was saved."""
        assert run_cli(db_path, "list") == 0
        assert "No benchmark database found." in capsys.readouterr().out

    def test_lists_saved(self, suite_path: Path, db_path: Path, capsys) -> None:
        """Test that saved sessions are listed with descriptions."""
        save_run(db_path, suite_path, "first")
        save_run(db_path, suite_path, "second")
        capsys.readouterr()

        assert run_cli(db_path, "list") == 0

        out = capsys.readouterr().out
        assert "first" in out
        assert "second" in out
        assert "Total: 2 session(s)" in out


class TestCompareCommand:
    """Tests for the compare subcommand."""

    def test_compare_with_latest(self, suite_path: Path, db_path: Path, capsys) -> None:
        """Test comparing the first session against the latest."""
        run_cli(db_path, "run", "--suite", str(suite_path), *FAST, "--save")
        run_cli(db_path, "run", "--suite", str(suite_path), *FAST, "--save")
        capsys.readouterr()

        assert run_cli(db_path, "compare", "1") == 0

        out = capsys.readouterr().out
        assert "Benchmark Comparison" in out
        assert "Session #1" in out
        assert "Session #2" in out
        assert "small" in out

    def test_only_one_session(self, suite_path: Path, db_path: Path, capsys) -> None:
        """Test comparing the only session with itself."""
        run_cli(db_path, "run", "--suite", str(suite_path), *FAST, "--save")
        capsys.readouterr()

        assert run_cli(db_path, "compare", "1") == 1
        assert "Only one session exists." in capsys.readouterr().out

    def test_unknown_session(self, suite_path: Path, db_path: Path, capsys) -> None:
        """Test comparing against a missing id."""
        run_cli(db_path, "run", "--suite", str(suite_path), *FAST, "--save")
        capsys.readouterr()

        assert run_cli(db_path, "compare", "1", "7") == 1
        assert "Session #7 not found" in capsys.readouterr().out

    def test_no_database(self, db_path: Path, capsys) -> None:
        """Test comparing without a database."""
        assert run_cli(db_path, "compare", "1") == 1
        assert "No benchmark database found." in capsys.readouterr().out


class TestMain:
    """Tests for the top-level parser."""

    def test_no_command_prints_help(self, capsys) -> None:
        """Test that no subcommand shows usage."""
        assert main([]) == 0
        assert "fibbench-suite" in capsys.readouterr().out
