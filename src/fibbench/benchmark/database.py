"""SQLite storage for benchmark sessions.

Keeps a history of suite runs so that later runs can be compared
against earlier ones.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from fibbench.benchmark.stats import TimingStats


@dataclass(frozen=True)
class CaseResult:
    """Timing of one suite case.

    Attributes:
        name: Case name from the suite file.
        n: Fibonacci index that was computed.
        answer: fib(n), a 64-bit unsigned value.
        stats: Per-run timing summary.
    """

    name: str
    n: int
    answer: int
    stats: TimingStats


@dataclass
class Session:
    """One run of a suite.

    Attributes:
        timestamp: When the run started.
        description: Optional free-text label.
        results: Per-case results.
        id: Database id, None until saved.
    """

    timestamp: datetime
    description: str | None
    results: list[CaseResult]
    id: int | None = None


class BenchmarkDatabase:
    """SQLite database of benchmark sessions."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.conn: sqlite3.Connection | None = None

    def __enter__(self) -> BenchmarkDatabase:
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Connect and create tables if needed."""
        self.conn = sqlite3.connect(self.db_path)
        self._init_schema()

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def _connection(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database not open")
        return self.conn

    def _init_schema(self) -> None:
        conn = self._connection()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id INTEGER PRIMARY KEY,
                timestamp TEXT NOT NULL,
                description TEXT
            )
        """)
        # answer is TEXT: u64 values above 2**63 - 1 do not fit an SQLite INTEGER.
        conn.execute("""
            CREATE TABLE IF NOT EXISTS results (
                id INTEGER PRIMARY KEY,
                session_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                n INTEGER NOT NULL,
                answer TEXT NOT NULL,
                mean_ms REAL,
                median_ms REAL,
                stddev_ms REAL,
                cv REAL,
                ci_lower REAL,
                ci_upper REAL,
                min_ms REAL,
                max_ms REAL,
                runs INTEGER,
                runs_to_stable INTEGER,
                FOREIGN KEY (session_id) REFERENCES sessions(id)
            )
        """)
        conn.commit()

    def save_session(self, session: Session) -> int:
        """Store ``session`` and its results.

        Returns:
            The new session id, also set on ``session.id``.
        """
        conn = self._connection()
        cursor = conn.execute(
            "INSERT INTO sessions (timestamp, description) VALUES (?, ?)",
            (session.timestamp.isoformat(), session.description),
        )
        session_id = cursor.lastrowid
        if session_id is None:
            raise RuntimeError("Failed to get session ID")

        conn.executemany(
            """
            INSERT INTO results (
                session_id, name, n, answer,
                mean_ms, median_ms, stddev_ms, cv,
                ci_lower, ci_upper, min_ms, max_ms,
                runs, runs_to_stable
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    session_id,
                    r.name,
                    r.n,
                    str(r.answer),
                    r.stats.mean * 1000,
                    r.stats.median * 1000,
                    r.stats.stddev * 1000,
                    r.stats.cv,
                    r.stats.confidence_95[0] * 1000,
                    r.stats.confidence_95[1] * 1000,
                    r.stats.min * 1000,
                    r.stats.max * 1000,
                    len(r.stats.times),
                    r.stats.runs_to_stable,
                )
                for r in session.results
            ],
        )
        conn.commit()

        session.id = session_id
        return session_id

    def load_session(self, session_id: int) -> Session | None:
        """Load a stored session, or None if the id is unknown.

        Raw run times are not stored, so ``stats.times`` comes back empty.
        """
        conn = self._connection()
        row = conn.execute(
            "SELECT timestamp, description FROM sessions WHERE id = ?",
            (session_id,),
        ).fetchone()
        if not row:
            return None

        results = []
        for (
            name,
            n,
            answer,
            mean_ms,
            median_ms,
            stddev_ms,
            cv,
            ci_lower,
            ci_upper,
            min_ms,
            max_ms,
            runs_to_stable,
        ) in conn.execute(
            """
            SELECT name, n, answer, mean_ms, median_ms, stddev_ms, cv,
                   ci_lower, ci_upper, min_ms, max_ms, runs_to_stable
            FROM results WHERE session_id = ? ORDER BY id
            """,
            (session_id,),
        ):
            stats = TimingStats(
                times=(),
                mean=mean_ms / 1000,
                median=median_ms / 1000,
                stddev=stddev_ms / 1000,
                cv=cv,
                min=min_ms / 1000,
                max=max_ms / 1000,
                iqr=0.0,
                confidence_95=(ci_lower / 1000, ci_upper / 1000),
                runs_to_stable=runs_to_stable,
            )
            results.append(CaseResult(name=name, n=n, answer=int(answer), stats=stats))

        return Session(
            id=session_id,
            timestamp=datetime.fromisoformat(row[0]),
            description=row[1],
            results=results,
        )

    def list_sessions(self) -> list[tuple[int, datetime, str | None]]:
        """(id, timestamp, description) for every session, newest first."""
        conn = self._connection()
        return [
            (row[0], datetime.fromisoformat(row[1]), row[2])
            for row in conn.execute(
                "SELECT id, timestamp, description FROM sessions ORDER BY id DESC"
            )
        ]

    def get_latest_session_id(self) -> int | None:
        conn = self._connection()
        row = conn.execute("SELECT MAX(id) FROM sessions").fetchone()
        return row[0] if row and row[0] else None

    def compare_sessions(
        self, id1: int, id2: int
    ) -> dict[str, tuple[float, float, float]]:
        """Compare mean times of the cases in two sessions.

        Args:
            id1: Baseline session.
            id2: Session compared against the baseline.

        Returns:
            Mapping of case name to (mean1_ms, mean2_ms, ratio), where
            ratio is mean2 / mean1. Cases missing from the second session
            get mean2 = 0.0 and ratio = 0.0. Empty if either id is unknown.
        """
        session1 = self.load_session(id1)
        session2 = self.load_session(id2)
        if not session1 or not session2:
            return {}

        second = {r.name: r.stats.mean * 1000 for r in session2.results}

        comparison: dict[str, tuple[float, float, float]] = {}
        for r in session1.results:
            mean1 = r.stats.mean * 1000
            mean2 = second.get(r.name, 0.0)
            ratio = mean2 / mean1 if mean1 > 0 else 0.0
            comparison[r.name] = (mean1, mean2, ratio)
        return comparison
