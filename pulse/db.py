"""SQLite staging store: schema, lifecycle queries and run bookkeeping."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from pulse.errors import StoreError
from pulse.models import HarvestRun, PulseCategory, PulseSignal

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS pulse_staging (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content_hash TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL,
    summary TEXT NOT NULL,
    url TEXT NOT NULL,
    source_name TEXT NOT NULL,
    content_type TEXT NOT NULL,
    authority_score REAL NOT NULL,
    veracity_verified INTEGER NOT NULL DEFAULT 0,
    is_high_value INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    run_id INTEGER
);

CREATE TABLE IF NOT EXISTS harvest_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    started_at TEXT NOT NULL,
    finished_at TEXT,
    status TEXT NOT NULL DEFAULT 'running',
    items_fetched INTEGER NOT NULL DEFAULT 0,
    items_assembled INTEGER NOT NULL DEFAULT 0,
    items_duplicate INTEGER NOT NULL DEFAULT 0,
    items_discarded INTEGER NOT NULL DEFAULT 0,
    items_stored INTEGER NOT NULL DEFAULT 0,
    assembly_failures INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_staging_expires_at ON pulse_staging(expires_at);
CREATE INDEX IF NOT EXISTS idx_staging_authority ON pulse_staging(authority_score);
"""


def get_connection(db_path: str) -> sqlite3.Connection:
    """Get a SQLite connection with WAL mode enabled."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str) -> None:
    """Create all tables and set schema version."""
    conn = get_connection(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (SCHEMA_VERSION,),
        )
        conn.commit()
    finally:
        conn.close()


def _dt_str(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


def _parse_dt(s: str | None) -> datetime | None:
    if s is None:
        return None
    return datetime.fromisoformat(s)


# --- Staging helpers ---


def insert_signal(
    conn: sqlite3.Connection, signal: PulseSignal, run_id: int | None = None,
) -> int | None:
    """Insert a signal, returning its ID, or None if its hash is already staged."""
    if not signal.content_hash:
        raise StoreError("Cannot stage a signal without a content hash")
    if signal.created_at is None or signal.expires_at is None:
        raise StoreError("Cannot stage a signal without lifecycle timestamps")

    try:
        cur = conn.execute(
            """INSERT INTO pulse_staging
               (content_hash, title, summary, url, source_name, content_type,
                authority_score, veracity_verified, is_high_value,
                created_at, expires_at, run_id)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                signal.content_hash,
                signal.title,
                signal.summary,
                signal.url,
                signal.source_name,
                PulseCategory(signal.content_type).value,
                signal.authority_score,
                int(signal.veracity_verified),
                int(signal.is_high_value),
                _dt_str(signal.created_at),
                _dt_str(signal.expires_at),
                run_id,
            ),
        )
        conn.commit()
        return cur.lastrowid
    except sqlite3.IntegrityError:
        conn.rollback()
        return None


def signal_exists(conn: sqlite3.Connection, content_hash: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM pulse_staging WHERE content_hash = ?", (content_hash,)
    ).fetchone()
    return row is not None


def get_signal_by_hash(conn: sqlite3.Connection, content_hash: str) -> PulseSignal | None:
    row = conn.execute(
        "SELECT * FROM pulse_staging WHERE content_hash = ?", (content_hash,)
    ).fetchone()
    return _row_to_signal(row) if row else None


def get_active_signals(
    conn: sqlite3.Connection, now: datetime | None = None, limit: int = 100,
) -> list[PulseSignal]:
    """Signals not yet past expires_at, newest first."""
    now = now or datetime.utcnow()
    rows = conn.execute(
        """SELECT * FROM pulse_staging WHERE expires_at > ?
           ORDER BY created_at DESC, id DESC LIMIT ?""",
        (_dt_str(now), limit),
    ).fetchall()
    return [_row_to_signal(row) for row in rows]


def get_top_signals(
    conn: sqlite3.Connection, limit: int = 20, now: datetime | None = None,
) -> list[PulseSignal]:
    """Active signals ordered by authority, highest first."""
    now = now or datetime.utcnow()
    rows = conn.execute(
        """SELECT * FROM pulse_staging WHERE expires_at > ?
           ORDER BY authority_score DESC, created_at DESC LIMIT ?""",
        (_dt_str(now), limit),
    ).fetchall()
    return [_row_to_signal(row) for row in rows]


def delete_expired(conn: sqlite3.Connection, now: datetime | None = None) -> int:
    """Delete staging rows whose expires_at has passed. Returns rows removed."""
    now = now or datetime.utcnow()
    cur = conn.execute(
        "DELETE FROM pulse_staging WHERE expires_at <= ?", (_dt_str(now),)
    )
    conn.commit()
    return cur.rowcount


def mark_verified(conn: sqlite3.Connection, signal_id: int) -> None:
    """Set the veracity flag once a signal has been cross-checked."""
    conn.execute(
        "UPDATE pulse_staging SET veracity_verified = 1 WHERE id = ?", (signal_id,)
    )
    conn.commit()


def _row_to_signal(row: sqlite3.Row) -> PulseSignal:
    return PulseSignal(
        id=row["id"],
        content_hash=row["content_hash"],
        title=row["title"],
        summary=row["summary"],
        url=row["url"],
        source_name=row["source_name"],
        content_type=PulseCategory(row["content_type"]),
        authority_score=row["authority_score"],
        veracity_verified=bool(row["veracity_verified"]),
        is_high_value=bool(row["is_high_value"]),
        created_at=_parse_dt(row["created_at"]),
        expires_at=_parse_dt(row["expires_at"]),
    )


# --- HarvestRun helpers ---


def insert_run(conn: sqlite3.Connection, run: HarvestRun) -> int:
    cur = conn.execute(
        "INSERT INTO harvest_runs (started_at, status) VALUES (?, ?)",
        (_dt_str(run.started_at), run.status),
    )
    conn.commit()
    return cur.lastrowid


def finish_run(conn: sqlite3.Connection, run_id: int, run: HarvestRun) -> None:
    conn.execute(
        """UPDATE harvest_runs SET
           finished_at = ?, status = ?, items_fetched = ?,
           items_assembled = ?, items_duplicate = ?, items_discarded = ?,
           items_stored = ?, assembly_failures = ?
           WHERE id = ?""",
        (
            _dt_str(run.finished_at),
            run.status,
            run.items_fetched,
            run.items_assembled,
            run.items_duplicate,
            run.items_discarded,
            run.items_stored,
            run.assembly_failures,
            run_id,
        ),
    )
    conn.commit()


def get_recent_runs(conn: sqlite3.Connection, limit: int = 10) -> list[dict]:
    """Fetch recent harvest runs for stats display."""
    rows = conn.execute(
        "SELECT * FROM harvest_runs ORDER BY started_at DESC, id DESC LIMIT ?", (limit,)
    ).fetchall()
    return [dict(row) for row in rows]
