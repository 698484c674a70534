"""SQLite persistence for deployment handles.

Deploy and undeploy usually run in different processes; the handle is the
only thing that has to survive in between.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from xnode_deployer.config import state_dir


@dataclass
class DeploymentRecord:
    """Lightweight read-side representation of a persisted deployment."""

    name: str
    provider: str
    status: str = "active"
    created_at: str = ""
    updated_at: str = ""
    hardware: dict = field(default_factory=dict)
    handle: dict = field(default_factory=dict)


_SCHEMA = """\
CREATE TABLE IF NOT EXISTS deployments (
    name            TEXT PRIMARY KEY,
    status          TEXT NOT NULL DEFAULT 'active',
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL,
    provider        TEXT NOT NULL,
    hardware_json   TEXT NOT NULL,
    handle_json     TEXT NOT NULL
);
"""


def _db_path() -> Path:
    """Return the default database path."""
    return state_dir() / "deployments.db"


def _connect(db_path: Path | str | None = None) -> sqlite3.Connection:
    """Open a connection, enable WAL mode, and ensure the schema exists."""
    path = Path(db_path) if db_path else _db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_SCHEMA)
    conn.commit()
    return conn


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def save_deployment(name: str, provider: str, hardware, handle, *, db_path=None) -> None:
    """Persist a handle right after a successful deploy.

    Parameters
    ----------
    hardware : hardware spec with ``to_dict()``
    handle : provider handle with ``to_dict()``
    """
    conn = _connect(db_path)
    try:
        now = _now_iso()
        conn.execute(
            """INSERT INTO deployments (
                name, status, created_at, updated_at, provider, hardware_json, handle_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                status=excluded.status,
                updated_at=excluded.updated_at,
                provider=excluded.provider,
                hardware_json=excluded.hardware_json,
                handle_json=excluded.handle_json""",
            (
                name,
                "active",
                now,
                now,
                provider,
                json.dumps(hardware.to_dict()),
                json.dumps(handle.to_dict()),
            ),
        )
        conn.commit()
    finally:
        conn.close()


def _row_to_record(row: tuple, columns: list[str]) -> DeploymentRecord:
    """Convert a DB row to a DeploymentRecord, parsing JSON fields."""
    data = dict(zip(columns, row))
    data["hardware"] = json.loads(data.pop("hardware_json") or "{}")
    data["handle"] = json.loads(data.pop("handle_json") or "{}")
    return DeploymentRecord(**data)


def load_deployment(name: str, *, db_path=None) -> DeploymentRecord | None:
    """Load a single deployment record by name."""
    conn = _connect(db_path)
    try:
        cursor = conn.execute(
            "SELECT * FROM deployments WHERE name = ?",
            (name,),
        )
        columns = [desc[0] for desc in cursor.description]
        row = cursor.fetchone()
        if row is None:
            return None
        return _row_to_record(row, columns)
    finally:
        conn.close()


def update_deployment_status(name: str, status: str, *, db_path=None) -> None:
    """Update the status of a deployment (e.g. active -> destroyed)."""
    conn = _connect(db_path)
    try:
        conn.execute(
            "UPDATE deployments SET status = ?, updated_at = ? WHERE name = ?",
            (status, _now_iso(), name),
        )
        conn.commit()
    finally:
        conn.close()


def list_deployments(*, status: str | None = None, db_path=None) -> list[DeploymentRecord]:
    """List deployment records, optionally filtered by status."""
    conn = _connect(db_path)
    try:
        if status:
            cursor = conn.execute(
                "SELECT * FROM deployments WHERE status = ? ORDER BY created_at DESC",
                (status,),
            )
        else:
            cursor = conn.execute(
                "SELECT * FROM deployments ORDER BY created_at DESC"
            )
        columns = [desc[0] for desc in cursor.description]
        return [_row_to_record(row, columns) for row in cursor.fetchall()]
    finally:
        conn.close()
