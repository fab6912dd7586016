import sqlite3
from pathlib import Path

def get_conn(db_path: str) -> sqlite3.Connection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)  # autocommit
    conn.execute("PRAGMA journal_mode=WAL;")
    return conn

DDL = [
    # One row per sync job (local mirror of what was reported to the destination)
    """
CREATE TABLE IF NOT EXISTS sync_jobs (
  job_id TEXT PRIMARY KEY,
  account_id TEXT NOT NULL,
  status TEXT NOT NULL,        -- 'pending'|'running'|'connected'|'error'
  started_at_utc TEXT NOT NULL,
  finished_at_utc TEXT,
  customers_synced INTEGER,
  orders_synced INTEGER,
  products_synced INTEGER,
  total_records INTEGER,
  error_message TEXT
);
""",
    "CREATE INDEX IF NOT EXISTS ix_sync_jobs_account_time ON sync_jobs(account_id, started_at_utc DESC);",

    # Advisory locks, one per account while a job runs
    """
CREATE TABLE IF NOT EXISTS locks (
  name TEXT PRIMARY KEY,
  owner TEXT NOT NULL,
  acquired_at_utc TEXT NOT NULL,
  expires_at_utc TEXT NOT NULL
);
""",
]

def migrate(conn: sqlite3.Connection):
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)
