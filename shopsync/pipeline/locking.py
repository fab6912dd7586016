import sqlite3
from datetime import datetime, timezone, timedelta

def acquire_lock(conn: sqlite3.Connection, name: str, owner: str, ttl_seconds: int = 7200) -> bool:
    """Take the named lock unless another owner holds an unexpired one."""
    now = datetime.now(timezone.utc)
    exp = (now + timedelta(seconds=ttl_seconds)).isoformat()
    row = conn.execute("SELECT owner, expires_at_utc FROM locks WHERE name=?", (name,)).fetchone()
    if row and row[0] != owner and datetime.fromisoformat(row[1]) >= now:
        return False
    conn.execute(
        "INSERT OR REPLACE INTO locks(name, owner, acquired_at_utc, expires_at_utc) VALUES(?,?,?,?)",
        (name, owner, now.isoformat(), exp),
    )
    return True

def release_lock(conn: sqlite3.Connection, name: str, owner: str):
    conn.execute("DELETE FROM locks WHERE name=? AND owner=?", (name, owner))

def live_lock_owner(conn: sqlite3.Connection, name: str):
    """Owner of the named lock if it has not expired, else None."""
    row = conn.execute("SELECT owner, expires_at_utc FROM locks WHERE name=?", (name,)).fetchone()
    if row and datetime.fromisoformat(row[1]) >= datetime.now(timezone.utc):
        return row[0]
    return None
