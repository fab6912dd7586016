import sqlite3
from ..utils import now_utc_iso

def start_job(conn: sqlite3.Connection, job):
    conn.execute(
        "INSERT OR REPLACE INTO sync_jobs(job_id, account_id, status, started_at_utc) VALUES(?,?,?,?)",
        (job.job_id, job.account_id, 'running', now_utc_iso()),
    )

def finish_job(conn: sqlite3.Connection, job):
    err = (job.error_message or "")[:1000] or None
    conn.execute(
        """
        UPDATE sync_jobs SET finished_at_utc=?, status=?, customers_synced=?, orders_synced=?,
          products_synced=?, total_records=?, error_message=?
        WHERE job_id=?
        """,
        (
            job.finished_at or now_utc_iso(),
            job.status,
            job.processed.get("customers", 0),
            job.processed.get("orders", 0),
            job.processed.get("products", 0),
            job.total_records,
            err,
            job.job_id,
        ),
    )

def get_job_status(conn: sqlite3.Connection, job_id: str):
    cur = conn.cursor()
    row = cur.execute(
        """
        SELECT job_id, account_id, status, started_at_utc, finished_at_utc, total_records, error_message
        FROM sync_jobs WHERE job_id=?
        """,
        (job_id,),
    ).fetchone()
    if not row: return None
    return {
        'job_id': row[0], 'account_id': row[1], 'status': row[2], 'started_at_utc': row[3],
        'finished_at_utc': row[4], 'total_records': row[5], 'error_message': row[6],
    }

def get_last_job(conn: sqlite3.Connection):
    row = conn.execute(
        "SELECT job_id, status, started_at_utc, finished_at_utc FROM sync_jobs ORDER BY started_at_utc DESC LIMIT 1"
    ).fetchone()
    if not row:
        return None
    return {'job_id': row[0], 'status': row[1], 'started_at_utc': row[2], 'finished_at_utc': row[3]}
