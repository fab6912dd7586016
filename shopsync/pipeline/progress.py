from __future__ import annotations
import structlog

from ..errors import StatusUpdateError
from .context import Checkpoint

log = structlog.get_logger()

class ProgressReporter:
    """Fire-and-forget status channel for one job.

    Every update is attempted once; failures are kept in ``failures`` and
    logged, never raised, so control flow never depends on them.
    """

    def __init__(self, destination, job):
        self.destination = destination
        self.job = job
        self.failures: list[StatusUpdateError] = []
        self.sent: list[dict] = []

    def update(self, fields: dict) -> bool:
        try:
            self.destination.update_job(self.job.job_id, fields)
        except Exception as e:
            err = StatusUpdateError(f"status update failed: {e}")
            self.failures.append(err)
            log.warning("status_update_failed", job_id=self.job.job_id, err=str(e), fields=sorted(fields))
            return False
        self.sent.append(fields)
        return True

    def checkpoint(self, stage: str, total: int | None = None, processed: int | None = None, resource: str | None = None) -> bool:
        cp = Checkpoint(stage=stage, total=total, processed=processed, resource=resource)
        self.job.checkpoint = cp
        return self.update({"sync_progress": cp.to_payload()})

    def finish(self, fields: dict) -> bool:
        self.job.checkpoint = None
        return self.update({**fields, "sync_progress": None})
