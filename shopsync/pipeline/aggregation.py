from __future__ import annotations
from collections import defaultdict
import structlog

from ..errors import BulkLoadError
from .context import SyncContext

log = structlog.get_logger()

def compute_customer_totals(interactions: list[dict]) -> dict[str, float]:
    """Sum purchase value per customer_id, keeping only positive totals."""
    totals: dict[str, float] = defaultdict(float)
    for it in interactions:
        cid = it.get("customer_id")
        if cid is None:
            continue
        try:
            totals[str(cid)] += float(it.get("value") or 0)
        except (TypeError, ValueError):
            continue
    return {cid: round(total, 2) for cid, total in totals.items() if total > 0}

def _load(ctx: SyncContext, kind: str, filters: dict) -> list[dict]:
    try:
        return ctx.destination.list_records(kind, filters, ctx.tuning.aggregation_load_limit)
    except Exception as e:
        raise BulkLoadError(f"Failed to load {kind} records: {e}") from e

def run_aggregation(ctx: SyncContext) -> int:
    job = ctx.job
    job.stage = "aggregation"
    customers = _load(ctx, "Customer", ctx.scope)
    interactions = _load(ctx, "Interaction", {**ctx.scope, "interaction_type": "purchase"})
    totals = compute_customer_totals(interactions)
    log.info(
        "aggregation_loaded",
        job_id=job.job_id,
        customers=len(customers),
        interactions=len(interactions),
        customers_with_value=len(totals),
    )

    updated = 0
    failed = 0
    for cust in customers:
        total = totals.get(str(cust.get("customer_id")))
        if not total:
            continue
        try:
            ctx.destination.patch_record("Customer", cust.get("id"), {"total_value": total})
        except Exception as e:
            failed += 1
            log.error("customer_total_update_failed", job_id=job.job_id, customer_id=cust.get("customer_id"), err=str(e))
            continue
        updated += 1
        if ctx.tuning.write_pause_every and updated % ctx.tuning.write_pause_every == 0:
            ctx.pause(ctx.tuning.write_pause_seconds)
    log.info("aggregation_done", job_id=job.job_id, updated=updated, failed=failed)
    return updated
