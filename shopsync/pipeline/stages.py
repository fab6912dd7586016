from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import structlog

from ..errors import RecordPersistError
from .context import SyncContext
from .fetcher import fetch_all_pages
from .queries import CUSTOMERS_QUERY, ORDERS_QUERY, PRODUCTS_QUERY
from .transforms import transform_customer, transform_order, transform_product, external_key

log = structlog.get_logger()

@dataclass(frozen=True)
class StageSpec:
    resource: str          # "customers" | "orders" | "products"
    entity: str            # destination entity kind
    step_label: str
    query: str
    connection: str
    page_size_attr: str
    transform: Callable

CUSTOMERS = StageSpec("customers", "Customer", "Syncing customers", CUSTOMERS_QUERY, "customers", "page_size_customers", transform_customer)
ORDERS = StageSpec("orders", "Interaction", "Syncing orders", ORDERS_QUERY, "orders", "page_size_orders", transform_order)
PRODUCTS = StageSpec("products", "Product", "Syncing products", PRODUCTS_QUERY, "products", "page_size_products", transform_product)

STAGES = (CUSTOMERS, ORDERS, PRODUCTS)

def persist_record(ctx: SyncContext, kind: str, record: dict):
    """Create the record, or with write_mode=upsert patch an existing match."""
    try:
        if ctx.tuning.write_mode == "upsert":
            key = {**ctx.scope, **external_key(kind, record)}
            existing = ctx.destination.list_records(kind, key, 1)
            if existing and existing[0].get("id"):
                return ctx.destination.patch_record(kind, existing[0]["id"], record)
        return ctx.destination.create_record(kind, record)
    except Exception as e:
        raise RecordPersistError(f"Failed to persist {kind}: {e}") from e

def run_stage(ctx: SyncContext, spec: StageSpec) -> int:
    job = ctx.job
    job.stage = spec.resource
    tuning = ctx.tuning

    # Fetching: the total is only known once every page is in memory.
    nodes = fetch_all_pages(
        ctx.source,
        spec.query,
        spec.connection,
        getattr(tuning, spec.page_size_attr),
        tuning=tuning,
        sleep=ctx.sleep,
    )
    total = len(nodes)
    log.info("stage_fetch_done", job_id=job.job_id, resource=spec.resource, total=total)

    # Counting
    ctx.reporter.checkpoint(spec.step_label, total=total, processed=0, resource=spec.resource)

    # Persisting
    synced = 0
    skipped = 0
    failed = 0
    last = total - 1
    for i, node in enumerate(nodes):
        reported = False
        record = spec.transform(node, job.account_id, job.job_id)
        if record is None:
            skipped += 1
        else:
            try:
                persist_record(ctx, spec.entity, record)
            except RecordPersistError as e:
                failed += 1
                log.error("record_persist_failed", job_id=job.job_id, resource=spec.resource, index=i, err=str(e))
            else:
                synced += 1
                job.record_processed(spec.resource, synced)
                if synced % tuning.checkpoint_every == 0:
                    ctx.reporter.checkpoint(spec.step_label, total=total, processed=synced, resource=spec.resource)
                    reported = True
        if i == last and not reported:
            ctx.reporter.checkpoint(spec.step_label, total=total, processed=synced, resource=spec.resource)
        if tuning.write_pause_every and i % tuning.write_pause_every == 0:
            ctx.pause(tuning.write_pause_seconds)

    job.record_processed(spec.resource, synced)
    log.info(
        "stage_done",
        job_id=job.job_id,
        resource=spec.resource,
        total=total,
        synced=synced,
        skipped=skipped,
        failed=failed,
    )
    return synced
