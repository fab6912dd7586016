import time
import structlog
from ..db import get_conn, migrate
from ..config import settings
from ..logging import bind_job, clear_job
from ..errors import ConfigurationError, ConnectivityError
from ..utils import normalize_store_host, now_utc_iso
from ..clients.shopify import ShopifyClient
from ..clients.destination import CallbackDestination, EntityApiDestination
from ..services.notifier import WebhookNotifier, format_sync_notice
from .context import SyncContext, SyncJob, SyncTuning
from .progress import ProgressReporter
from .stages import CUSTOMERS, ORDERS, PRODUCTS, run_stage
from .aggregation import run_aggregation
from .ledger import start_job, finish_job, get_job_status
from .locking import acquire_lock, live_lock_owner, release_lock

log = structlog.get_logger()

def _default_source_factory(host: str, token: str):
    return ShopifyClient(
        host,
        token,
        api_version=settings.shopify_api_version,
        timeout=settings.http_timeout_seconds,
    )

def run_sync(ctx: SyncContext, source_factory=None) -> SyncJob:
    """Run one job to completion. Never raises; the outcome is on ctx.job."""
    job = ctx.job
    job.status = "running"
    job.started_at = now_utc_iso()
    started = time.monotonic()
    owns_source = False
    log.info("sync_started", job_id=job.job_id, account_id=job.account_id)

    try:
        token = job.access_token
        store_url = job.store_url
        if not token or not store_url:
            raise ConfigurationError("Shopify configuration is incomplete.")
        host = normalize_store_host(store_url)

        ctx.reporter.checkpoint("Testing connection")
        if ctx.source is None:
            ctx.source = (source_factory or _default_source_factory)(host, token)
            owns_source = True
        try:
            shop_name = ctx.source.shop_name()
        except Exception as e:
            raise ConnectivityError(f"Shopify connection failed: {e}") from e
        log.info("shop_connected", job_id=job.job_id, shop=shop_name, host=host)

        counts = {}
        for spec in (CUSTOMERS, ORDERS, PRODUCTS):
            step_started = time.monotonic()
            counts[spec.resource] = run_stage(ctx, spec)
            log.info(
                "sync_step_done",
                job_id=job.job_id,
                step=spec.resource,
                synced=counts[spec.resource],
                elapsed_sec=round(time.monotonic() - step_started, 2),
            )

        ctx.reporter.checkpoint("Finalizing sync")
        run_aggregation(ctx)

        job.status = "connected"
        job.stage = None
        job.finished_at = now_utc_iso()
        job.total_records = sum(counts.values())
        ctx.reporter.finish({
            "status": "connected",
            "last_sync": job.finished_at,
            "total_records": job.total_records,
        })
        log.info("sync_finished", job_id=job.job_id, status="connected", total_records=job.total_records)
    except Exception as e:
        job.status = "error"
        job.finished_at = now_utc_iso()
        job.error_message = str(e)
        log.error("sync_failed", job_id=job.job_id, stage=job.stage, err_type=type(e).__name__, err=str(e))
        ctx.reporter.finish({"status": "error"})
    finally:
        if owns_source:
            ctx.source.close()

    duration_minutes = round((time.monotonic() - started) / 60)
    log.info("sync_duration", job_id=job.job_id, minutes=duration_minutes)
    _notify(ctx, duration_minutes)
    return job

def _notify(ctx: SyncContext, duration_minutes: int):
    job = ctx.job
    if ctx.notifier is None or not job.notify_email:
        return
    subject, body = format_sync_notice(job, duration_minutes)
    try:
        ctx.notifier.send(job.notify_email, subject, body)
    except Exception as e:
        log.warning("notify_failed", job_id=job.job_id, err=str(e))

def build_destination(progress_callback_url=None, worker_secret=None, api_base_url=None, app_id=None):
    if progress_callback_url:
        return CallbackDestination(
            progress_callback_url,
            worker_secret or settings.worker_secret_key or "",
            timeout=settings.http_timeout_seconds,
        )
    base = api_base_url or settings.destination_base_url
    app = app_id or settings.destination_app_id
    if not base or not app:
        raise ConfigurationError("no destination: need progressCallbackUrl or apiBaseUrl + appId")
    return EntityApiDestination(base, app, settings.destination_api_key, timeout=settings.http_timeout_seconds)

def build_context(job: SyncJob, destination) -> SyncContext:
    notifier = WebhookNotifier(settings.notify_webhook_url) if settings.notify_webhook_url else None
    return SyncContext(
        job=job,
        destination=destination,
        reporter=ProgressReporter(destination, job),
        tuning=SyncTuning.from_settings(settings),
        notifier=notifier,
    )

def _lock_name(account_id: str) -> str:
    return f"sync:{account_id}"

def trigger_sync(background, job: SyncJob, destination) -> bool:
    """Record the job, take the per-account lock and queue it. False if busy."""
    conn = get_conn(settings.db_path)
    migrate(conn)
    # a live lock blocks any job, the same job id included; an expired one
    # means the previous run died and its ledger row is stale
    if live_lock_owner(conn, _lock_name(job.account_id)) is not None:
        return False
    if not acquire_lock(conn, _lock_name(job.account_id), job.job_id, ttl_seconds=settings.sync_lock_ttl_seconds):
        return False
    start_job(conn, job)
    background.add_task(_sync_impl, job, destination)
    return True

def _sync_impl(job: SyncJob, destination):
    bind_job(job.job_id, job.account_id)
    try:
        run_sync(build_context(job, destination))
    except ConfigurationError as e:
        job.status = "error"
        job.finished_at = now_utc_iso()
        job.error_message = str(e)
        log.error("sync_failed", job_id=job.job_id, err_type=type(e).__name__, err=str(e))
        ProgressReporter(destination, job).finish({"status": "error"})
    finally:
        destination.close()
        conn = get_conn(settings.db_path)
        finish_job(conn, job)
        release_lock(conn, _lock_name(job.account_id), job.job_id)
        clear_job()

def get_status(job_id: str):
    conn = get_conn(settings.db_path)
    migrate(conn)
    return get_job_status(conn, job_id)
