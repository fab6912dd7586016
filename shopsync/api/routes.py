import hmac
import structlog
from fastapi import APIRouter, BackgroundTasks, Header, HTTPException
from .schemas import SyncRequest, SyncAccepted, StatusResponse
from ..pipeline.orchestrator import trigger_sync, build_destination, get_status
from ..pipeline.context import SyncJob
from ..pipeline.ledger import get_last_job
from ..errors import ConfigurationError
from ..config import settings
from ..db import get_conn, migrate

log = structlog.get_logger()

router = APIRouter()

def _check_bearer(authorization: str | None):
    secret = settings.worker_secret_key
    if not secret:
        raise HTTPException(503, 'worker secret not configured')
    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(401, 'Unauthorized')

@router.get(
    '/',
    summary="Liveness",
    tags=["Health"],
)
def root():
    return {'status': 'Shopify Sync Worker is running'}

@router.get(
    '/health',
    summary="Health check",
    description="Returns service and DB connectivity plus last job metadata.",
    tags=["Health"],
)
def health():
    try:
        conn = get_conn(settings.db_path)
        migrate(conn)
        return {'ok': True, 'db': 'ok', 'last_job': get_last_job(conn)}
    except Exception as e:
        raise HTTPException(503, f'db_error: {e}')

@router.post(
    '/sync-shopify',
    response_model=SyncAccepted,
    status_code=202,
    summary="Trigger Shopify sync",
    description="Validates the bearer secret, queues the sync job in the background and returns immediately.",
    tags=["Sync"],
)
def sync_shopify(req: SyncRequest, background: BackgroundTasks, authorization: str | None = Header(default=None)):
    _check_bearer(authorization)
    log.info("sync_request_received", job_id=req.integrationId, account_id=req.accountId)
    try:
        destination = build_destination(
            progress_callback_url=req.progressCallbackUrl,
            worker_secret=req.workerSecret,
            api_base_url=req.apiBaseUrl,
            app_id=req.appId,
        )
    except ConfigurationError as e:
        raise HTTPException(422, str(e))
    job = SyncJob(
        job_id=req.integrationId,
        account_id=req.accountId,
        config=req.config.model_dump(exclude_none=True),
        notify_email=req.userEmail,
    )
    if not trigger_sync(background, job, destination):
        destination.close()
        raise HTTPException(409, 'a sync is already running for this account')
    return SyncAccepted(message='Sync started', integrationId=req.integrationId)

@router.get(
    '/status/{job_id}',
    response_model=StatusResponse,
    summary="Get sync status",
    description="Return the local ledger entry for a job.",
    tags=["Sync"],
)
def status(job_id: str):
    st = get_status(job_id)
    if not st:
        raise HTTPException(404, 'job not found')
    return st
