from __future__ import annotations
import time
import httpx
import structlog

from ..errors import FatalAPIError, ThrottleError, TransientFetchError
from ..utils import retry_call
from .context import SyncTuning

log = structlog.get_logger()

THROTTLE_CODE = "THROTTLED"

def _classify_errors(errors: list) -> Exception:
    for err in errors:
        code = ((err or {}).get("extensions") or {}).get("code") if isinstance(err, dict) else None
        if code == THROTTLE_CODE:
            return ThrottleError(f"GraphQL throttled: {err.get('message', '')}")
    return FatalAPIError(f"GraphQL errors: {errors}")

def execute_query(
    source,
    query: str,
    variables: dict,
    tuning: SyncTuning | None = None,
    sleep=time.sleep,
) -> dict:
    """Run one GraphQL request with the throttle-aware retry policy.

    Transport failures, non-2xx statuses and THROTTLED errors are retried
    ``fetch_retries`` times with ``base * 2^(n)`` backoff; any other GraphQL
    error is raised immediately as FatalAPIError.
    """
    tuning = tuning or SyncTuning()

    def _call():
        try:
            result = source.graphql(query, variables)
        except httpx.HTTPStatusError as e:
            raise TransientFetchError(f"GraphQL API Error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TransientFetchError(f"GraphQL request failed: {e}") from e
        except ValueError as e:
            raise TransientFetchError(f"GraphQL response was not JSON: {e}") from e
        if not isinstance(result, dict):
            raise TransientFetchError(f"GraphQL response was not an object: {type(result).__name__}")
        if result.get("errors"):
            raise _classify_errors(result["errors"])
        return result

    def _on_retry(attempt, exc, delay):
        event = "graphql_throttled" if isinstance(exc, ThrottleError) else "graphql_retry"
        log.warning(event, attempt=attempt, retries=tuning.fetch_retries, wait_seconds=delay, err=str(exc))

    return retry_call(
        _call,
        attempts=tuning.fetch_retries + 1,
        base_delay=tuning.fetch_backoff_base_seconds,
        retryable=lambda exc: isinstance(exc, TransientFetchError),
        on_retry=_on_retry,
        sleep=sleep,
    )

def fetch_all_pages(
    source,
    query: str,
    connection: str,
    page_size: int,
    cursor: str | None = None,
    tuning: SyncTuning | None = None,
    sleep=time.sleep,
) -> list:
    tuning = tuning or SyncTuning()
    nodes: list = []
    pages = 0
    while True:
        result = execute_query(source, query, {"first": page_size, "cursor": cursor}, tuning, sleep)
        conn = (result.get("data") or {}).get(connection)
        if not isinstance(conn, dict):
            raise FatalAPIError(f"GraphQL response missing '{connection}'")
        nodes.extend(edge.get("node") if isinstance(edge, dict) else None for edge in conn.get("edges") or [])
        pages += 1
        page_info = conn.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        cursor = page_info.get("endCursor")
        if tuning.page_delay_seconds > 0:
            sleep(tuning.page_delay_seconds)
    log.debug("pages_fetched", connection=connection, pages=pages, nodes=len(nodes))
    return nodes
