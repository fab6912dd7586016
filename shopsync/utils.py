import re
import time as time_module
from datetime import datetime, timezone

def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def normalize_store_host(store_url: str) -> str:
    host = re.sub(r"^https?://", "", store_url.strip())
    return host.rstrip("/")

def gid_tail(gid: str) -> str:
    # gid://shopify/Customer/123 -> 123
    return str(gid).split("/")[-1]

def backoff_delay(base_delay: float, attempt: int, max_delay: float | None = None) -> float:
    # attempt is 1-indexed: base, base*2, base*4, ...
    delay = base_delay * (2 ** (attempt - 1))
    if max_delay is not None:
        delay = min(max_delay, delay)
    return delay

def retry_call(
    fn,
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float | None = None,
    retryable=None,
    on_retry=None,
    sleep=time_module.sleep,
):
    """Call fn until it succeeds or attempts run out.

    retryable(exc) decides whether an exception gets another attempt; by
    default every exception does. on_retry(attempt, exc, delay) is called
    before each backoff sleep. The last exception is re-raised unchanged.
    """
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except Exception as exc:
            if attempt >= attempts or (retryable is not None and not retryable(exc)):
                raise
            delay = backoff_delay(base_delay, attempt, max_delay)
            if on_retry:
                on_retry(attempt, exc, delay)
            if delay > 0:
                sleep(delay)
    raise RuntimeError("retry_call requires attempts >= 1")
