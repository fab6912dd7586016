from __future__ import annotations
import httpx
import structlog

log = structlog.get_logger()

class WebhookNotifier:
    """Posts ``{to, subject, body}`` to a mail relay webhook. Best-effort."""

    def __init__(self, webhook_url: str, timeout: float = 15.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> bool:
        data = {"to": to, "subject": subject, "body": body}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.post(self.webhook_url, json=data)
        except httpx.HTTPError as e:
            log.warning("notify_send_failed", to=to, err=str(e))
            return False
        if r.status_code >= 300:
            log.warning("notify_send_failed", to=to, status=r.status_code, body=r.text[:500])
            return False
        return True


def format_sync_notice(job, duration_minutes: int) -> tuple[str, str]:
    counts = job.processed
    if job.status == "connected":
        subject = "Shopify sync completed"
        lines = [
            f"Your Shopify sync finished in {duration_minutes} minute(s).",
            f"Customers: {counts.get('customers', 0)}",
            f"Orders: {counts.get('orders', 0)}",
            f"Products: {counts.get('products', 0)}",
            f"Total records: {job.total_records}",
        ]
    else:
        subject = "Shopify sync failed"
        lines = [
            f"Your Shopify sync stopped after {duration_minutes} minute(s).",
            f"Error: {job.error_message or 'unknown error'}",
        ]
    return subject, "\n".join(lines)
