from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from ..errors import ConfigurationError
from ..utils import now_utc_iso

WRITE_MODES = ("create", "upsert")

@dataclass
class SyncTuning:
    page_size_customers: int = 50
    page_size_orders: int = 25
    page_size_products: int = 50
    fetch_retries: int = 3
    fetch_backoff_base_seconds: float = 2.0
    page_delay_seconds: float = 0.5
    write_pause_every: int = 10
    write_pause_seconds: float = 0.1
    checkpoint_every: int = 100
    aggregation_load_limit: int = 10000
    write_mode: str = "create"

    @classmethod
    def from_settings(cls, s) -> "SyncTuning":
        if s.sync_write_mode not in WRITE_MODES:
            raise ConfigurationError(f"SYNC_WRITE_MODE must be one of {WRITE_MODES}, got {s.sync_write_mode!r}")
        return cls(
            page_size_customers=s.page_size_customers,
            page_size_orders=s.page_size_orders,
            page_size_products=s.page_size_products,
            fetch_retries=s.fetch_retries,
            fetch_backoff_base_seconds=s.fetch_backoff_base_seconds,
            page_delay_seconds=s.page_delay_seconds,
            write_pause_every=s.write_pause_every,
            write_pause_seconds=s.write_pause_seconds,
            checkpoint_every=s.checkpoint_every,
            aggregation_load_limit=s.aggregation_load_limit,
            write_mode=s.sync_write_mode,
        )

@dataclass
class Checkpoint:
    stage: str
    total: int | None = None
    processed: int | None = None
    resource: str | None = None
    timestamp: str = field(default_factory=now_utc_iso)

    def to_payload(self) -> dict:
        payload: dict[str, Any] = {"current_step": self.stage}
        if self.resource and self.total is not None:
            payload[f"{self.resource}_total"] = self.total
            payload[f"{self.resource}_processed"] = self.processed or 0
        payload["last_updated"] = self.timestamp
        return payload

@dataclass
class SyncJob:
    job_id: str
    account_id: str
    config: dict = field(default_factory=dict)
    notify_email: str | None = None
    status: str = "pending"
    stage: str | None = None
    processed: dict[str, int] = field(default_factory=dict)
    checkpoint: Checkpoint | None = None
    started_at: str | None = None
    finished_at: str | None = None
    total_records: int = 0
    error_message: str | None = None

    @property
    def access_token(self) -> str | None:
        return self.config.get("accessToken") or self.config.get("apiKey")

    @property
    def store_url(self) -> str | None:
        return self.config.get("storeUrl")

    def record_processed(self, resource: str, count: int):
        # counts only move forward within a run
        self.processed[resource] = max(self.processed.get(resource, 0), count)

@dataclass
class SyncContext:
    """Everything a stage needs, passed explicitly instead of held globally."""
    job: SyncJob
    destination: Any
    reporter: Any
    source: Any = None
    tuning: SyncTuning = field(default_factory=SyncTuning)
    notifier: Any = None
    sleep: Callable[[float], None] = time.sleep

    @property
    def scope(self) -> dict:
        return {"account_id": self.job.account_id, "integration_id": self.job.job_id}

    def pause(self, seconds: float):
        if seconds > 0:
            self.sleep(seconds)
