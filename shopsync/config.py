from pathlib import Path
from typing import Literal
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Load .env from repo root for local development and scripts.
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True, populate_by_name=True)
    worker_secret_key: str | None = Field(default=None, alias="WORKER_SECRET_KEY")
    shopify_api_version: str = Field(default="2024-04", alias="SHOPIFY_API_VERSION")
    destination_base_url: str | None = Field(default=None, alias="DESTINATION_BASE_URL")
    destination_app_id: str | None = Field(default=None, alias="DESTINATION_APP_ID")
    destination_api_key: str | None = Field(default=None, alias="DESTINATION_API_KEY")
    notify_webhook_url: str | None = Field(default=None, alias="NOTIFY_WEBHOOK_URL")
    http_timeout_seconds: float = Field(default=30.0, alias="HTTP_TIMEOUT_SECONDS")
    db_path: str = Field(default="./data/app.db", alias="DB_PATH")
    sync_write_mode: Literal["create", "upsert"] = Field(default="create", alias="SYNC_WRITE_MODE")
    sync_lock_ttl_seconds: int = Field(default=7200, alias="SYNC_LOCK_TTL_SECONDS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_error_file: str | None = Field(default=None, alias="LOG_ERROR_FILE")
    # Rate-limit contract with the Shopify Admin API; change with care.
    page_size_customers: int = Field(default=50, alias="PAGE_SIZE_CUSTOMERS")
    page_size_orders: int = Field(default=25, alias="PAGE_SIZE_ORDERS")
    page_size_products: int = Field(default=50, alias="PAGE_SIZE_PRODUCTS")
    fetch_retries: int = Field(default=3, alias="FETCH_RETRIES")
    fetch_backoff_base_seconds: float = Field(default=2.0, alias="FETCH_BACKOFF_BASE_SECONDS")
    page_delay_seconds: float = Field(default=0.5, alias="PAGE_DELAY_SECONDS")
    write_pause_every: int = Field(default=10, alias="WRITE_PAUSE_EVERY")
    write_pause_seconds: float = Field(default=0.1, alias="WRITE_PAUSE_SECONDS")
    checkpoint_every: int = Field(default=100, alias="CHECKPOINT_EVERY")
    aggregation_load_limit: int = Field(default=10000, alias="AGGREGATION_LOAD_LIMIT")

settings = Settings()
