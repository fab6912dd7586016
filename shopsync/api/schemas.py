from pydantic import BaseModel, ConfigDict
from typing import Optional, Literal

class ShopifyConfig(BaseModel):
    model_config = ConfigDict(extra='allow')
    accessToken: Optional[str] = None
    apiKey: Optional[str] = None
    storeUrl: Optional[str] = None

class SyncRequest(BaseModel):
    integrationId: str
    accountId: str
    userEmail: Optional[str] = None
    config: ShopifyConfig
    progressCallbackUrl: Optional[str] = None
    workerSecret: Optional[str] = None
    apiBaseUrl: Optional[str] = None
    appId: Optional[str] = None

class SyncAccepted(BaseModel):
    message: str
    integrationId: str

class StatusResponse(BaseModel):
    job_id: str
    account_id: str
    status: Literal['pending','running','connected','error']
    started_at_utc: str
    finished_at_utc: Optional[str] = None
    total_records: Optional[int] = None
    error_message: Optional[str] = None
