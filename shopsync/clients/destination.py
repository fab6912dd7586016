"""Destination write API clients.

Two deployment variants exist:

- ``CallbackDestination``: a single progress callback URL plus a shared
  secret. Entity operations go to sibling functions on the same host
  (``/createEntity``, ``/updateEntity``, ``/listEntities``).
- ``EntityApiDestination``: a REST entity API addressed by base URL and
  app id, authenticated with an ``api_key`` header.

Every failure surfaces as ``DestinationError`` so stage code never has to
know which variant it is talking to.
"""
from __future__ import annotations
import json
import httpx

from ..errors import DestinationError

JOB_ENTITY = "Integration"

def _raise_for(r: httpx.Response, what: str):
    if r.status_code >= 400:
        raise DestinationError(f"Failed to {what}: {r.status_code} - {r.text[:500]}", status_code=r.status_code)

class Destination:
    def create_record(self, kind: str, record: dict) -> dict:
        raise NotImplementedError

    def patch_record(self, kind: str, record_id: str, fields: dict) -> dict:
        raise NotImplementedError

    def list_records(self, kind: str, filters: dict, limit: int) -> list[dict]:
        raise NotImplementedError

    def update_job(self, job_id: str, fields: dict) -> dict:
        return self.patch_record(JOB_ENTITY, job_id, fields)

    def close(self):
        pass


class CallbackDestination(Destination):
    def __init__(self, callback_url: str, secret: str, timeout: float = 30.0, client: httpx.Client | None = None):
        self.callback_url = callback_url
        self.secret = secret
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None

    def _sibling(self, name: str) -> str:
        return self.callback_url.replace("/updateSyncProgress", f"/{name}")

    def _post(self, url: str, body: dict, what: str):
        try:
            r = self._client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {self.secret}"},
            )
        except httpx.HTTPError as e:
            raise DestinationError(f"Failed to {what}: {e}") from e
        _raise_for(r, what)
        try:
            return r.json()
        except ValueError:
            return {}

    def update_job(self, job_id: str, fields: dict) -> dict:
        return self._post(
            self.callback_url,
            {"integrationId": job_id, "updateData": fields},
            "update integration",
        )

    def create_record(self, kind: str, record: dict) -> dict:
        return self._post(self._sibling("createEntity"), {"entityName": kind, "data": record}, f"create {kind}")

    def patch_record(self, kind: str, record_id: str, fields: dict) -> dict:
        return self._post(
            self._sibling("updateEntity"),
            {"entityName": kind, "id": record_id, "data": fields},
            f"update {kind} {record_id}",
        )

    def list_records(self, kind: str, filters: dict, limit: int) -> list[dict]:
        data = self._post(
            self._sibling("listEntities"),
            {"entityName": kind, "filter": filters, "limit": limit},
            f"list {kind}",
        )
        items = (data.get("records") or data.get("data") or []) if isinstance(data, dict) else data
        return items if isinstance(items, list) else []

    def close(self):
        if self._owns_client:
            self._client.close()


class EntityApiDestination(Destination):
    def __init__(
        self,
        base_url: str,
        app_id: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.base = f"{base_url.rstrip('/')}/api/apps/{app_id}/entities"
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None

    def _headers(self):
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["api_key"] = self.api_key
        return headers

    def _request(self, method: str, url: str, what: str, **kwargs):
        try:
            r = self._client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise DestinationError(f"Failed to {what}: {e}") from e
        _raise_for(r, what)
        try:
            return r.json()
        except ValueError:
            return {}

    def create_record(self, kind: str, record: dict) -> dict:
        return self._request("POST", f"{self.base}/{kind}", f"create {kind}", json=record)

    def patch_record(self, kind: str, record_id: str, fields: dict) -> dict:
        return self._request("PUT", f"{self.base}/{kind}/{record_id}", f"update {kind} {record_id}", json=fields)

    def list_records(self, kind: str, filters: dict, limit: int) -> list[dict]:
        params = {"q": json.dumps(filters, sort_keys=True), "limit": limit}
        data = self._request("GET", f"{self.base}/{kind}", f"list {kind}", params=params)
        items = (data.get("records") or data.get("data") or []) if isinstance(data, dict) else data
        return items if isinstance(items, list) else []

    def close(self):
        if self._owns_client:
            self._client.close()
