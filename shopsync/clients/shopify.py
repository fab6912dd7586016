from __future__ import annotations
import httpx

from ..errors import FatalAPIError

SHOP_INFO_QUERY = "query { shop { name } }"

class ShopifyClient:
    """Thin Admin GraphQL client.

    ``graphql`` only raises httpx errors (transport failures and non-2xx
    statuses); reading the GraphQL ``errors`` array is left to the caller.
    """

    def __init__(
        self,
        store_host: str,
        access_token: str,
        api_version: str = "2024-04",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.store_host = store_host
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None

    @property
    def graphql_url(self) -> str:
        return f"https://{self.store_host}/admin/api/{self.api_version}/graphql.json"

    def _headers(self):
        return {"X-Shopify-Access-Token": self.access_token, "Content-Type": "application/json"}

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        r = self._client.post(
            self.graphql_url,
            json={"query": query, "variables": variables or {}},
            headers=self._headers(),
        )
        r.raise_for_status()
        return r.json()

    def shop_name(self) -> str:
        result = self.graphql(SHOP_INFO_QUERY)
        if result.get("errors"):
            raise FatalAPIError(f"shop query returned errors: {result['errors']}")
        shop = (result.get("data") or {}).get("shop") or {}
        return shop.get("name") or ""

    def close(self):
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
