"""
Hosted row store client (PostgREST-style REST API).

Maps the RowStore operations onto the hosted database's REST endpoints:
1. select  -> GET    /rest/v1/<table>?column=op.value
2. insert  -> POST   /rest/v1/<table> (Prefer: return=representation)
3. update  -> PATCH  /rest/v1/<table>?id=eq.<id>
4. delete  -> DELETE /rest/v1/<table>?id=eq.<id>
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

import certifi
import httpx
from fastapi.encoders import jsonable_encoder

from focusboard.core.config import settings
from focusboard.services.row_store import RowFilter, RowNotFoundError, RowStore, RowStoreError

logger = logging.getLogger(__name__)


class RestRowStore(RowStore):
    """RowStore client for a hosted PostgREST endpoint."""

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the REST row store.

        Args:
            base_url: Project URL of the hosted service (defaults to settings.store_url)
            api_key: Public API key sent as the `apikey` header
            access_token: Signed-in user's JWT; falls back to the API key
            client: Optional preconfigured httpx client
        """
        base_url = base_url or settings.store_url
        if not base_url:
            raise RowStoreError("store_url is not configured for the rest row store")

        self.base_url = base_url.rstrip("/") + self.REST_PATH
        self.api_key = api_key or settings.store_api_key
        self.access_token = access_token or settings.store_access_token or self.api_key
        self.client = client or httpx.AsyncClient(
            verify=certifi.where(),
            timeout=settings.store_timeout,
        )

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _filter_params(filters: Sequence[RowFilter]) -> Dict[str, str]:
        params = {}
        for row_filter in filters:
            value = jsonable_encoder(row_filter.value)
            params[row_filter.column] = f"{row_filter.op}.{value}"
        return params

    @staticmethod
    def _check(response: httpx.Response, action: str, table: str) -> None:
        if response.status_code >= 400:
            raise RowStoreError(
                f"{action} on {table} failed with HTTP {response.status_code}: {response.text}",
                table=table,
                status_code=response.status_code,
            )

    async def _send(self, method: str, table: str, **kwargs) -> httpx.Response:
        try:
            return await self.client.request(method, f"{self.base_url}/{table}", **kwargs)
        except httpx.HTTPError as e:
            raise RowStoreError(f"{method} {table} failed: {e}", table=table) from e

    async def select(self, table: str, filters: Sequence[RowFilter] = ()) -> List[Dict[str, Any]]:
        params = {"select": "*", **self._filter_params(filters)}
        response = await self._send("GET", table, params=params, headers=self._headers())
        self._check(response, "select", table)
        return response.json()

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._send(
            "POST",
            table,
            json=[jsonable_encoder(row)],
            headers=self._headers(prefer="return=representation"),
        )
        self._check(response, "insert", table)

        data = response.json()
        if not data:
            raise RowStoreError(f"insert on {table} returned no row", table=table)
        logger.info(f"Inserted {table} row {data[0].get('id')}")
        return data[0]

    async def update(self, table: str, row_id: str, fields: Dict[str, Any]) -> None:
        response = await self._send(
            "PATCH",
            table,
            params={"id": f"eq.{row_id}"},
            json=jsonable_encoder(fields),
            headers=self._headers(prefer="return=representation"),
        )
        self._check(response, "update", table)
        if response.json() == []:
            raise RowNotFoundError(f"{table} row {row_id} not found", table=table, status_code=404)
        logger.info(f"Updated {table} row {row_id}: {list(fields.keys())}")

    async def delete(self, table: str, row_id: str) -> None:
        response = await self._send(
            "DELETE",
            table,
            params={"id": f"eq.{row_id}"},
            headers=self._headers(prefer="return=representation"),
        )
        self._check(response, "delete", table)
        if response.json() == []:
            raise RowNotFoundError(f"{table} row {row_id} not found", table=table, status_code=404)
        logger.info(f"Deleted {table} row {row_id}")

    async def aclose(self) -> None:
        await self.client.aclose()
