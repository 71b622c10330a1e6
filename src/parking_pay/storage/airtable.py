"""Airtable-backed row store."""

import logging
import time
from typing import Any, Callable, Optional

import requests
from pyairtable import Api
from pyairtable.formulas import match as match_formula

from ..errors import BackingStoreError, BackingStoreTimeoutError, NotFoundError
from ..metrics import record_store_error, record_store_latency
from ..timeouts import call_blocking
from .base import Row, RowStore, Tables

logger = logging.getLogger(__name__)


def _to_row(record: dict) -> Row:
    """Flatten an Airtable record into {"id": ..., **fields}."""
    return {"id": record["id"], **record.get("fields", {})}


class AirtableRowStore(RowStore):
    """
    Wrapper for the Airtable REST API via pyairtable.

    pyairtable is synchronous, so every call runs in a worker thread
    under an explicit deadline. Transport and HTTP failures are mapped
    onto the application's BackingStoreError family.
    """

    name = "airtable"

    def __init__(
        self,
        api_key: str,
        base_id: str,
        tables: Optional[Tables] = None,
        timeout_seconds: float = 10.0,
    ):
        """
        Initialize the Airtable store.

        Args:
            api_key: Personal access token
            base_id: Base identifier ("app...")
            tables: Table names for rates, registrations and exemptions
            timeout_seconds: Deadline applied to every API call
        """
        super().__init__(tables)
        self.base_id = base_id
        self.timeout_seconds = timeout_seconds
        self._api = Api(api_key, timeout=(timeout_seconds, timeout_seconds))
        self._tables: dict[str, Any] = {}

    def _table(self, name: str):
        if name not in self._tables:
            self._tables[name] = self._api.table(self.base_id, name)
        return self._tables[name]

    async def _call(
        self, operation: str, table: str, func: Callable, *args, **kwargs
    ) -> Any:
        description = f"Airtable {operation} on '{table}'"
        started = time.perf_counter()
        try:
            return await call_blocking(
                func,
                *args,
                timeout=self.timeout_seconds,
                timeout_error=BackingStoreTimeoutError,
                call_name=description,
                **kwargs,
            )
        except BackingStoreTimeoutError:
            record_store_error(operation)
            logger.error(f"{description} timed out")
            raise
        except requests.exceptions.Timeout as e:
            record_store_error(operation)
            logger.error(f"{description} timed out: {e}")
            raise BackingStoreTimeoutError(f"{description} timed out") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 404:
                raise NotFoundError(f"Record not found in {table}") from e
            record_store_error(operation)
            logger.error(f"{description} failed: {e}")
            raise BackingStoreError(f"{description} failed: {e}") from e
        except requests.exceptions.RequestException as e:
            record_store_error(operation)
            logger.error(f"{description} failed: {e}")
            raise BackingStoreError(f"{description} failed: {e}") from e
        finally:
            record_store_latency(operation, time.perf_counter() - started)

    async def all(self, table: str, match: Optional[dict] = None) -> list[Row]:
        options = {}
        if match:
            options["formula"] = match_formula(match)
        records = await self._call("all", table, self._table(table).all, **options)
        return [_to_row(r) for r in records]

    async def get(self, table: str, row_id: str) -> Optional[Row]:
        try:
            record = await self._call("get", table, self._table(table).get, row_id)
        except NotFoundError:
            return None
        return _to_row(record)

    async def create(self, table: str, fields: dict) -> Row:
        record = await self._call(
            "create", table, self._table(table).create, fields, typecast=True
        )
        return _to_row(record)

    async def update(self, table: str, row_id: str, fields: dict) -> Row:
        record = await self._call(
            "update", table, self._table(table).update, row_id, fields, typecast=True
        )
        return _to_row(record)

    async def delete(self, table: str, row_id: str) -> None:
        await self._call("delete", table, self._table(table).delete, row_id)

    async def close(self) -> None:
        self._api.session.close()
