"""In-memory row store for development without Airtable credentials."""

import copy
import itertools
import logging
from typing import Optional

from ..errors import NotFoundError
from .base import Row, RowStore, Tables

logger = logging.getLogger(__name__)


class InMemoryRowStore(RowStore):
    """
    Row store kept in process memory.

    Ids are assigned sequentially in Airtable's "rec" + 14 character
    shape, so a fresh store always produces the same ids. Data does not
    survive a restart.
    """

    name = "memory"

    def __init__(self, tables: Optional[Tables] = None):
        super().__init__(tables)
        self._rows: dict[str, dict[str, dict]] = {}
        self._ids = itertools.count(1)

    def _table(self, table: str) -> dict[str, dict]:
        return self._rows.setdefault(table, {})

    @staticmethod
    def _row(row_id: str, fields: dict) -> Row:
        return {"id": row_id, **copy.deepcopy(fields)}

    async def all(self, table: str, match: Optional[dict] = None) -> list[Row]:
        rows = [self._row(row_id, f) for row_id, f in self._table(table).items()]
        if match:
            rows = [
                r for r in rows if all(r.get(k) == v for k, v in match.items())
            ]
        return rows

    async def get(self, table: str, row_id: str) -> Optional[Row]:
        fields = self._table(table).get(row_id)
        if fields is None:
            return None
        return self._row(row_id, fields)

    async def create(self, table: str, fields: dict) -> Row:
        row_id = f"rec{next(self._ids):014d}"
        self._table(table)[row_id] = copy.deepcopy(fields)
        logger.debug(f"Created {table} row {row_id}")
        return self._row(row_id, fields)

    async def update(self, table: str, row_id: str, fields: dict) -> Row:
        rows = self._table(table)
        if row_id not in rows:
            raise NotFoundError(f"Record '{row_id}' not found in {table}")
        rows[row_id].update(copy.deepcopy(fields))
        return self._row(row_id, rows[row_id])

    async def delete(self, table: str, row_id: str) -> None:
        rows = self._table(table)
        if row_id not in rows:
            raise NotFoundError(f"Record '{row_id}' not found in {table}")
        del rows[row_id]
