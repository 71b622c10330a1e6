"""Row store interface over the three application tables."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

Row = dict  # {"id": ..., <camelCase field>: value, ...}


@dataclass(frozen=True)
class Tables:
    """Names of the tables backing each collection."""

    rates: str = "Parking Rates"
    registrations: str = "Parking Registrations"
    exemptions: str = "Staff Exemptions"


class RowStore(ABC):
    """
    Async CRUD access to a spreadsheet-like row store.

    Rows are flat dicts: the store-assigned "id" plus the record's fields.
    Implementations raise NotFoundError from update/delete on unknown ids
    and BackingStoreError (or BackingStoreTimeoutError) when the store
    cannot be reached.
    """

    name: str = "abstract"

    def __init__(self, tables: Optional[Tables] = None):
        self.tables = tables or Tables()

    @abstractmethod
    async def all(self, table: str, match: Optional[dict] = None) -> list[Row]:
        """Return every row of a table, optionally filtered by field equality."""

    @abstractmethod
    async def get(self, table: str, row_id: str) -> Optional[Row]:
        """Return one row, or None if the id is unknown."""

    @abstractmethod
    async def create(self, table: str, fields: dict) -> Row:
        """Insert a row and return it with its assigned id."""

    @abstractmethod
    async def update(self, table: str, row_id: str, fields: dict) -> Row:
        """Merge fields into an existing row and return the result."""

    @abstractmethod
    async def delete(self, table: str, row_id: str) -> None:
        """Hard-delete a row."""

    async def close(self) -> None:
        """Release client resources."""
