"""Row store module."""

from .airtable import AirtableRowStore
from .base import Row, RowStore, Tables
from .memory import InMemoryRowStore

__all__ = ["AirtableRowStore", "InMemoryRowStore", "Row", "RowStore", "Tables"]
